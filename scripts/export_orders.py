# scripts/export_orders.py
import sys

from bol_export.cli import main

if __name__ == "__main__":
    sys.exit(main())
