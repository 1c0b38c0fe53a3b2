# bol_export/utils/prices.py
from __future__ import annotations

import re

from bol_export.errors import InvalidPriceFormatError

_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def parse_price(value: str) -> float:
    """'€ 12,50' -> 12.5

    Solo contempla la coma decimal; separadores de miles ('€1.234,56')
    no están soportados.
    """
    s = str(value if value is not None else "")
    s = s.replace("€", "").strip().replace(",", ".", 1)
    if not _NUMERIC.match(s):
        raise InvalidPriceFormatError(str(value))
    return float(s)
