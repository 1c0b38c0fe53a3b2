#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from bol_export.config import config_path, load_settings
from bol_export.errors import ExportError, UnknownMonthError
from bol_export.exporter import (
    ExportRequest,
    resolve_token,
    run_export,
    session_from_settings,
)
from bol_export.log_setup import setup_logging
from bol_export.utils.dates import DUTCH_MONTHS, cutoff_date, month_number

log = logging.getLogger("bol.export.cli")


def _month_arg(value: str) -> int:
    try:
        return month_number(value)
    except UnknownMonthError as e:
        raise argparse.ArgumentTypeError(
            f"{e} (usar 1-12 o {', '.join(DUTCH_MONTHS)})"
        ) from None


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="bol-export",
        description="Exporta el historial de pedidos de bol.com a CSV (bol_orders.csv).",
    )
    ap.add_argument(
        "--year", type=int, default=date.today().year,
        help="Año de corte (default: año actual)",
    )
    ap.add_argument(
        "--month", type=_month_arg, default=1,
        help="Mes de corte: nombre en neerlandés (maart) o número (default: januari)",
    )
    ap.add_argument("--token", help="Token CSRF (si no, BOL_CSRF_TOKEN o la página de pedidos)")
    ap.add_argument("--cookie", help="Header Cookie de una sesión iniciada")
    ap.add_argument("--config", help=f"Ruta del YAML (default: {config_path()})")
    ap.add_argument("--out-dir", help="Carpeta de salida")
    ap.add_argument("--delay", type=float, help="Segundos entre páginas")
    ap.add_argument("--max-pages", type=int, help="Cortar después de N páginas (0 = sin límite)")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING...")
    ap.add_argument("--quiet", action="store_true", help="Solo advertencias y errores")

    args = ap.parse_args(argv)
    if not 1 <= args.year <= 9999:
        ap.error(f"--year fuera de rango: {args.year}")
    if args.delay is not None and args.delay < 0:
        ap.error("--delay no puede ser negativo")
    if args.max_pages is not None and args.max_pages < 0:
        ap.error("--max-pages no puede ser negativo")
    return args


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ExportError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.cookie:
        settings.api.cookie = args.cookie
    if args.out_dir:
        settings.export.out_dir = Path(args.out_dir)
    if args.delay is not None:
        settings.export.delay_s = args.delay
    if args.max_pages is not None:
        settings.export.max_pages = args.max_pages

    level = "WARNING" if args.quiet else (args.log_level or settings.logging.level)
    setup_logging(level, settings.logging.file)

    cutoff = cutoff_date(args.year, args.month)

    with session_from_settings(settings) as session:
        try:
            token = resolve_token(args.token, settings, session)
        except ExportError as e:
            log.error("%s", e)
            print(f"ERROR: [{e.code.value}] {e}", file=sys.stderr)
            return 1

        outcome = run_export(ExportRequest(cutoff, token), settings, session=session)

    if not outcome.ok:
        print(f"Exportación fallida: {outcome.message}", file=sys.stderr)
        return 1

    print(f"OK - {outcome.message}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
