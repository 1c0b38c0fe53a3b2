# -*- coding: utf-8 -*-
"""
Flujo completo de exportación: token → órdenes → CSV → archivo.

Cómo usar:
    from bol_export.config import load_settings
    from bol_export.exporter import ExportRequest, run_export
    from bol_export.utils.dates import cutoff_date

    settings = load_settings()
    request = ExportRequest(cutoff_date=cutoff_date(2024, "maart"), auth_token="...")
    outcome = run_export(request, settings)
    if outcome.ok:
        print(outcome.path)

Todo error (token faltante, red, JSON raro, precio o mes ilegible) se captura
acá una sola vez y vuelve dentro de ExportOutcome; no se escribe nada parcial,
así que basta con volver a llamar run_export.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import requests

from bol_export.config import Settings
from bol_export.csrf import fetch_csrf_token, orders_page_url
from bol_export.csv_export import build_rows, rows_to_csv
from bol_export.errors import ErrorCode, ExportError, MissingCredentialError
from bol_export.orders_client import build_session, fetch_all_orders

log = logging.getLogger("bol.export.exporter")


@dataclass
class ExportRequest:
    cutoff_date: date
    auth_token: str


@dataclass
class ExportOutcome:
    ok: bool
    path: Optional[Path] = None
    order_count: int = 0
    row_count: int = 0
    errors: List[Tuple[ErrorCode, str]] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.ok:
            return f"{self.row_count} filas ({self.order_count} órdenes) en {self.path}"
        return "; ".join(f"[{code.value}] {msg}" for code, msg in self.errors)


def session_from_settings(settings: Settings) -> requests.Session:
    api = settings.api
    return build_session(
        cookie=api.cookie,
        user_agent=api.user_agent,
        timeout_s=api.timeout,
        retries=api.retries,
        backoff=api.backoff,
    )


def resolve_token(
    explicit: str | None,
    settings: Settings,
    session: requests.Session | None = None,
) -> str:
    """Prioridad: valor explícito → settings/BOL_CSRF_TOKEN → meta de la página."""
    for candidate in (explicit, settings.api.csrf_token):
        if candidate and candidate.strip():
            return candidate.strip()

    if session is not None and settings.api.cookie:
        token = fetch_csrf_token(session, orders_page_url(settings.api.base_url))
        if token:
            return token

    raise MissingCredentialError("No se encontró el token CSRF")


def write_csv(text: str, out_dir: Path, filename: str) -> Path:
    """Escribe a un temporal y renombra, para no dejar archivos a medias."""
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / filename
    tmp = target.with_suffix(target.suffix + ".part")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, target)
    return target


def run_export(
    request: ExportRequest,
    settings: Settings | None = None,
    *,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
    on_progress: Callable[[str], None] | None = None,
) -> ExportOutcome:
    settings = settings or Settings()
    logs: List[str] = []
    errors: List[Tuple[ErrorCode, str]] = []

    def _log_info(msg: str) -> None:
        logs.append(msg)
        if on_progress is not None:
            on_progress(msg)

    def _log_err(code: ErrorCode, msg: str) -> None:
        logs.append(f"[{code.value}] {msg}")
        errors.append((code, msg))
        log.error("Exportación fallida: %s: %s", code.value, msg)

    own_session = session is None
    try:
        token = (request.auth_token or "").strip()
        if not token:
            raise MissingCredentialError("No se encontró el token CSRF")

        session = session or session_from_settings(settings)
        log.info("Exportando órdenes desde %s", request.cutoff_date.isoformat())

        orders = fetch_all_orders(
            session,
            token,
            request.cutoff_date,
            base_url=settings.api.base_url,
            delay_s=settings.export.delay_s,
            max_pages=settings.export.max_pages,
            sleep=sleep,
            on_progress=_log_info,
        )
        rows = build_rows(orders)
        path = write_csv(
            rows_to_csv(rows), Path(settings.export.out_dir), settings.export.filename
        )
        log.info("CSV guardado: %d filas en %s", len(rows), path)
        return ExportOutcome(
            ok=True,
            path=path,
            order_count=len(orders),
            row_count=len(rows),
            errors=errors,
            logs=logs,
        )

    except ExportError as ee:
        _log_err(ee.code, str(ee))
    except Exception as ex:
        log.exception("Error no controlado durante la exportación")
        _log_err(ErrorCode.UNKNOWN, f"Error no controlado: {ex}")
    finally:
        if own_session and session is not None:
            session.close()

    return ExportOutcome(ok=False, errors=errors, logs=logs)
