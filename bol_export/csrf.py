# bol_export/csrf.py
from __future__ import annotations

import logging
from typing import Optional

import requests
from bs4 import BeautifulSoup

from bol_export.config import DEFAULT_BASE_URL
from bol_export.errors import NetworkError

log = logging.getLogger("bol.export.csrf")

ORDERS_PAGE_PATH = "/nl/rnwy/account/bestellingen/overzicht"


def extract_csrf_token(html: str, meta_name: str = "csrf-token") -> Optional[str]:
    """Devuelve el content de <meta name="csrf-token"> o None."""
    name = meta_name.lower()
    soup = BeautifulSoup(html or "", "html.parser")
    tag = soup.find("meta", attrs={"name": lambda v: bool(v) and v.lower() == name})
    if tag is None:
        return None
    return (tag.get("content") or "").strip() or None


def orders_page_url(base_url: str = DEFAULT_BASE_URL) -> str:
    return base_url.rstrip("/") + ORDERS_PAGE_PATH


def fetch_csrf_token(
    session: requests.Session, url: str | None = None
) -> Optional[str]:
    """Baja la página de pedidos (con la cookie de la sesión) y lee el token."""
    url = url or orders_page_url()
    log.info("Leyendo token CSRF de %s", url)
    try:
        resp = session.get(url, headers={"Accept": "text/html"})
        resp.raise_for_status()
    except requests.RequestException as e:
        raise NetworkError(f"No se pudo abrir {url}: {e}", url=url) from e
    token = extract_csrf_token(resp.text)
    if not token:
        log.warning("La página %s no trae meta csrf-token (¿sesión expirada?)", url)
    return token
