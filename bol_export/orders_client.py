# bol_export/orders_client.py
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from bol_export.config import DEFAULT_BASE_URL
from bol_export.errors import MalformedPageError, NetworkError
from bol_export.utils.dates import format_dutch_date, parse_dutch_date

log = logging.getLogger("bol.export.orders")

ORDER_OVERVIEW_PATH = "/nl/rnwy/ajax/order_overview"


@dataclass(frozen=True)
class LineItem:
    product_title: str
    quantity: int
    price_per_piece: str  # texto tal cual viene: "€ 12,50"


@dataclass(frozen=True)
class Order:
    order_date: str  # "10 maart 2024"
    order_number: str
    items: tuple[LineItem, ...]

    @property
    def iso_date(self) -> str:
        return format_dutch_date(self.order_date)

    @property
    def parsed_date(self) -> date:
        return date.fromisoformat(self.iso_date)


@dataclass
class FetchPage:
    orders: list[Order]
    more_orders_url: Optional[str] = None


# ============= Parseo / validación del JSON


def _require(obj: dict, key: str, where: str) -> Any:
    if key not in obj or obj[key] is None:
        raise MalformedPageError(f"Falta '{key}' en {where}")
    return obj[key]


def _parse_item(raw: Any, where: str) -> LineItem:
    if not isinstance(raw, dict):
        raise MalformedPageError(f"{where} no es un objeto")
    title = _require(raw, "productTitle", where)
    qty = _require(raw, "quantity", where)
    price = _require(raw, "pricePerPiece", where)
    if isinstance(qty, bool):
        raise MalformedPageError(f"quantity inválida en {where}: {qty!r}")
    try:
        qty_int = int(qty)
    except (TypeError, ValueError):
        raise MalformedPageError(f"quantity inválida en {where}: {qty!r}") from None
    if qty_int != qty and str(qty_int) != str(qty).strip():
        raise MalformedPageError(f"quantity no entera en {where}: {qty!r}")
    if qty_int < 1:
        raise MalformedPageError(f"quantity < 1 en {where}: {qty!r}")
    return LineItem(product_title=str(title), quantity=qty_int, price_per_piece=str(price))


def _parse_order(raw: Any, idx: int) -> Order:
    where = f"orders[{idx}]"
    if not isinstance(raw, dict):
        raise MalformedPageError(f"{where} no es un objeto")
    order_date = _require(raw, "orderDate", where)
    if not isinstance(order_date, str):
        raise MalformedPageError(f"orderDate no es texto en {where}")
    try:
        parse_dutch_date(order_date)
    except ValueError as e:
        raise MalformedPageError(f"orderDate inválida en {where}: {e}") from e
    number = _require(raw, "orderNumber", where)
    items = _require(raw, "overviewOrderItems", where)
    if not isinstance(items, list):
        raise MalformedPageError(f"overviewOrderItems no es una lista en {where}")
    return Order(
        order_date=order_date,
        order_number=str(number),
        items=tuple(
            _parse_item(it, f"{where}.overviewOrderItems[{j}]")
            for j, it in enumerate(items)
        ),
    )


def parse_page(data: Any) -> FetchPage:
    """Valida el JSON de order_overview y lo convierte a FetchPage.

    Sin 'orders' (o null) se trata como página vacía y corta la paginación;
    cualquier otra forma inesperada lanza MalformedPageError.
    """
    if not isinstance(data, dict):
        raise MalformedPageError(
            f"Respuesta inesperada: se esperaba un objeto JSON, llegó {type(data).__name__}"
        )
    raw_orders = data.get("orders") or []
    if not isinstance(raw_orders, list):
        raise MalformedPageError("'orders' no es una lista")
    more = data.get("moreOrdersUrl") or None
    if more is not None and not isinstance(more, str):
        raise MalformedPageError("'moreOrdersUrl' no es texto")
    return FetchPage(
        orders=[_parse_order(o, i) for i, o in enumerate(raw_orders)],
        more_orders_url=more,
    )


# ============= HTTP


def build_session(
    *,
    cookie: str = "",
    user_agent: str | None = None,
    timeout_s: float = 20.0,
    retries: int = 0,
    backoff: float = 0.5,
) -> requests.Session:
    s = requests.Session()
    if retries > 0:
        policy = Retry(
            total=retries,
            backoff_factor=backoff,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=["GET"],
        )
        s.mount("https://", HTTPAdapter(max_retries=policy))
        s.mount("http://", HTTPAdapter(max_retries=policy))
    s.headers.update(
        {
            "Accept": "application/json, text/html;q=0.9",
            "X-Requested-With": "XMLHttpRequest",
        }
    )
    if user_agent:
        s.headers["User-Agent"] = user_agent
    if cookie:
        s.headers["Cookie"] = cookie
    s.request = _with_timeout(s.request, timeout_s)  # type: ignore
    return s


def _with_timeout(func, timeout_s: float):
    def wrapped(method, url, **kwargs):
        if "timeout" not in kwargs:
            kwargs["timeout"] = timeout_s
        return func(method, url, **kwargs)

    return wrapped


def mask_url(url: str) -> str:
    # No dejar el token en los logs
    return re.sub(r"(_csrf=)[^&]+", r"\1***", url)


def first_page_url(token: str, base_url: str = DEFAULT_BASE_URL) -> str:
    return (
        f"{base_url.rstrip('/')}{ORDER_OVERVIEW_PATH}"
        f"?fromOrderId=0&search=&_csrf={token}"
    )


def fetch_page(session: requests.Session, url: str) -> FetchPage:
    log.debug("GET %s", mask_url(url))
    try:
        resp = session.get(url)
        resp.raise_for_status()
        data = resp.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise NetworkError(
            f"HTTP {status} al pedir {mask_url(url)}", url=url, status=status
        ) from e
    except (requests.RequestException, ValueError) as e:
        raise NetworkError(f"Fallo al pedir {mask_url(url)}: {e}", url=url) from e
    return parse_page(data)


def fetch_all_orders(
    session: requests.Session,
    token: str,
    cutoff: date,
    *,
    base_url: str = DEFAULT_BASE_URL,
    delay_s: float = 1.0,
    max_pages: int = 0,
    sleep: Callable[[float], None] = time.sleep,
    on_progress: Callable[[str], None] | None = None,
) -> list[Order]:
    """Recorre order_overview página por página hasta pasar `cutoff`.

    Se detiene cuando:
      - una página llega sin órdenes,
      - la última orden (la más vieja) de la página es anterior a `cutoff`
        (esa página se incluye entera y se filtra al final),
      - no hay moreOrdersUrl,
      - se alcanzó `max_pages` (si es > 0).

    Solo se mira la última orden de cada página; si el servidor devolviera
    fechas fuera de orden se podría pedir una página de más o de menos.
    """
    next_url: str | None = first_page_url(token, base_url)
    collected: list[Order] = []
    pages = 0

    while next_url:
        page = fetch_page(session, next_url)
        if not page.orders:
            break

        pages += 1
        newest = page.orders[0].iso_date
        oldest = page.orders[-1].iso_date
        msg = f"{pages}: {oldest} - {newest}"
        log.info(msg)
        if on_progress is not None:
            on_progress(msg)

        collected.extend(page.orders)

        if date.fromisoformat(oldest) < cutoff:
            break
        if max_pages > 0 and pages >= max_pages:
            log.warning("Límite de %d páginas alcanzado; se corta la paginación", max_pages)
            break
        if not page.more_orders_url:
            break

        next_url = urljoin(base_url, page.more_orders_url)
        sleep(delay_s)

    return [o for o in collected if o.parsed_date >= cutoff]
