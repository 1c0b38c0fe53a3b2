# bol_export/csv_export.py
from __future__ import annotations

import csv
import io
from dataclasses import astuple, dataclass
from typing import Iterable

from bol_export.orders_client import Order
from bol_export.utils.prices import parse_price

HEADERS = [
    "orderDate",
    "orderNumber",
    "productTitle",
    "quantity",
    "pricePerPiece",
    "totalPrice",
    "payee",
]
PAYEE = "bol temp"


@dataclass(frozen=True)
class ExportRow:
    date: str
    order_number: str
    description: str
    quantity: int
    unit_price: float
    line_total: float
    payee: str = PAYEE


def describe(order_number: str, product_title: str) -> str:
    return f"BOL.COM {order_number} - {product_title}"


def build_rows(orders: Iterable[Order]) -> list[ExportRow]:
    """Una fila por artículo, respetando el orden de órdenes y artículos."""
    rows: list[ExportRow] = []
    for order in orders:
        day = order.iso_date
        for item in order.items:
            price = parse_price(item.price_per_piece)
            rows.append(
                ExportRow(
                    date=day,
                    order_number=order.order_number,
                    description=describe(order.order_number, item.product_title),
                    quantity=item.quantity,
                    unit_price=price,
                    line_total=item.quantity * price,
                )
            )
    return rows


def _number(value: float | int) -> float | int:
    # 5.0 -> 5, 12.5 se queda igual
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def rows_to_csv(rows: Iterable[ExportRow]) -> str:
    buf = io.StringIO()
    buf.write(",".join(HEADERS))
    buf.write("\n")
    # QUOTE_NONNUMERIC: texto siempre entre comillas ("" para escapar), números sin
    writer = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for row in rows:
        writer.writerow(
            [_number(v) if isinstance(v, (int, float)) else v for v in astuple(row)]
        )
    text = buf.getvalue()
    return text[:-1] if text.endswith("\n") else text


def orders_to_csv(orders: Iterable[Order]) -> str:
    return rows_to_csv(build_rows(orders))
