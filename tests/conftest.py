from __future__ import annotations

from typing import Any

import pytest
import requests


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, text: str | None = None):
        self.payload = payload
        self.status_code = status_code
        self.text = text if text is not None else ""

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """Devuelve respuestas en orden y guarda las URLs pedidas."""

    def __init__(self, responses: list):
        self.responses = list(responses)
        self.urls: list[str] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.urls.append(url)
        if not self.responses:
            raise AssertionError(f"request inesperado: {url}")
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        if isinstance(r, FakeResponse):
            return r
        return FakeResponse(r)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def make_order(order_date: str, number: str = "1", items: list | None = None) -> dict:
    if items is None:
        items = [{"productTitle": "Widget", "quantity": 1, "pricePerPiece": "€ 5,00"}]
    return {"orderDate": order_date, "orderNumber": number, "overviewOrderItems": items}


def make_page(*orders: dict, more: str | None = None) -> dict:
    return {"orders": list(orders), "moreOrdersUrl": more}


@pytest.fixture
def sleeps():
    calls: list[float] = []
    return calls


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "BOL_EXPORT_HOME", "BOL_BASE_URL", "BOL_COOKIE", "BOL_CSRF_TOKEN",
        "BOL_TIMEOUT", "BOL_DELAY_S", "BOL_OUT_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
