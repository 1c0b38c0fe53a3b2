from datetime import date

import pytest
import requests

from conftest import FakeResponse, FakeSession, make_order, make_page

from bol_export.config import Settings
from bol_export.errors import ErrorCode, MissingCredentialError
from bol_export.exporter import ExportRequest, resolve_token, run_export, write_csv


@pytest.fixture
def settings(tmp_path):
    s = Settings()
    s.export.out_dir = tmp_path / "out"
    s.export.delay_s = 0
    return s


def test_end_to_end_writes_csv(settings, fake_sleep):
    session = FakeSession([
        make_page(
            make_order("10 maart 2024", "123", [
                {"productTitle": "Widget", "quantity": 2, "pricePerPiece": "€ 5,00"},
            ]),
            more=None,
        )
    ])
    outcome = run_export(
        ExportRequest(date(2024, 1, 1), "tok"), settings, session=session, sleep=fake_sleep
    )

    assert outcome.ok, outcome.message
    assert outcome.path == settings.export.out_dir / "bol_orders.csv"
    assert outcome.order_count == 1
    assert outcome.row_count == 1
    assert outcome.logs == ["1: 2024-03-10 - 2024-03-10"]
    assert outcome.path.read_text(encoding="utf-8") == (
        "orderDate,orderNumber,productTitle,quantity,pricePerPiece,totalPrice,payee\n"
        '"2024-03-10","123","BOL.COM 123 - Widget",2,5,10,"bol temp"'
    )
    # sesión ajena: no se cierra
    assert session.closed is False


def test_missing_token_aborts_before_request(settings):
    session = FakeSession([])
    outcome = run_export(ExportRequest(date(2024, 1, 1), "  "), settings, session=session)
    assert not outcome.ok
    assert outcome.errors[0][0] == ErrorCode.MISSING_CREDENTIAL
    assert session.urls == []
    assert not settings.export.out_dir.exists()


def test_network_failure_is_reported_and_nothing_written(settings, fake_sleep):
    session = FakeSession([
        make_page(make_order("10 maart 2024"), more="/p2"),
        FakeResponse({}, status_code=500),
    ])
    outcome = run_export(
        ExportRequest(date(2024, 1, 1), "tok"), settings, session=session, sleep=fake_sleep
    )
    assert not outcome.ok
    assert outcome.errors[0][0] == ErrorCode.NETWORK
    assert outcome.message.startswith("[NETWORK]")
    assert not (settings.export.out_dir / "bol_orders.csv").exists()


def test_rerun_after_failure_succeeds(settings, fake_sleep):
    request = ExportRequest(date(2024, 1, 1), "tok")
    failed = run_export(
        request, settings, session=FakeSession([requests.ConnectionError("x")]), sleep=fake_sleep
    )
    assert not failed.ok
    ok = run_export(
        request, settings, session=FakeSession([make_page()]), sleep=fake_sleep
    )
    assert ok.ok
    assert ok.row_count == 0


def test_bad_price_is_reported(settings, fake_sleep):
    session = FakeSession([
        make_page(make_order("10 maart 2024", items=[
            {"productTitle": "x", "quantity": 1, "pricePerPiece": "n.v.t."},
        ]))
    ])
    outcome = run_export(
        ExportRequest(date(2024, 1, 1), "tok"), settings, session=session, sleep=fake_sleep
    )
    assert outcome.errors[0][0] == ErrorCode.INVALID_PRICE


def test_progress_callback(settings, fake_sleep):
    seen = []
    session = FakeSession([
        make_page(make_order("10 maart 2024"), more="/p2"),
        make_page(make_order("1 december 2023")),
    ])
    run_export(
        ExportRequest(date(2024, 1, 1), "tok"), settings,
        session=session, sleep=fake_sleep, on_progress=seen.append,
    )
    assert seen == ["1: 2024-03-10 - 2024-03-10", "2: 2023-12-01 - 2023-12-01"]


def test_write_csv_replaces_existing(tmp_path):
    write_csv("a", tmp_path, "bol_orders.csv")
    p = write_csv("b", tmp_path, "bol_orders.csv")
    assert p.read_text(encoding="utf-8") == "b"
    assert [f.name for f in tmp_path.iterdir()] == ["bol_orders.csv"]


# ---------- resolve_token ----------


def test_resolve_token_prefers_explicit():
    s = Settings()
    s.api.csrf_token = "from-config"
    assert resolve_token(" cli ", s) == "cli"
    assert resolve_token(None, s) == "from-config"


def test_resolve_token_scrapes_page():
    s = Settings()
    s.api.cookie = "session=1"
    html = '<html><head><meta name="csrf-token" content="abc123"></head></html>'
    session = FakeSession([FakeResponse(text=html)])
    assert resolve_token(None, s, session) == "abc123"
    assert session.urls == ["https://www.bol.com/nl/rnwy/account/bestellingen/overzicht"]


def test_resolve_token_missing():
    s = Settings()
    s.api.cookie = "session=1"
    session = FakeSession([FakeResponse(text="<html></html>")])
    with pytest.raises(MissingCredentialError):
        resolve_token(None, s, session)
    with pytest.raises(MissingCredentialError):
        resolve_token("", Settings())


def test_impossible_order_date_is_reported_as_malformed(settings, fake_sleep):
    session = FakeSession([make_page(make_order("31 februari 2024"))])
    outcome = run_export(
        ExportRequest(date(2024, 1, 1), "tok"), settings, session=session, sleep=fake_sleep
    )
    assert not outcome.ok
    assert outcome.errors[0][0] == ErrorCode.MALFORMED_PAGE
