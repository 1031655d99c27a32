from datetime import datetime

from domain.ledger import add_delivery, set_inbound
from domain.reconciler import reconcile
from services.report_service import format_report, local_time, report_filename


def _day(ledger, make_delivery):
    ledger = set_inbound(ledger, "Centro", {"Café": 100, "Leite": 0})
    ledger = set_inbound(ledger, "Barra", {"Açucar": 10})
    ledger = add_delivery(ledger, "Centro", make_delivery("d1", "Café X", {"Café": 30}, timestamp="2024-05-01T12:00:00Z"))
    ledger = add_delivery(ledger, "Centro", make_delivery("d2", "Padaria Sol", {"Leite": 0, "Café": 5}, timestamp="2024-05-01T13:30:00Z"))
    return ledger


def test_report_filename_embeds_date():
    assert report_filename("2024-05-01") == "Relatorio_Cloud_ValorCafe_2024-05-01.txt"


def test_format_is_deterministic(ledger, make_delivery):
    ledger = _day(ledger, make_delivery)
    report = reconcile(ledger)

    assert format_report(ledger, report) == format_report(ledger, reconcile(ledger))


def test_format_sections_and_columns(ledger, make_delivery):
    ledger = _day(ledger, make_delivery)

    text = format_report(ledger, reconcile(ledger))
    lines = text.splitlines()

    assert lines[0] == "VALORCAFE - RELATÓRIO CONSOLIDADO CLOUD - 2024-05-01"
    assert "BALANÇO GERAL DO DIA" in lines
    assert f"{'Café':<20} {100:>8} {35:>8} {65:>8}" in lines
    # routes in catalog order, idle ones omitted
    assert text.index("[REGIONAL: Barra]") < text.index("[REGIONAL: Centro]")
    assert "[REGIONAL: Tijuca]" not in text


def test_format_omits_idle_products(ledger, make_delivery):
    ledger = _day(ledger, make_delivery)

    text = format_report(ledger, reconcile(ledger))

    assert "Leite" not in text
    assert "Chocolate" not in text


def test_timeline_newest_first_in_local_time(ledger, make_delivery, monkeypatch):
    monkeypatch.setattr("config.APP_TIMEZONE", "America/Sao_Paulo")
    ledger = _day(ledger, make_delivery)

    text = format_report(ledger, reconcile(ledger))

    # America/Sao_Paulo is UTC-3
    assert text.index("> Padaria Sol (10:30:00)") < text.index("> Café X (09:00:00)")
    assert "    . Café: 5" in text


def test_generated_at_is_printed_when_given(ledger):
    text = format_report(ledger, reconcile(ledger), generated_at=datetime(2024, 5, 1, 18, 5, 0))

    assert "Gerado em: 01/05/2024 18:05:00" in text
    assert "Sem movimentação registrada." in text


def test_local_time_keeps_unparseable_values():
    assert local_time("ontem") == "ontem"
