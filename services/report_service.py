# services/report_service.py

from datetime import datetime
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

import config
from domain.catalog import PRODUCTS
from domain.models import DailyLedger, ProductBalance, ReconciliationReport

RULE = "=" * 64
THIN_RULE = "-" * 64
PRODUCT_WIDTH = 20
QTY_WIDTH = 8


def report_filename(date: str) -> str:
    return f"Relatorio_Cloud_ValorCafe_{date}.txt"


def local_time(timestamp: str) -> str:
    """
    ISO instant -> "HH:MM:SS" in APP_TIMEZONE. Unparseable values are shown raw.
    """
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return str(timestamp)
    if moment.tzinfo is None:
        return moment.strftime("%H:%M:%S")
    return moment.astimezone(ZoneInfo(config.APP_TIMEZONE)).strftime("%H:%M:%S")


def _catalog_order(items: Dict[str, int]) -> List[Tuple[str, int]]:
    known = [(p, items[p]) for p in PRODUCTS if p in items]
    extra = sorted((p, q) for p, q in items.items() if p not in PRODUCTS)
    return known + extra


def _balance_header() -> str:
    return (
        f"{'Produto'.ljust(PRODUCT_WIDTH)} "
        f"{'Saída'.rjust(QTY_WIDTH)} "
        f"{'Entregue'.rjust(QTY_WIDTH)} "
        f"{'Retorno'.rjust(QTY_WIDTH)}"
    )


def _balance_line(balance: ProductBalance) -> str:
    return (
        f"{balance.product.ljust(PRODUCT_WIDTH)} "
        f"{str(balance.inbound).rjust(QTY_WIDTH)} "
        f"{str(balance.delivered).rjust(QTY_WIDTH)} "
        f"{str(balance.remaining).rjust(QTY_WIDTH)}"
    )


def _totals_line(total_in: int, total_out: int) -> str:
    return (
        f"{'TOTAL'.ljust(PRODUCT_WIDTH)} "
        f"{str(total_in).rjust(QTY_WIDTH)} "
        f"{str(total_out).rjust(QTY_WIDTH)} "
        f"{str(total_in - total_out).rjust(QTY_WIDTH)}"
    )


def format_report(
        ledger: DailyLedger,
        report: ReconciliationReport,
        generated_at: Optional[datetime] = None,
) -> str:
    """
    Plain-text daily report.

    Sections:
      1. global balance per product
      2. per route: balance + delivery timeline (newest first)

    Idle products and routes are left out. The same inputs always give the
    same text; `generated_at` is only printed when passed.
    """
    out: List[str] = [f"VALORCAFE - RELATÓRIO CONSOLIDADO CLOUD - {ledger.date}"]
    if generated_at is not None:
        out.append(f"Gerado em: {generated_at.strftime('%d/%m/%Y %H:%M:%S')}")
    out.append(RULE)
    out.append("BALANÇO GERAL DO DIA")
    out.append(RULE)

    if report.products:
        out.append(_balance_header())
        out.extend(_balance_line(b) for b in report.products)
        out.append(THIN_RULE)
        out.append(_totals_line(report.total_inbound, report.total_delivered))
    else:
        out.append("Sem movimentação registrada.")
    out.append("")

    for route in report.ordered_routes():
        out.append(f"[REGIONAL: {route.rota}]")
        out.append(THIN_RULE)

        if route.lines:
            out.append(_balance_header())
            out.extend(_balance_line(b) for b in route.lines)
            out.append(_totals_line(route.total_inbound, route.total_delivered))

        out.append("")
        out.append(f"Entregas ({route.delivery_count}):")
        for delivery in ledger.deliveries_for(route.rota):
            out.append(f"  > {delivery.client_name} ({local_time(delivery.timestamp)})")
            for product, qty in _catalog_order(delivery.items):
                if qty > 0:
                    out.append(f"    . {product}: {qty}")
        out.append("")

    return "\n".join(out).rstrip("\n") + "\n"
