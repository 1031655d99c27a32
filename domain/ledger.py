# domain/ledger.py

import itertools
import math
import secrets
import time
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from domain.catalog import is_known_rota
from domain.models import DailyLedger, Delivery

_id_counter = itertools.count(1)


class ValidationError(ValueError):
    """Input rejected before any state change."""


def empty_ledger(date: str) -> DailyLedger:
    return DailyLedger(date=date)


def coerce_quantity(value: Any) -> int:
    """
    Turn raw form input into a quantity.

    Negative, non-numeric and non-finite values become 0.
    Examples: "12" -> 12, -3 -> 0, "abc" -> 0, None -> 0, 7.9 -> 7
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0
    return int(number)


def coerce_items(items: Mapping[str, Any] | None) -> Dict[str, int]:
    return {str(p): coerce_quantity(q) for p, q in (items or {}).items()}


def _copy(ledger: DailyLedger) -> DailyLedger:
    # fresh containers at every level so callers can compare old vs new
    return DailyLedger(
        date=ledger.date,
        rota_inbound={r: dict(m) for r, m in ledger.rota_inbound.items()},
        client_deliveries={r: list(dels) for r, dels in ledger.client_deliveries.items()},
    )


def _check_rota(rota: str) -> None:
    if not is_known_rota(rota):
        raise ValidationError(f"Rota desconhecida: {rota}")


def set_inbound(ledger: DailyLedger, rota: str, new_map: Mapping[str, Any]) -> DailyLedger:
    """Replace the whole inbound map of `rota`."""
    _check_rota(rota)
    updated = _copy(ledger)
    updated.rota_inbound[rota] = coerce_items(new_map)
    return updated


def new_delivery(rota: str, client_name: str, items: Mapping[str, Any]) -> Delivery:
    now = datetime.now(timezone.utc)
    millis = int(time.time() * 1000)
    delivery_id = f"{rota}-{millis}-{next(_id_counter)}{secrets.token_hex(2)}"
    return Delivery(
        id=delivery_id,
        client_name=(client_name or "").strip(),
        timestamp=now.isoformat().replace("+00:00", "Z"),
        items=coerce_items(items),
        rota=rota,
    )


def add_delivery(ledger: DailyLedger, rota: str, delivery: Delivery) -> DailyLedger:
    """Prepend `delivery` to the route's list (newest first)."""
    _check_rota(rota)
    if not (delivery.client_name or "").strip():
        raise ValidationError("Nome do cliente não pode ficar vazio")

    clean = Delivery(
        id=delivery.id,
        client_name=delivery.client_name.strip(),
        timestamp=delivery.timestamp,
        items=coerce_items(delivery.items),
        rota=rota,
    )

    updated = _copy(ledger)
    updated.client_deliveries[rota] = [clean] + updated.client_deliveries.get(rota, [])
    return updated


def delete_delivery(ledger: DailyLedger, rota: str, delivery_id: str) -> DailyLedger:
    """
    Remove the delivery with `delivery_id`.

    An unknown id is not an error: another session may have deleted it first.
    """
    updated = _copy(ledger)
    current = updated.client_deliveries.get(rota)
    if not current:
        return updated
    updated.client_deliveries[rota] = [d for d in current if d.id != delivery_id]
    return updated
