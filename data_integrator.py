import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from supabase import create_client, Client

import config
from domain.ledger import coerce_items, coerce_quantity
from domain.models import DailyLedger, Delivery

logger = logging.getLogger(__name__)

INBOUND_TABLE = "inbound"
DELIVERIES_TABLE = "deliveries"
INBOUND_CONFLICT_COLS = ["date", "route", "product_name"]


def get_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    url = url or config.SUPABASE_URL
    key = key or config.SUPABASE_KEY
    if not url or not key:
        raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
    return create_client(url, key)


class RemoteStore:
    """
    Supabase persistence for the two ledger tables.

      inbound:    (date, route, product_name) -> quantity      upsert
      deliveries: id -> date, route, client_name, items, ts    insert / delete

    Every method returns (ok, message, data) and never raises for
    network or database failures.
    """

    def __init__(self, client: Client, schema: str = "public"):
        self.client = client
        self.schema = schema

    def _table(self, name: str):
        return self.client.schema(self.schema).table(name)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_inbound_rows(self, date: str) -> Tuple[bool, str, List[Dict[str, Any]]]:
        try:
            resp = (
                self._table(INBOUND_TABLE)
                .select("date, route, product_name, quantity")
                .eq("date", date)
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Fetch inbound failed: {resp.error}", []

            if not resp.data:
                return True, "No rows found", []

            return True, "Fetched", resp.data

        except Exception as e:
            return False, f"Unexpected error: {e}", []

    def fetch_delivery_rows(self, date: str) -> Tuple[bool, str, List[Dict[str, Any]]]:
        try:
            resp = (
                self._table(DELIVERIES_TABLE)
                .select("id, date, route, client_name, items, delivery_timestamp")
                .eq("date", date)
                .order("delivery_timestamp", desc=True)
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Fetch deliveries failed: {resp.error}", []

            if not resp.data:
                return True, "No rows found", []

            return True, "Fetched", resp.data

        except Exception as e:
            return False, f"Unexpected error: {e}", []

    def fetch_ledger(self, date: str) -> Tuple[bool, str, Optional[DailyLedger]]:
        """
        Rebuild the whole DailyLedger for `date` from both tables.
        """
        ok_in, msg_in, inbound_rows = self.fetch_inbound_rows(date)
        if not ok_in:
            return False, msg_in, None

        ok_del, msg_del, delivery_rows = self.fetch_delivery_rows(date)
        if not ok_del:
            return False, msg_del, None

        return True, "Fetched", rows_to_ledger(date, inbound_rows, delivery_rows)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_inbound(
            self,
            date: str,
            rota: str,
            items: Dict[str, int],
    ) -> Tuple[bool, str, Optional[List[Dict[str, Any]]]]:
        """
        Upsert one row per product of the route's inbound map.
        """
        payload = inbound_rows_for(date, rota, items)
        if not payload:
            return True, "Nothing to upsert", []

        try:
            resp = (
                self._table(INBOUND_TABLE)
                .upsert(payload, on_conflict=",".join(INBOUND_CONFLICT_COLS))
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Upsert inbound failed: {resp.error}", None

            return True, "Upserted", resp.data

        except Exception as e:
            return False, str(e), None

    def insert_delivery(
            self,
            date: str,
            delivery: Delivery,
    ) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
        try:
            resp = (
                self._table(DELIVERIES_TABLE)
                .insert(delivery_to_row(date, delivery))
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Insert delivery failed: {resp.error}", None

            inserted = resp.data[0] if resp.data else None
            return True, "Inserted", inserted

        except Exception as e:
            return False, str(e), None

    def delete_delivery(self, delivery_id: str) -> Tuple[bool, str, None]:
        try:
            resp = (
                self._table(DELIVERIES_TABLE)
                .delete()
                .eq("id", delivery_id)
                .execute()
            )

            if getattr(resp, "error", None):
                return False, f"Delete delivery failed: {resp.error}", None

            return True, "Deleted", None

        except Exception as e:
            return False, str(e), None


# ---------------------------------------------------------------------------
# Row <-> domain mapping
# ---------------------------------------------------------------------------

def inbound_rows_for(date: str, rota: str, items: Dict[str, int]) -> List[Dict[str, Any]]:
    return [
        {"date": date, "route": rota, "product_name": product, "quantity": int(qty)}
        for product, qty in items.items()
    ]


def delivery_to_row(date: str, delivery: Delivery) -> Dict[str, Any]:
    return {
        "id": delivery.id,
        "date": date,
        "route": delivery.rota,
        "client_name": delivery.client_name,
        "items": dict(delivery.items),
        "delivery_timestamp": delivery.timestamp,
    }


def _parse_items(raw: Any) -> Dict[str, int]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable items payload: %r", raw[:80])
            return {}
    if not isinstance(raw, dict):
        return {}
    return coerce_items(raw)


def rows_to_ledger(
        date: str,
        inbound_rows: List[Dict[str, Any]],
        delivery_rows: List[Dict[str, Any]],
) -> DailyLedger:
    """
    Build a DailyLedger from one-row-per-(route, product) inbound rows and
    one-row-per-delivery rows. Deliveries end up newest first.
    """
    ledger = DailyLedger(date=date)

    for row in inbound_rows:
        rota = row["route"]
        ledger.rota_inbound.setdefault(rota, {})[row["product_name"]] = coerce_quantity(row.get("quantity"))

    ordered = sorted(
        delivery_rows,
        key=lambda r: r.get("delivery_timestamp") or "",
        reverse=True,
    )
    for row in ordered:
        rota = row["route"]
        ledger.client_deliveries.setdefault(rota, []).append(
            Delivery(
                id=str(row["id"]),
                client_name=row.get("client_name") or "",
                timestamp=row.get("delivery_timestamp") or "",
                items=_parse_items(row.get("items")),
                rota=rota,
            )
        )

    return ledger
