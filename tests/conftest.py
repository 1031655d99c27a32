from unittest.mock import MagicMock

import pytest

from domain.ledger import empty_ledger
from domain.models import DailyLedger, Delivery


@pytest.fixture
def ledger() -> DailyLedger:
    return empty_ledger("2024-05-01")


@pytest.fixture
def make_delivery():
    def _make(delivery_id, client_name, items, rota="Centro", timestamp="2024-05-01T12:00:00Z"):
        return Delivery(id=delivery_id, client_name=client_name, timestamp=timestamp, items=items, rota=rota)
    return _make


@pytest.fixture
def fake_store():
    """
    Stand-in for RemoteStore: every call succeeds and returns an empty day
    unless a test overrides the return values.
    """
    store = MagicMock()
    store.fetch_ledger.side_effect = lambda date: (True, "Fetched", DailyLedger(date=date))
    store.upsert_inbound.return_value = (True, "Upserted", [])
    store.insert_delivery.return_value = (True, "Inserted", {})
    store.delete_delivery.return_value = (True, "Deleted", None)
    return store
