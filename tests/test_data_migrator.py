from unittest.mock import MagicMock

from domain.ledger import add_delivery, new_delivery, set_inbound
from domain.models import DailyLedger
from utils.data_migrator import dedupe_rows, flatten_logs, migrate_snapshot
from utils.local_snapshot import LocalSnapshotStore


def _logs():
    day1 = set_inbound(DailyLedger(date="2024-05-01"), "Centro", {"Café": 100, "Leite": 2})
    day1 = add_delivery(day1, "Centro", new_delivery("Centro", "Café X", {"Café": 30}))
    day2 = set_inbound(DailyLedger(date="2024-05-02"), "Barra", {"Café": 5})
    return {"2024-05-01": day1, "2024-05-02": day2}


def test_flatten_logs():
    inbound_rows, delivery_rows = flatten_logs(_logs())

    assert len(inbound_rows) == 3
    assert {r["date"] for r in inbound_rows} == {"2024-05-01", "2024-05-02"}
    assert len(delivery_rows) == 1
    assert delivery_rows[0]["client_name"] == "Café X"


def test_dedupe_keeps_last_and_drops_missing_keys():
    rows = [
        {"id": "a", "v": 1},
        {"id": "a", "v": 2},
        {"id": None, "v": 3},
        {"id": "b", "v": 4},
    ]

    assert dedupe_rows(rows, ["id"]) == [{"id": "a", "v": 2}, {"id": "b", "v": 4}]


def test_migrate_snapshot_upserts_in_batches(tmp_path):
    path = tmp_path / "state.json"
    LocalSnapshotStore(path).save(_logs())
    supabase = MagicMock()

    n_inbound, n_deliveries = migrate_snapshot(supabase, "ops", str(path), batch_size=2)

    assert (n_inbound, n_deliveries) == (3, 1)
    table = supabase.schema.return_value.table.return_value
    # 2 inbound batches + 1 delivery batch
    assert table.upsert.call_count == 3
    assert table.upsert.call_args_list[0][1] == {"on_conflict": "date,route,product_name"}
    assert table.upsert.call_args_list[-1][1] == {"on_conflict": "id"}


def test_migrate_empty_snapshot(tmp_path):
    supabase = MagicMock()

    assert migrate_snapshot(supabase, "ops", str(tmp_path / "none.json")) == (0, 0)
    supabase.schema.assert_not_called()
