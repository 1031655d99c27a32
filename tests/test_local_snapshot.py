import json

from domain.ledger import add_delivery, new_delivery, set_inbound
from domain.models import DailyLedger
from utils.local_snapshot import LocalSnapshotStore


def test_missing_file_loads_empty(tmp_path):
    assert LocalSnapshotStore(tmp_path / "nope.json").load() == {}


def test_save_and_load(tmp_path):
    ledger = set_inbound(DailyLedger(date="2024-05-01"), "Centro", {"Café": 100})
    ledger = add_delivery(ledger, "Centro", new_delivery("Centro", "Café X", {"Café": 30}))
    store = LocalSnapshotStore(tmp_path / "state.json")

    store.save({"2024-05-01": ledger})

    assert store.load() == {"2024-05-01": ledger}


def test_file_layout_uses_logs_key(tmp_path):
    path = tmp_path / "state.json"
    LocalSnapshotStore(path).save({"2024-05-01": DailyLedger(date="2024-05-01")})

    raw = json.loads(path.read_text(encoding="utf-8"))

    assert raw == {"logs": {"2024-05-01": {"date": "2024-05-01", "rotaInbound": {}, "clientDeliveries": {}}}}


def test_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    assert LocalSnapshotStore(path).load() == {}


def test_save_creates_parent_dirs(tmp_path):
    path = tmp_path / "nested" / "dir" / "state.json"

    LocalSnapshotStore(path).save({})

    assert path.exists()
