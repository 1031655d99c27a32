import argparse
from typing import Dict, Iterable, List, Tuple

from supabase import Client

import config
from data_integrator import (
    DELIVERIES_TABLE,
    INBOUND_CONFLICT_COLS,
    INBOUND_TABLE,
    delivery_to_row,
    get_supabase_client,
    inbound_rows_for,
)
from domain.models import DailyLedger
from utils.local_snapshot import LocalSnapshotStore


BATCH_SIZE = 500


def chunked(items: List[Dict], size: int) -> Iterable[List[Dict]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def flatten_logs(logs: Dict[str, DailyLedger]) -> Tuple[List[Dict], List[Dict]]:
    """
    Turn a {date -> ledger} map into (inbound_rows, delivery_rows)
    matching the remote table layouts.
    """
    inbound_rows: List[Dict] = []
    delivery_rows: List[Dict] = []

    for date in sorted(logs):
        ledger = logs[date]
        for rota, items in ledger.rota_inbound.items():
            inbound_rows.extend(inbound_rows_for(date, rota, items))
        for deliveries in ledger.client_deliveries.values():
            delivery_rows.extend(delivery_to_row(date, d) for d in deliveries)

    return inbound_rows, delivery_rows


def dedupe_rows(rows: List[Dict], key_cols: List[str]) -> List[Dict]:
    """
    Deduplicate rows in-memory using key_cols.
    Keeps the last occurrence, the way an upsert would.
    """
    by_key: Dict[tuple, Dict] = {}

    for r in rows:
        key = tuple(r.get(c) for c in key_cols)
        # skip rows missing any key value
        if any(k is None or k == "" for k in key):
            continue
        by_key[key] = r

    return list(by_key.values())


def upsert_batches(
    supabase: Client,
    schema_name: str,
    table_name: str,
    rows: List[Dict],
    conflict_cols: List[str],
    batch_size: int = BATCH_SIZE,
) -> int:
    deduped = dedupe_rows(rows, conflict_cols)

    if not deduped:
        print(f"No valid rows for {table_name} (after dedupe / missing key filtering).")
        return 0

    total = 0
    for batch in chunked(deduped, batch_size):
        supabase.schema(schema_name).table(table_name).upsert(
            batch,
            on_conflict=",".join(conflict_cols)
        ).execute()
        total += len(batch)
        print(f"Upserted {len(batch)} rows into {table_name} (running total: {total})")

    return total


def migrate_snapshot(
    supabase: Client,
    schema_name: str,
    snapshot_path: str,
    batch_size: int = BATCH_SIZE,
) -> Tuple[int, int]:
    logs = LocalSnapshotStore(snapshot_path).load()
    if not logs:
        print(f"Nothing to migrate: {snapshot_path} is empty or unreadable.")
        return 0, 0

    inbound_rows, delivery_rows = flatten_logs(logs)

    n_inbound = upsert_batches(
        supabase, schema_name, INBOUND_TABLE, inbound_rows, INBOUND_CONFLICT_COLS, batch_size
    )
    n_deliveries = upsert_batches(
        supabase, schema_name, DELIVERIES_TABLE, delivery_rows, ["id"], batch_size
    )

    print(f"Done: {snapshot_path} -> {schema_name} ({len(logs)} days, "
          f"{n_inbound} inbound rows, {n_deliveries} deliveries)")
    return n_inbound, n_deliveries


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Push a local ledger snapshot to Supabase")
    parser.add_argument("snapshot", nargs="?", default=config.LOCAL_SNAPSHOT_PATH)
    parser.add_argument("--schema", default=config.SCHEMA)
    parser.add_argument("--batch-size", type=int, default=BATCH_SIZE)
    args = parser.parse_args(argv)

    # use the SERVICE_ROLE key for scripts
    supabase = get_supabase_client()
    migrate_snapshot(supabase, args.schema, args.snapshot, args.batch_size)


if __name__ == "__main__":
    main()
