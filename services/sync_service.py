# services/sync_service.py
"""
Keeps the per-date ledger cache, the local snapshot and the remote store
in step.

Every mutation is applied locally first, then written to the remote store.
A failed write is not rolled back: it stays queued in `pending` until
`retry_pending()` succeeds, and `synced` stays False meanwhile.

Loads and saves carry a generation token. A completion whose token is not
the latest one issued for its kind is stale and does not touch the state.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import config
from domain import ledger as ledger_ops
from domain.ledger import ValidationError
from domain.models import DailyLedger, Delivery
from utils.local_snapshot import LocalSnapshotStore

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SAVING = "saving"


@dataclass
class PendingWrite:
    """One remote write, kept around until the store accepts it."""

    kind: str  # "upsert_inbound" | "insert_delivery" | "delete_delivery"
    date: str
    rota: str
    items: Optional[Dict[str, int]] = None
    delivery: Optional[Delivery] = None
    delivery_id: Optional[str] = None

    def describe(self) -> str:
        if self.kind == "upsert_inbound":
            return f"carga {self.rota} ({self.date})"
        if self.kind == "insert_delivery":
            return f"entrega {self.delivery.client_name} em {self.rota} ({self.date})"
        return f"exclusão {self.delivery_id} em {self.rota} ({self.date})"


class SyncCoordinator:
    """
    Usage:
        coordinator = SyncCoordinator(store, LocalSnapshotStore(path), notifier=st.error)
        coordinator.set_date("2024-05-01")
        ok, msg = coordinator.set_inbound("Centro", {"Café": 100})
        report = reconcile(coordinator.ledger)

    `store` may be None: the coordinator then runs in local-only mode.
    """

    def __init__(
            self,
            store,
            snapshot: Optional[LocalSnapshotStore] = None,
            notifier: Optional[Callable[[str], None]] = None,
            current_date: Optional[str] = None,
    ):
        self.store = store
        self.snapshot = snapshot
        self.notifier = notifier
        self.logs: Dict[str, DailyLedger] = snapshot.load() if snapshot else {}
        self.current_date = current_date or config.today()
        self.status = SyncStatus.IDLE
        self.synced = True
        self.pending: List[PendingWrite] = []
        self._load_token = 0
        self._save_token = 0

    @property
    def ledger(self) -> DailyLedger:
        return self.ledger_for(self.current_date)

    @property
    def local_only(self) -> bool:
        return self.store is None

    def ledger_for(self, date: str) -> DailyLedger:
        return self.logs.get(date) or ledger_ops.empty_ledger(date)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def set_date(self, date: str) -> DailyLedger:
        """Switch the active date and refresh it from the remote store."""
        if date != self.current_date:
            logger.info("Active date changed: %s -> %s", self.current_date, date)
        self.current_date = date
        self.load(date)
        return self.ledger

    def begin_load(self, date: str) -> int:
        self._load_token += 1
        self.status = SyncStatus.LOADING
        logger.debug("Load #%d started for %s", self._load_token, date)
        return self._load_token

    def complete_load(
            self,
            token: int,
            date: str,
            ok: bool,
            msg: str,
            ledger: Optional[DailyLedger],
    ) -> bool:
        """
        Apply a finished load. Returns True when the cached ledger was replaced.
        """
        if token != self._load_token:
            logger.info("Discarding stale load #%d for %s (latest is #%d)", token, date, self._load_token)
            return False

        self.status = SyncStatus.IDLE
        # a failed read keeps the cache and never leaves the UI unsynced
        self.synced = not self.pending

        if not ok or ledger is None:
            logger.warning("Remote load for %s failed, keeping cached data: %s", date, msg)
            return False

        self.logs[date] = self._replay_pending(ledger)
        self._persist()
        logger.info("Loaded %s from remote store", date)
        return True

    def load(self, date: str) -> bool:
        token = self.begin_load(date)

        if self.local_only:
            return self.complete_load(token, date, False, "local-only mode", None)

        try:
            ok, msg, ledger = self.store.fetch_ledger(date)
        except Exception as e:
            logger.exception("Unexpected error loading %s", date)
            ok, msg, ledger = False, str(e), None

        return self.complete_load(token, date, ok, msg, ledger)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_inbound(self, rota: str, items: Dict[str, object]) -> Tuple[bool, str]:
        current = self.ledger
        try:
            updated = ledger_ops.set_inbound(current, rota, items)
        except ValidationError as e:
            return False, str(e)

        if updated == current:
            return True, "Sem alterações"

        self._apply_local(updated)
        write = PendingWrite(
            kind="upsert_inbound",
            date=updated.date,
            rota=rota,
            items=dict(updated.rota_inbound[rota]),
        )
        # a newer map for the same route supersedes any queued one
        self.pending = [
            p for p in self.pending
            if not (p.kind == "upsert_inbound" and p.date == write.date and p.rota == rota)
        ]
        return self._save(write)

    def add_delivery(
            self,
            rota: str,
            client_name: str,
            items: Dict[str, object],
    ) -> Tuple[bool, str]:
        if not (client_name or "").strip():
            return False, "Nome do cliente não pode ficar vazio"

        delivery = ledger_ops.new_delivery(rota, client_name, items)
        try:
            updated = ledger_ops.add_delivery(self.ledger, rota, delivery)
        except ValidationError as e:
            return False, str(e)

        self._apply_local(updated)
        write = PendingWrite(
            kind="insert_delivery",
            date=updated.date,
            rota=rota,
            delivery=updated.client_deliveries[rota][0],
        )
        return self._save(write)

    def delete_delivery(self, rota: str, delivery_id: str, confirmed: bool = False) -> Tuple[bool, str]:
        if not confirmed:
            return False, "Exclusão cancelada"

        current = self.ledger
        if not any(d.id == delivery_id for d in current.deliveries_for(rota)):
            return True, "Registro já removido"

        updated = ledger_ops.delete_delivery(current, rota, delivery_id)
        self._apply_local(updated)

        queued_insert = [
            p for p in self.pending
            if p.kind == "insert_delivery" and p.delivery.id == delivery_id
        ]
        if queued_insert:
            # never reached the remote store, nothing to delete there
            self.pending = [p for p in self.pending if p not in queued_insert]
            self.synced = not self.pending
            return True, "Removido"

        write = PendingWrite(
            kind="delete_delivery",
            date=updated.date,
            rota=rota,
            delivery_id=delivery_id,
        )
        return self._save(write)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def begin_save(self) -> int:
        self._save_token += 1
        self.status = SyncStatus.SAVING
        self.synced = False
        return self._save_token

    def complete_save(self, token: int, write: PendingWrite, ok: bool, msg: str) -> None:
        if not ok:
            logger.error("Remote write failed (%s): %s", write.describe(), msg)
            self.pending.append(write)
            self._notify(f"Falha ao salvar {write.describe()} na nuvem: {msg}")

        if token != self._save_token:
            logger.info("Save #%d finished after #%d, status left as is", token, self._save_token)
            return

        self.status = SyncStatus.IDLE
        self.synced = not self.pending

    def retry_pending(self) -> Tuple[int, int]:
        """
        Replay queued writes in order. Returns (succeeded, still_failing).
        """
        if not self.pending:
            self.synced = True
            return 0, 0

        token = self.begin_save()
        queued, self.pending = self.pending, []
        succeeded = 0

        for write in queued:
            ok, msg = self._execute(write)
            if ok:
                succeeded += 1
            else:
                logger.warning("Retry failed (%s): %s", write.describe(), msg)
                self.pending.append(write)

        if token == self._save_token:
            self.status = SyncStatus.IDLE
            self.synced = not self.pending

        logger.info("Retry finished: %d ok, %d pending", succeeded, len(self.pending))
        return succeeded, len(self.pending)

    def _save(self, write: PendingWrite) -> Tuple[bool, str]:
        token = self.begin_save()
        ok, msg = self._execute(write)
        self.complete_save(token, write, ok, msg)
        if ok:
            return True, "Salvo"
        # local change stays, only the cloud copy is behind
        return True, f"Salvo localmente; sincronização pendente ({msg})"

    def _execute(self, write: PendingWrite) -> Tuple[bool, str]:
        if self.local_only:
            return True, "local-only mode"

        try:
            if write.kind == "upsert_inbound":
                ok, msg, _ = self.store.upsert_inbound(write.date, write.rota, write.items)
            elif write.kind == "insert_delivery":
                ok, msg, _ = self.store.insert_delivery(write.date, write.delivery)
            elif write.kind == "delete_delivery":
                ok, msg, _ = self.store.delete_delivery(write.delivery_id)
            else:
                return False, f"Unknown write kind: {write.kind}"
        except Exception as e:
            logger.exception("Unexpected error during %s", write.describe())
            return False, str(e)

        return ok, msg

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _replay_pending(self, ledger: DailyLedger) -> DailyLedger:
        """Re-apply queued writes for this date on top of freshly loaded data."""
        for write in self.pending:
            if write.date != ledger.date:
                continue
            if write.kind == "upsert_inbound":
                ledger = ledger_ops.set_inbound(ledger, write.rota, write.items)
            elif write.kind == "insert_delivery":
                known = {d.id for d in ledger.deliveries_for(write.rota)}
                if write.delivery.id not in known:
                    ledger = ledger_ops.add_delivery(ledger, write.rota, write.delivery)
            else:
                ledger = ledger_ops.delete_delivery(ledger, write.rota, write.delivery_id)
        return ledger

    def _apply_local(self, updated: DailyLedger) -> None:
        self.logs[updated.date] = updated
        self._persist()

    def _persist(self) -> None:
        if self.snapshot is None:
            return
        try:
            self.snapshot.save(self.logs)
        except OSError as e:
            logger.error("Could not write local snapshot %s: %s", self.snapshot.path, e)

    def _notify(self, message: str) -> None:
        if self.notifier is not None:
            self.notifier(message)
