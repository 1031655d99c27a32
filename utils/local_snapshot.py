# utils/local_snapshot.py

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict

from domain.models import DailyLedger

logger = logging.getLogger(__name__)


class LocalSnapshotStore:
    """
    On-device mirror of every ledger the session has touched.

    File layout:
      {"logs": {"2024-05-01": {<DailyLedger.to_dict()>}, ...}}
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Dict[str, DailyLedger]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            logs = raw.get("logs") or {}
            return {date: DailyLedger.from_dict(data) for date, data in logs.items()}
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error("Error parsing stored state %s: %s", self.path, e)
            return {}

    def save(self, logs: Dict[str, DailyLedger]) -> None:
        payload = {"logs": {date: ledger.to_dict() for date, ledger in logs.items()}}

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".snapshot-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
