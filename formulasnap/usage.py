"""Per-day free-tier usage counters, one JSON file.

Counts are only meaningful for the stored date; a new local day starts
from zero.  Writes are last-writer-wins: commands are serialized by the
single-user host, so there is no locking.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from formulasnap.config import settings
from formulasnap.util import local_today

logger = logging.getLogger("formulasnap.usage")

USAGE_FILENAME = "usage.json"


@dataclass
class UsageRecord:
    date: str = ""
    counts: dict[str, int] = field(default_factory=dict)

    def to_json(self) -> dict:
        return {"date": self.date, "models": self.counts}

    @classmethod
    def from_json(cls, payload: object) -> "UsageRecord":
        if not isinstance(payload, dict):
            return cls()
        date = payload.get("date")
        models = payload.get("models")
        counts = {
            model_id: count
            for model_id, count in (models.items() if isinstance(models, dict) else [])
            if isinstance(count, int) and not isinstance(count, bool) and count >= 0
        }
        return cls(date=date if isinstance(date, str) else "", counts=counts)


class UsageTracker:
    def __init__(self, path: Path, today: Callable[[], str] = local_today) -> None:
        self._path = path
        self._today = today

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> UsageRecord:
        try:
            return UsageRecord.from_json(json.loads(self._path.read_text(encoding="utf-8")))
        except FileNotFoundError:
            return UsageRecord()
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable usage file %s", self._path)
            return UsageRecord()

    def usage_today(self, model_id: str) -> int:
        record = self.load()
        if record.date != self._today():
            return 0
        return record.counts.get(model_id, 0)

    def usage_by_model(self, model_ids: list[str]) -> dict[str, int]:
        return {model_id: self.usage_today(model_id) for model_id in model_ids}

    def increment(self, model_id: str) -> None:
        today = self._today()
        record = self.load()
        if record.date != today:
            record = UsageRecord(date=today)
        record.counts[model_id] = record.counts.get(model_id, 0) + 1
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(record.to_json(), indent=2), encoding="utf-8")


_tracker: UsageTracker | None = None


def get_usage_tracker() -> UsageTracker:
    global _tracker
    if _tracker is None:
        _tracker = UsageTracker(settings.data_dir() / USAGE_FILENAME)
    return _tracker
