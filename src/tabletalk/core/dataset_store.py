from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock

from tabletalk.core.tabular_parser import TabularDataset


@dataclass(frozen=True)
class StoredDataset:
    file_id: str
    file_name: str
    dataset: TabularDataset
    size_bytes: int
    summary: str | None = None
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class InMemoryDatasetStore:
    """Parsed datasets kept in memory while a user works with them, keyed by (user_id, file_id)."""

    def __init__(self):
        self._lock = RLock()
        self._datasets: dict[tuple[str, str], StoredDataset] = {}

    def put(self, user_id: str, stored: StoredDataset) -> None:
        with self._lock:
            self._datasets[(str(user_id), stored.file_id)] = stored

    def get(self, user_id: str, file_id: str) -> StoredDataset | None:
        with self._lock:
            return self._datasets.get((str(user_id), file_id))

    def list(self, user_id: str) -> list[StoredDataset]:
        with self._lock:
            items = [d for (uid, _), d in self._datasets.items() if uid == str(user_id)]
        return sorted(items, key=lambda d: d.uploaded_at, reverse=True)

    def delete(self, user_id: str, file_id: str) -> bool:
        with self._lock:
            return self._datasets.pop((str(user_id), file_id), None) is not None

    def clear(self) -> None:
        with self._lock:
            self._datasets.clear()


# Process-local singleton cache; durable copies live in the dataset catalog when Supabase is enabled.
DATASET_STORE = InMemoryDatasetStore()
