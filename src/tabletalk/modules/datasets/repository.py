"""
TableTalk Datasets - Repository.

Uploaded file metadata in Supabase, raw file content in Supabase Storage.

Tables:
- uploaded_files(id, user_id, file_id, file_name, file_path, file_size, file_type,
  column_names jsonb, row_count, summary, created_at)

Only metadata lives in the table. Rows are never stored: the raw file is kept
in the storage bucket and parsed again when a dataset is not in memory.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from supabase import Client

from tabletalk.core.dataset_store import StoredDataset
from tabletalk.core.repository import BaseRepository
from tabletalk.core.supabase_client import get_supabase_client
from tabletalk.core.tabular_parser import parse
from tabletalk.modules.datasets.schemas import DatasetInfo

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".csv": "text/csv",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


class UploadedFilesRepository(BaseRepository[dict[str, Any]]):
    """Repository for uploaded file metadata in Supabase."""

    @property
    def table_name(self) -> str:
        return "uploaded_files"

    async def find_by_file_id(self, user_id: UUID, file_id: str) -> dict[str, Any] | None:
        rows = await self.find({"user_id": str(user_id), "file_id": file_id}, limit=1)
        return rows[0] if rows else None

    async def list_by_user(self, user_id: UUID) -> list[dict[str, Any]]:
        """Newest first."""
        return await self.find({"user_id": str(user_id)}, desc=True)


def _info_from_row(row: dict[str, Any]) -> DatasetInfo:
    return DatasetInfo(
        file_id=row["file_id"],
        file_name=row["file_name"],
        columns=row.get("column_names") or [],
        row_count=row.get("row_count") or 0,
        size_bytes=row.get("file_size") or 0,
        summary=row.get("summary"),
        uploaded_at=row["created_at"],
    )


class DatasetCatalog:
    """Durable record of a user's uploads: metadata row plus the raw file."""

    def __init__(self, client: Client | None = None, bucket: str = "data-files"):
        client = client or get_supabase_client()
        self.files = UploadedFilesRepository(client)
        self.bucket = bucket
        self.storage = client.storage.from_(bucket)

    @staticmethod
    def file_path(user_id: UUID, file_id: str, file_name: str) -> str:
        return f"{user_id}/{file_id}{Path(file_name).suffix.lower()}"

    async def save(self, user_id: UUID, stored: StoredDataset, content: bytes) -> None:
        """Store the raw file and upsert its metadata row."""
        path = self.file_path(user_id, stored.file_id, stored.file_name)
        content_type = CONTENT_TYPES.get(Path(stored.file_name).suffix.lower(), "text/plain")
        self.storage.upload(path, content, {"content-type": content_type, "upsert": "true"})

        data = {
            "file_name": stored.file_name,
            "file_path": path,
            "file_size": stored.size_bytes,
            "file_type": content_type,
            "column_names": list(stored.dataset.columns),
            "row_count": stored.dataset.row_count,
            "summary": stored.summary,
        }
        key = {"user_id": str(user_id), "file_id": stored.file_id}
        if not await self.files.update_where(key, data):
            await self.files.create({**key, **data})
        logger.info(f"[datasets] Saved {stored.file_id} to {self.bucket}/{path}")

    async def set_summary(self, user_id: UUID, file_id: str, summary: str) -> None:
        await self.files.update_where({"user_id": str(user_id), "file_id": file_id}, {"summary": summary})

    async def list_for(self, user_id: UUID) -> list[DatasetInfo]:
        """Newest first."""
        return [_info_from_row(row) for row in await self.files.list_by_user(user_id)]

    async def load(self, user_id: UUID, file_id: str) -> StoredDataset | None:
        """Download and parse a stored file; None when there is no such upload."""
        row = await self.files.find_by_file_id(user_id, file_id)
        if row is None:
            return None

        content = self.storage.download(row["file_path"])
        dataset = parse(content, row["file_name"])
        logger.info(f"[datasets] Reloaded {file_id} from {self.bucket}/{row['file_path']}")
        return StoredDataset(
            file_id=file_id,
            file_name=row["file_name"],
            dataset=dataset,
            size_bytes=row.get("file_size") or len(content),
            summary=row.get("summary"),
            uploaded_at=datetime.fromisoformat(row["created_at"]),
        )

    async def delete(self, user_id: UUID, file_id: str) -> bool:
        """Remove the metadata row and the raw file. False when nothing was stored."""
        row = await self.files.find_by_file_id(user_id, file_id)
        if row is None:
            return False
        self.storage.remove([row["file_path"]])
        await self.files.delete_where({"user_id": str(user_id), "file_id": file_id})
        return True
