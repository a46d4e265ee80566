"""
TableTalk Datasets - Service.

Upload flow: parse -> register (memory, then catalog) -> analyze -> suggest questions.
"""

import hashlib
import logging
from dataclasses import replace
from pathlib import Path
from uuid import UUID

from tabletalk.core.dataset_store import InMemoryDatasetStore, StoredDataset
from tabletalk.core.orchestrator import QueryOrchestrator
from tabletalk.core.tabular_parser import parse
from tabletalk.exceptions import NotFoundException
from tabletalk.modules.datasets.repository import DatasetCatalog
from tabletalk.modules.datasets.schemas import DatasetInfo, DatasetUploadResponse

logger = logging.getLogger(__name__)


def generate_file_id(file_name: str, content: bytes) -> str:
    """Generate deterministic file_id from file name + content hash."""
    content_hash = hashlib.sha256(content).hexdigest()[:16]
    return f"{Path(file_name).stem}_{content_hash}"


def to_info(stored: StoredDataset) -> DatasetInfo:
    return DatasetInfo(
        file_id=stored.file_id,
        file_name=stored.file_name,
        columns=list(stored.dataset.columns),
        row_count=stored.dataset.row_count,
        size_bytes=stored.size_bytes,
        summary=stored.summary,
        uploaded_at=stored.uploaded_at,
    )


class DatasetsService:
    """
    Datasets of one user.

    Parsed datasets are kept in memory. With a catalog, uploads are also
    recorded durably and reloaded from it when missing from memory.
    """

    def __init__(
        self,
        store: InMemoryDatasetStore,
        orchestrator: QueryOrchestrator,
        user_id: UUID,
        catalog: DatasetCatalog | None = None,
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.user_id = user_id
        self.catalog = catalog

    async def get(self, file_id: str) -> StoredDataset | None:
        stored = self.store.get(self.user_id, file_id)
        if stored is None and self.catalog is not None:
            stored = await self.catalog.load(self.user_id, file_id)
            if stored is not None:
                self.store.put(self.user_id, stored)
        return stored

    async def get_or_raise(self, file_id: str) -> StoredDataset:
        stored = await self.get(file_id)
        if stored is None:
            raise NotFoundException("dataset", file_id)
        return stored

    async def upload(self, file_name: str, content: bytes) -> DatasetUploadResponse:
        """
        Parse and register an upload, then ask for a summary and starter questions.

        The dataset stays registered even if the analysis call fails, like an
        uploaded file without a summary.
        """
        self.orchestrator.ensure_authenticated()

        dataset = parse(content, file_name)
        stored = StoredDataset(
            file_id=generate_file_id(file_name, content),
            file_name=file_name,
            dataset=dataset,
            size_bytes=len(content),
        )
        self.store.put(self.user_id, stored)
        if self.catalog is not None:
            await self.catalog.save(self.user_id, stored, content)
        logger.info(
            f"[datasets] Registered {stored.file_id} ({dataset.row_count} rows) for user {self.user_id}"
        )

        stored = await self._ensure_summary(stored)
        questions = await self.orchestrator.suggest_questions(dataset.columns, stored.summary or "")

        warnings = []
        if dataset.duplicate_columns:
            warnings.append(
                f"Duplicate column names {dataset.duplicate_columns}: the last value wins"
            )

        return DatasetUploadResponse(
            **to_info(stored).model_dump(),
            suggested_questions=list(questions.questions),
            warnings=warnings,
        )

    async def suggest_questions(self, file_id: str) -> list[str]:
        stored = await self._ensure_summary(await self.get_or_raise(file_id))
        result = await self.orchestrator.suggest_questions(stored.dataset.columns, stored.summary or "")
        return list(result.questions)

    async def _ensure_summary(self, stored: StoredDataset) -> StoredDataset:
        if stored.summary:
            return stored
        analysis = await self.orchestrator.analyze_dataset(stored.dataset)
        stored = replace(stored, summary=analysis.summary)
        self.store.put(self.user_id, stored)
        if self.catalog is not None:
            await self.catalog.set_summary(self.user_id, stored.file_id, analysis.summary)
        return stored

    async def list_all(self) -> list[DatasetInfo]:
        if self.catalog is not None:
            return await self.catalog.list_for(self.user_id)
        return [to_info(d) for d in self.store.list(self.user_id)]

    async def delete(self, file_id: str) -> None:
        in_memory = self.store.delete(self.user_id, file_id)
        in_catalog = self.catalog is not None and await self.catalog.delete(self.user_id, file_id)
        if not (in_memory or in_catalog):
            raise NotFoundException("dataset", file_id)
        logger.info(f"[datasets] Deleted {file_id} for user {self.user_id}")
