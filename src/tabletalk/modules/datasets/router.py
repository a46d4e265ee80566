"""
TableTalk Datasets - Router.

Upload a CSV/Excel file, inspect it, and get starter questions.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from tabletalk.config import Settings, get_settings
from tabletalk.deps import get_conversation_manager, get_datasets_service
from tabletalk.exceptions import ValidationException
from tabletalk.modules.conversations.service import ConversationManager
from tabletalk.modules.datasets.schemas import (
    DatasetInfo,
    DatasetListResponse,
    DatasetUploadResponse,
    SuggestedQuestionsResponse,
)
from tabletalk.modules.datasets.service import DatasetsService, to_info

router = APIRouter(prefix="/api/v1/datasets", tags=["datasets"])


@router.post("", response_model=DatasetUploadResponse, status_code=201)
async def upload_dataset(
    service: Annotated[DatasetsService, Depends(get_datasets_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    file: UploadFile = File(..., description="CSV or Excel (.csv, .xls, .xlsx) as delimited text"),
):
    """
    Upload a dataset.

    **Flow:**
    1. Parse the file (first non-empty line = columns)
    2. Register it for the current user
    3. Ask the reasoning service for a summary
    4. Ask for 5 starter questions
    """
    if not file.filename:
        raise ValidationException("Filename is required")

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise ValidationException(
            f"File too large ({len(content)} bytes, limit {settings.max_upload_bytes})"
        )

    return await service.upload(file.filename, content)


@router.get("", response_model=DatasetListResponse)
async def list_datasets(service: Annotated[DatasetsService, Depends(get_datasets_service)]):
    """List the caller's datasets."""
    items = await service.list_all()
    return DatasetListResponse(items=items, total_count=len(items))


@router.get("/{file_id}", response_model=DatasetInfo)
async def get_dataset(file_id: str, service: Annotated[DatasetsService, Depends(get_datasets_service)]):
    """Get dataset info."""
    return to_info(await service.get_or_raise(file_id))


@router.get("/{file_id}/questions", response_model=SuggestedQuestionsResponse)
async def suggest_questions(file_id: str, service: Annotated[DatasetsService, Depends(get_datasets_service)]):
    """Fresh starter questions for a dataset."""
    questions = await service.suggest_questions(file_id)
    return SuggestedQuestionsResponse(file_id=file_id, questions=questions)


@router.delete("/{file_id}", status_code=204)
async def delete_dataset(
    file_id: str,
    service: Annotated[DatasetsService, Depends(get_datasets_service)],
    manager: Annotated[ConversationManager, Depends(get_conversation_manager)],
):
    """Forget a dataset and its open conversation."""
    await service.delete(file_id)
    manager.forget(file_id)
    return None
