"""
TableTalk Datasets - Schemas.

Pydantic models for dataset upload and inspection.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class DatasetInfo(BaseModel):
    """A parsed dataset registered for the current user."""

    file_id: str = Field(..., description="Deterministic id: <stem>_<sha256[:16]>")
    file_name: str
    columns: list[str]
    row_count: int = Field(ge=0, description="Number of data rows (header excluded)")
    size_bytes: int = Field(ge=0)
    summary: str | None = Field(default=None, description="Model-written overview of the dataset")
    uploaded_at: datetime


class DatasetUploadResponse(DatasetInfo):
    """Upload result: the dataset plus starter questions."""

    suggested_questions: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-critical warnings (e.g., duplicate column names)",
    )


class SuggestedQuestionsResponse(BaseModel):
    """Starter questions for a dataset."""

    file_id: str
    questions: list[str]


class DatasetListResponse(BaseModel):
    """Datasets registered for the current user, newest first."""

    items: list[DatasetInfo]
    total_count: int = Field(ge=0)
