"""
TableTalk Assistant - Schemas.

Request payloads of the single-endpoint assistant contract:
{"action": "<intent>", "data": {...}} with camelCase fields.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AnalyzeDataPayload(_Payload):
    columns: list[str] = Field(..., min_length=1)
    sample_rows: list[dict[str, Any]] = Field(default_factory=list, alias="sampleRows")
    row_count: int = Field(..., ge=0, alias="rowCount")


class GenerateQuestionsPayload(_Payload):
    columns: list[str] = Field(..., min_length=1)
    summary: str = ""


class QueryDataPayload(_Payload):
    question: str = Field(..., min_length=1, max_length=4000)
    columns: list[str] = Field(..., min_length=1)
    sample_data: list[dict[str, Any]] = Field(default_factory=list, alias="sampleData")
    full_data_summary: str = Field(default="", alias="fullDataSummary")


class AssistantRequest(BaseModel):
    """Envelope: action selects the intent, data is validated per action."""

    action: str
    data: dict[str, Any] = Field(default_factory=dict)
