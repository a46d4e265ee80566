"""
TableTalk Assistant - Router.

Single endpoint speaking the browser-facing assistant contract:

    POST /api/v1/assistant {"action": "analyze-data", "data": {...}}
      -> {"summary": str}
    POST /api/v1/assistant {"action": "generate-questions", "data": {...}}
      -> {"questions": [str, ...]}
    POST /api/v1/assistant {"action": "query-data", "data": {...}}
      -> {"answer": str, "chartData": {"type": ..., "data": [...]} | null}

Errors are returned as {"error": "<message>"} with a non-2xx status.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tabletalk.config import Settings, get_settings
from tabletalk.core.orchestrator import QueryOrchestrator
from tabletalk.core.prompt_builder import AnalyzeInputs, AnswerInputs, ModelIntent, SuggestInputs
from tabletalk.deps import get_orchestrator
from tabletalk.exceptions import TableTalkException
from tabletalk.modules.assistant.schemas import (
    AnalyzeDataPayload,
    AssistantRequest,
    GenerateQuestionsPayload,
    QueryDataPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["assistant"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _inputs(intent: ModelIntent, data: dict, settings: Settings):
    """Validate the action payload and map it to prompt inputs."""
    if intent is ModelIntent.ANALYZE_DATASET:
        payload = AnalyzeDataPayload.model_validate(data)
        return AnalyzeInputs(
            columns=payload.columns,
            sample=payload.sample_rows[: settings.sampling.analysis_sample_rows],
            row_count=payload.row_count,
        )
    if intent is ModelIntent.SUGGEST_QUESTIONS:
        payload = GenerateQuestionsPayload.model_validate(data)
        return SuggestInputs(columns=payload.columns, summary=payload.summary)

    payload = QueryDataPayload.model_validate(data)
    return AnswerInputs(
        question=payload.question,
        columns=payload.columns,
        sample=payload.sample_data[: settings.sampling.answer_sample_rows],
        summary=payload.full_data_summary,
    )


@router.post("/assistant")
async def assistant(
    request: AssistantRequest,
    orchestrator: Annotated[QueryOrchestrator, Depends(get_orchestrator)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Run one model intent from caller-supplied dataset context.

    Caller sample rows are capped to the configured sample sizes.
    """
    try:
        intent = ModelIntent(request.action)
    except ValueError:
        return _error(400, "Invalid action")

    try:
        inputs = _inputs(intent, request.data, settings)
    except ValidationError as e:
        return _error(400, f"Invalid data for {intent.value}: {e.error_count()} validation error(s)")

    try:
        result = (await orchestrator.run(intent, inputs)).value
    except TableTalkException as e:
        logger.warning(f"[assistant] {intent.value} failed: {e.code} - {e.message}")
        return _error(e.status_code, e.message)

    if intent is ModelIntent.ANALYZE_DATASET:
        return {"summary": result.summary}
    if intent is ModelIntent.SUGGEST_QUESTIONS:
        return {"questions": list(result.questions)}
    return {
        "answer": result.answer,
        "chartData": result.chart.to_wire() if result.chart else None,
    }
