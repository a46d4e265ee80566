"""
Response Interpreter - Valida la salida cruda del modelo.

Responsabilidad:
- Convertir texto libre (que solo *dice* ser JSON) en un resultado tipado
- Validar la forma con JSON Schema (jsonschema Draft 7)
- Sustituir un valor por defecto determinista cuando la forma no se cumple
- NUNCA lanzar excepciones hacia afuera

Parse estricto: el texto completo debe ser JSON. No se extrae JSON
embebido en prosa.

Output: Parsed(value) | FallbackUsed(value, reason)
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft7Validator
from pydantic import ValidationError

from tabletalk.core.prompt_builder import ModelIntent
from tabletalk.schemas import CHART_KINDS, ChartSpec

logger = logging.getLogger(__name__)

QUESTION_COUNT = 5

DEFAULT_QUESTIONS: tuple[str, ...] = (
    "What are the main trends in this data?",
    "What is the distribution of values?",
    "Are there any outliers or anomalies?",
    "What correlations exist between columns?",
    "What insights can we derive from this data?",
)

QUESTIONS_SCHEMA = {
    "type": "array",
    "items": {"type": "string", "pattern": r"\S"},
    "minItems": QUESTION_COUNT,
}

ANSWER_SCHEMA = {
    "type": "object",
    "required": ["answer"],
    "properties": {
        "answer": {"type": "string"},
    },
}

CHART_SCHEMA = {
    "type": "object",
    "required": ["type", "data"],
    "properties": {
        "type": {"enum": list(CHART_KINDS)},
        "data": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "value"],
                "properties": {
                    "name": {"type": ["string", "number"]},
                    "value": {"type": "number"},
                },
            },
        },
    },
}


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class AnalysisResult:
    summary: str


@dataclass(frozen=True)
class QuestionsResult:
    questions: tuple[str, ...]


@dataclass(frozen=True)
class AnswerResult:
    answer: str
    chart: ChartSpec | None = None


InterpretedResult = AnalysisResult | QuestionsResult | AnswerResult


@dataclass(frozen=True)
class Parsed:
    """The model honoured the contract."""
    value: InterpretedResult

    @property
    def used_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class FallbackUsed:
    """The model output was unusable; value is the deterministic default."""
    value: InterpretedResult
    reason: str

    @property
    def used_fallback(self) -> bool:
        return True


Interpretation = Parsed | FallbackUsed


class MalformedResponseError(Exception):
    """Internal: raw text does not have the expected shape."""


# =============================================================================
# Helpers
# =============================================================================


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name}")


def _load_json(raw_text: str) -> Any:
    try:
        return json.loads(raw_text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise MalformedResponseError(f"not valid JSON: {e}")


def _check(data: Any, schema: dict) -> None:
    errors = list(Draft7Validator(schema).iter_errors(data))
    if errors:
        messages = [
            f"{'.'.join(str(p) for p in error.path) or '<root>'}: {error.message}"
            for error in errors
        ]
        raise MalformedResponseError("; ".join(messages))


def _parse_questions(raw_text: str) -> QuestionsResult:
    data = _load_json(raw_text)
    _check(data, QUESTIONS_SCHEMA)
    return QuestionsResult(questions=tuple(q.strip() for q in data[:QUESTION_COUNT]))


def parse_chart(chart_data: Any) -> ChartSpec | None:
    """
    Validate chart data in wire shape; anything unusable is treated as no chart.

    Used for fresh model output and for chart data read back from storage.
    """
    if chart_data is None:
        return None
    try:
        _check(chart_data, CHART_SCHEMA)
        return ChartSpec.from_wire(chart_data)
    except MalformedResponseError as e:
        logger.warning(f"[response_interpreter] Dropping chart: {e}")
    except ValidationError as e:
        # e.g. 1e400 overflows to inf and still passes the "number" check
        logger.warning(f"[response_interpreter] Dropping chart: {e.error_count()} invalid field(s)")
    return None


def _parse_answer(raw_text: str) -> AnswerResult:
    data = _load_json(raw_text)
    _check(data, ANSWER_SCHEMA)
    return AnswerResult(answer=data["answer"], chart=parse_chart(data.get("chartData")))


# =============================================================================
# Entry point
# =============================================================================


def interpret(intent: ModelIntent, raw_text: str | None) -> Interpretation:
    """
    Interpret raw model output for an intent.

    Always returns a usable value:
    - analyze-data: the text itself is the summary
    - generate-questions: exactly 5 questions, or the fixed defaults
    - query-data: parsed answer (+ optional chart), or the raw text as answer
    """
    text = raw_text or ""

    if intent is ModelIntent.ANALYZE_DATASET:
        return Parsed(AnalysisResult(summary=text))

    if intent is ModelIntent.SUGGEST_QUESTIONS:
        try:
            return Parsed(_parse_questions(text))
        except MalformedResponseError as e:
            logger.warning(f"[response_interpreter] {intent.value}: using default questions ({e})")
            return FallbackUsed(QuestionsResult(questions=DEFAULT_QUESTIONS), reason=str(e))

    if intent is ModelIntent.ANSWER_QUESTION:
        try:
            return Parsed(_parse_answer(text))
        except MalformedResponseError as e:
            logger.warning(f"[response_interpreter] {intent.value}: using raw text as answer ({e})")
            return FallbackUsed(AnswerResult(answer=text, chart=None), reason=str(e))

    raise ValueError(f"Unknown intent: {intent}")


__all__ = [
    "AnalysisResult",
    "AnswerResult",
    "DEFAULT_QUESTIONS",
    "FallbackUsed",
    "Interpretation",
    "InterpretedResult",
    "Parsed",
    "QuestionsResult",
    "interpret",
    "parse_chart",
]
