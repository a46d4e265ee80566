"""
Prompt Builder - Construye el ModelRequest para cada intencion.

Responsabilidad:
- Elegir la instruccion de sistema (texto fijo por intencion, nunca del usuario)
- Renderizar la muestra de filas como volcado tabular legible
- Fijar temperatura y presupuesto de tokens
- NO llamar al modelo
- NO interpretar respuestas (eso es response_interpreter)

El contrato de formato que se pide aqui al modelo NO es garantia:
la validacion real ocurre en response_interpreter.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, Field

from tabletalk.schemas import CHART_KINDS


class ModelIntent(str, Enum):
    """Taxonomia cerrada de llamadas al servicio de razonamiento."""
    ANALYZE_DATASET = "analyze-data"
    SUGGEST_QUESTIONS = "generate-questions"
    ANSWER_QUESTION = "query-data"


class ModelRequest(BaseModel):
    """One fully-specified call to the reasoning service."""

    model_config = ConfigDict(frozen=True)

    intent: ModelIntent
    system_instruction: str = Field(..., min_length=1)
    user_prompt: str = Field(..., min_length=1)
    temperature: float = Field(..., ge=0.0, le=1.0)
    max_output_tokens: int = Field(..., gt=0)


@dataclass(frozen=True)
class AnalyzeInputs:
    columns: Sequence[str]
    sample: list[dict[str, Any]]
    row_count: int


@dataclass(frozen=True)
class SuggestInputs:
    columns: Sequence[str]
    summary: str


@dataclass(frozen=True)
class AnswerInputs:
    question: str
    columns: Sequence[str]
    sample: list[dict[str, Any]]
    summary: str


@dataclass(frozen=True)
class _Template:
    system_instruction: str
    temperature: float
    max_output_tokens: int


TEMPLATES: dict[ModelIntent, _Template] = {
    ModelIntent.ANALYZE_DATASET: _Template(
        system_instruction="You are a data analysis expert. Provide clear, concise insights about datasets.",
        temperature=0.7,
        max_output_tokens=500,
    ),
    ModelIntent.SUGGEST_QUESTIONS: _Template(
        system_instruction="You are a data analyst. Generate relevant questions about datasets. Return only valid JSON arrays.",
        temperature=0.8,
        max_output_tokens=300,
    ),
    ModelIntent.ANSWER_QUESTION: _Template(
        system_instruction=(
            "You are a data analyst. Answer questions about datasets clearly and suggest "
            "visualizations when appropriate. Always return valid JSON."
        ),
        temperature=0.7,
        max_output_tokens=800,
    ),
}

_INPUT_TYPES = {
    ModelIntent.ANALYZE_DATASET: AnalyzeInputs,
    ModelIntent.SUGGEST_QUESTIONS: SuggestInputs,
    ModelIntent.ANSWER_QUESTION: AnswerInputs,
}


def render_sample(sample: list[dict[str, Any]], row_count: int | None = None) -> str:
    """Render sample rows as a literal dump: row count, then indented JSON."""
    header = f"{len(sample)} sample rows"
    if row_count is not None:
        header += f" (of {row_count} total)"
    return f"{header}:\n{json.dumps(sample, indent=2, ensure_ascii=False, default=str)}"


def _columns(columns: Sequence[str]) -> str:
    return ", ".join(columns)


def _analyze_prompt(inputs: AnalyzeInputs) -> str:
    return f"""Analyze this dataset and provide:
1. A brief summary (2-3 sentences) of what this data contains
2. Key insights about the data structure
3. Any notable patterns or interesting findings

Dataset Info:
- Total Rows: {inputs.row_count}
- Columns: {_columns(inputs.columns)}
- Sample Data (first few rows):
{render_sample(inputs.sample, inputs.row_count)}

Provide a concise, informative summary."""


def _suggest_prompt(inputs: SuggestInputs) -> str:
    return f"""Based on this dataset, generate 5 insightful questions that a user might want to ask:

Dataset Summary: {inputs.summary}
Available Columns: {_columns(inputs.columns)}

Generate questions that:
- Explore trends and patterns
- Compare different aspects of the data
- Seek specific insights
- Are answerable from the available columns

Return ONLY a JSON array of exactly 5 strings (the questions), nothing else."""


def _answer_prompt(inputs: AnswerInputs) -> str:
    kinds = ", ".join(CHART_KINDS)
    return f"""Answer this question about the dataset: "{inputs.question}"

Dataset Context:
{inputs.summary}

Available Columns: {_columns(inputs.columns)}
Sample Data:
{render_sample(inputs.sample)}

Provide:
1. A clear, direct answer to the question
2. If applicable, suggest a visualization type ({kinds}) and provide chart data in this exact format:
{{
  "type": "bar",
  "data": [{{"name": "Category1", "value": 100}}, ...]
}}

Return your response as JSON with this structure:
{{
  "answer": "your detailed answer here",
  "chartData": {{"type": "bar", "data": [...]}} or null if no chart needed
}}"""


_RENDERERS = {
    ModelIntent.ANALYZE_DATASET: _analyze_prompt,
    ModelIntent.SUGGEST_QUESTIONS: _suggest_prompt,
    ModelIntent.ANSWER_QUESTION: _answer_prompt,
}


def build(intent: ModelIntent, inputs: AnalyzeInputs | SuggestInputs | AnswerInputs) -> ModelRequest:
    """
    Build the ModelRequest for an intent.

    Raises:
        TypeError: If inputs do not match the intent
    """
    expected = _INPUT_TYPES[intent]
    if not isinstance(inputs, expected):
        raise TypeError(f"{intent.value} expects {expected.__name__}, got {type(inputs).__name__}")

    template = TEMPLATES[intent]
    return ModelRequest(
        intent=intent,
        system_instruction=template.system_instruction,
        user_prompt=_RENDERERS[intent](inputs),
        temperature=template.temperature,
        max_output_tokens=template.max_output_tokens,
    )


__all__ = [
    "AnalyzeInputs",
    "AnswerInputs",
    "ModelIntent",
    "ModelRequest",
    "SuggestInputs",
    "TEMPLATES",
    "build",
    "render_sample",
]
