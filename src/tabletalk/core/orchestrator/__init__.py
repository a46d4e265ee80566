"""
Query Orchestrator - Fachada del pipeline de consultas.

Flujo inmutable por intencion:
1. SessionProvider: exigir sesion (falla cerrado)
2. Sampler: prefijo acotado de filas
3. PromptBuilder: ModelRequest
4. ReasoningClient: llamada externa (unico punto de falla dura)
5. ResponseInterpreter: resultado tipado, con fallback

Nunca aplica resultados parciales: o devuelve un resultado interpretado
completo, o lanza un error.
"""

import logging
import time
from typing import Sequence

from tabletalk.auth.session import SessionProvider
from tabletalk.config import SamplingSettings
from tabletalk.core.prompt_builder import (
    AnalyzeInputs,
    AnswerInputs,
    ModelIntent,
    SuggestInputs,
    build,
)
from tabletalk.core.reasoning_client import ReasoningClient
from tabletalk.core.response_interpreter import (
    AnalysisResult,
    AnswerResult,
    Interpretation,
    QuestionsResult,
    interpret,
)
from tabletalk.core.sampler import sample
from tabletalk.core.tabular_parser import TabularDataset
from tabletalk.exceptions import TableTalkException, UnauthenticatedError
from tabletalk.observability import MetricsStore, get_metrics_store

logger = logging.getLogger(__name__)


class QueryOrchestrator:
    """
    Drives Sampler -> PromptBuilder -> reasoning service -> ResponseInterpreter.

    Collaborators are injected so tests can substitute fakes.
    """

    def __init__(
        self,
        client: ReasoningClient,
        sessions: SessionProvider,
        sampling: SamplingSettings | None = None,
        metrics: MetricsStore | None = None,
    ):
        self.client = client
        self.sessions = sessions
        self.sampling = sampling or SamplingSettings()
        self.metrics = metrics or get_metrics_store()

    def ensure_authenticated(self) -> str:
        """Return the current session token or fail closed."""
        token = self.sessions.get_current_session_token()
        if not token:
            raise UnauthenticatedError()
        return token

    async def run(self, intent: ModelIntent, inputs) -> Interpretation:
        """Run one intent with prebuilt inputs and return the tagged interpretation."""
        token = self.ensure_authenticated()
        request = build(intent, inputs)

        start = time.perf_counter()
        try:
            raw_text = await self.client.complete(request, session_token=token)
        except TableTalkException as e:
            self.metrics.record_intent_error(intent.value, e.code)
            raise
        finally:
            self.metrics.record_latency(intent.value, (time.perf_counter() - start) * 1000)

        interpretation = interpret(intent, raw_text)
        self.metrics.record_interpretation(intent.value, interpretation.used_fallback)
        logger.info(
            f"[orchestrator] {intent.value} -> "
            f"{'fallback' if interpretation.used_fallback else 'parsed'} "
            f"({len(raw_text or '')} chars)"
        )
        return interpretation

    async def analyze_dataset(self, dataset: TabularDataset) -> AnalysisResult:
        """Summarize a freshly parsed dataset."""
        inputs = AnalyzeInputs(
            columns=list(dataset.columns),
            sample=sample(dataset, self.sampling.analysis_sample_rows),
            row_count=dataset.row_count,
        )
        return (await self.run(ModelIntent.ANALYZE_DATASET, inputs)).value

    async def suggest_questions(self, columns: Sequence[str], summary: str) -> QuestionsResult:
        """Five starter questions for a dataset."""
        inputs = SuggestInputs(columns=list(columns), summary=summary or "")
        return (await self.run(ModelIntent.SUGGEST_QUESTIONS, inputs)).value

    async def answer_question(
        self,
        question: str,
        columns: Sequence[str],
        dataset: TabularDataset,
        summary: str,
    ) -> AnswerResult:
        """Answer one question, optionally with a chart."""
        inputs = AnswerInputs(
            question=question,
            columns=list(columns),
            sample=sample(dataset, self.sampling.answer_sample_rows),
            summary=summary or "",
        )
        return (await self.run(ModelIntent.ANSWER_QUESTION, inputs)).value


__all__ = ["QueryOrchestrator"]
