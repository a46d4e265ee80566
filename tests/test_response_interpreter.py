"""Tests for the response interpreter."""

import json

import pytest

from tabletalk.core.prompt_builder import ModelIntent
from tabletalk.core.response_interpreter import (
    DEFAULT_QUESTIONS,
    AnalysisResult,
    FallbackUsed,
    Parsed,
    interpret,
    parse_chart,
)
from tabletalk.schemas import CHART_KINDS, ChartPoint

FIVE = ["Q1?", "Q2?", "Q3?", "Q4?", "Q5?"]

UNUSABLE = [
    "",
    "   ",
    "not json at all",
    "{",
    "null",
    "42",
    '"just a string"',
    "{}",
    '{"questions": ["a", "b", "c", "d", "e"]}',
    '["Q1?", "Q2?"]',
    '["Q1?", "Q2?", "Q3?", "Q4?", 5]',
    '["Q1?", "Q2?", "Q3?", "Q4?", "   "]',
    '[NaN, "a", "b", "c", "d"]',
    "[" * 5000,
]


class TestAnalyze:
    def test_text_is_the_summary(self):
        result = interpret(ModelIntent.ANALYZE_DATASET, "Sales by region.")

        assert isinstance(result, Parsed)
        assert result.value == AnalysisResult(summary="Sales by region.")

    def test_none_becomes_empty_summary(self):
        assert interpret(ModelIntent.ANALYZE_DATASET, None).value.summary == ""


class TestQuestions:
    def test_exact_five(self):
        result = interpret(ModelIntent.SUGGEST_QUESTIONS, json.dumps(FIVE))

        assert isinstance(result, Parsed)
        assert result.used_fallback is False
        assert result.value.questions == tuple(FIVE)

    def test_more_than_five_truncated(self):
        result = interpret(ModelIntent.SUGGEST_QUESTIONS, json.dumps(FIVE + ["Q6?", "Q7?"]))

        assert isinstance(result, Parsed)
        assert result.value.questions == tuple(FIVE)

    def test_questions_are_trimmed(self):
        raw = json.dumps(["  Q1?  "] + FIVE[1:])

        assert interpret(ModelIntent.SUGGEST_QUESTIONS, raw).value.questions[0] == "Q1?"

    def test_prose_wrapped_array_falls_back(self):
        result = interpret(ModelIntent.SUGGEST_QUESTIONS, 'Here you go: ["Q1?","Q2?"]')

        assert isinstance(result, FallbackUsed)
        assert result.value.questions == DEFAULT_QUESTIONS
        assert result.reason

    @pytest.mark.parametrize("raw", UNUSABLE)
    def test_always_five_strings(self, raw):
        result = interpret(ModelIntent.SUGGEST_QUESTIONS, raw)

        questions = result.value.questions
        assert len(questions) == 5
        assert all(isinstance(q, str) and q.strip() for q in questions)


class TestAnswer:
    def test_answer_with_chart(self):
        raw = '{"answer":"Sales rose 10%","chartData":{"type":"bar","data":[{"name":"Q1","value":100}]}}'

        result = interpret(ModelIntent.ANSWER_QUESTION, raw)

        assert isinstance(result, Parsed)
        assert result.value.answer == "Sales rose 10%"
        assert result.value.chart.kind == "bar"
        assert result.value.chart.series == [ChartPoint(label="Q1", value=100)]

    def test_null_chart(self):
        result = interpret(ModelIntent.ANSWER_QUESTION, '{"answer": "No chart needed", "chartData": null}')

        assert result.value.answer == "No chart needed"
        assert result.value.chart is None

    def test_missing_chart_key(self):
        assert interpret(ModelIntent.ANSWER_QUESTION, '{"answer": "ok"}').value.chart is None

    def test_numeric_chart_labels_become_strings(self):
        raw = '{"answer": "a", "chartData": {"type": "line", "data": [{"name": 2024, "value": 1.5}]}}'

        chart = interpret(ModelIntent.ANSWER_QUESTION, raw).value.chart
        assert chart.series[0].label == "2024"

    @pytest.mark.parametrize(
        "chart",
        [
            {"type": "heatmap", "data": [{"name": "a", "value": 1}]},
            {"type": "bar", "data": [{"name": "a", "value": "lots"}]},
            {"type": "bar", "data": [{"name": "a"}]},
            {"type": "bar"},
            {"type": "bar", "data": "oops"},
            "bar",
        ],
    )
    def test_bad_chart_dropped_answer_kept(self, chart):
        raw = json.dumps({"answer": "Kept.", "chartData": chart})

        result = interpret(ModelIntent.ANSWER_QUESTION, raw)

        assert isinstance(result, Parsed)
        assert result.value.answer == "Kept."
        assert result.value.chart is None

    @pytest.mark.parametrize("literal", ["1e400", "-1e400"])
    def test_overflowing_chart_value_dropped(self, literal):
        raw = '{"answer": "Kept.", "chartData": {"type": "bar", "data": [{"name": "a", "value": ' + literal + '}]}}'

        result = interpret(ModelIntent.ANSWER_QUESTION, raw)

        assert isinstance(result, Parsed)
        assert result.value.answer == "Kept."
        assert result.value.chart is None

    def test_parse_chart_accepts_stored_wire_shape(self):
        chart = parse_chart({"type": "area", "data": [{"name": "Jan", "value": 3}]})

        assert chart.kind == "area"
        assert chart.series == [ChartPoint(label="Jan", value=3)]

    @pytest.mark.parametrize(
        "stored",
        [
            {"type": "histogram", "data": [{"name": "a", "value": 1}]},
            {"type": "bar", "data": [{"value": 1}]},
            {},
        ],
    )
    def test_parse_chart_drops_invalid_stored_data(self, stored):
        assert parse_chart(stored) is None

    @pytest.mark.parametrize("raw", UNUSABLE + ['{"answer": 5}', '{"text": "hi"}'])
    def test_unusable_text_becomes_answer(self, raw):
        result = interpret(ModelIntent.ANSWER_QUESTION, raw)

        assert isinstance(result, FallbackUsed)
        assert result.value.answer == raw
        assert result.value.chart is None

    def test_none_answer_is_empty_string(self):
        result = interpret(ModelIntent.ANSWER_QUESTION, None)

        assert result.value.answer == ""

    @pytest.mark.parametrize("kind", ["bar", "line", "pie", "scatter", "area", "radar", "BAR"])
    def test_chart_kind_whitelist(self, kind):
        raw = json.dumps({"answer": "a", "chartData": {"type": kind, "data": []}})

        chart = interpret(ModelIntent.ANSWER_QUESTION, raw).value.chart
        assert chart is None or chart.kind in CHART_KINDS
        assert (chart is not None) == (kind in CHART_KINDS)
