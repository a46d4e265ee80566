"""
TableTalk - Common Schemas.

Shared Pydantic models used across all modules.
"""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field


# =============================================================================
# Error Responses
# =============================================================================


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional context")
    request_id: UUID | None = Field(default=None, description="Request ID for tracing")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail


# =============================================================================
# Charts
# =============================================================================


ChartKind = Literal["bar", "line", "pie", "scatter", "area"]
CHART_KINDS: tuple[str, ...] = ("bar", "line", "pie", "scatter", "area")


class ChartPoint(BaseModel):
    """One labelled value of a chart series."""

    label: str
    value: float = Field(..., allow_inf_nan=False)


class ChartSpec(BaseModel):
    """
    Structured visualization payload attached to an answer.

    Stored and sent over the wire in the shape the model is asked to produce:
    {"type": <kind>, "data": [{"name": <label>, "value": <number>}, ...]}
    """

    kind: ChartKind
    series: list[ChartPoint] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "data": [{"name": p.label, "value": p.value} for p in self.series],
        }

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "ChartSpec":
        return cls(
            kind=payload["type"],
            series=[ChartPoint(label=str(p["name"]), value=p["value"]) for p in payload.get("data") or []],
        )


# =============================================================================
# Health Check
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., pattern="^(healthy|degraded)$")
    version: str
    app_env: str | None = None
    is_production: bool | None = None
    reasoning_provider: str | None = None
    persistence: str | None = None
