"""Result models — what the engine hands back to the presentation layer.

Free-text analysis yields one of:
  - SymptomResult: scored text with urgency tier and suggested conditions
  - InvalidInputMarker: the text failed the well-formedness gate

The ``AnalysisResult`` union covers both so callers can dispatch on ``type``.

A completed questionnaire yields an ``AssessmentResult``.

All results are immutable value objects and are never persisted.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from .enums import Tier
from .schema import SuggestedCondition


class SymptomResult(BaseModel):
    """Free-text analysis result: urgency tier plus conditions to check."""

    model_config = ConfigDict(frozen=True)

    type: Literal["symptom_result"] = "symptom_result"
    score: int
    tier: Tier
    label: str
    description: str
    conditions: tuple[SuggestedCondition, ...] = ()
    matched_keywords: tuple[str, ...] = ()


class InvalidInputMarker(BaseModel):
    """Free text was not understood; carries user-facing guidance, no score."""

    model_config = ConfigDict(frozen=True)

    type: Literal["invalid_input"] = "invalid_input"
    message: str
    hint: str = ""


# Callers can match on result.type to dispatch rendering logic.
AnalysisResult = SymptomResult | InvalidInputMarker


class AssessmentResult(BaseModel):
    """Outcome of a completed questionnaire."""

    model_config = ConfigDict(frozen=True)

    disease: str
    total_score: int
    tier: Tier
    label: str
    description: str
    recommendations: tuple[str, ...] = ()
    next_step: str = ""
    consult_professional: bool = False
    disclaimer: str = ""
