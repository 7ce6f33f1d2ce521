"""Public model re-exports for triage_rulesets.

Consumers should import from ``triage_rulesets.models`` rather than
reaching into sub-modules directly.
"""

# --- Enums ---
from triage_rulesets.models.enums import SessionStatus, Tier

# --- Configuration tables ---
from triage_rulesets.models.schema import (
    KeywordRuleTable,
    Recommendation,
    RecommendationSet,
    SuggestedCondition,
    SuggestedConditionSet,
    ThresholdEntry,
    ThresholdTable,
)

# --- Questionnaire ---
from triage_rulesets.models.question import AssessmentDefinition, Option, Question

# --- Results ---
from triage_rulesets.models.result import (
    AnalysisResult,
    AssessmentResult,
    InvalidInputMarker,
    SymptomResult,
)

# --- Session / state ---
from triage_rulesets.models.session import (
    AssessmentSession,
    QuestionPayload,
    SessionState,
)

__all__ = [
    # Enums
    "SessionStatus",
    "Tier",
    # Configuration tables
    "KeywordRuleTable",
    "Recommendation",
    "RecommendationSet",
    "SuggestedCondition",
    "SuggestedConditionSet",
    "ThresholdEntry",
    "ThresholdTable",
    # Questionnaire
    "AssessmentDefinition",
    "Option",
    "Question",
    # Results
    "AnalysisResult",
    "AssessmentResult",
    "InvalidInputMarker",
    "SymptomResult",
    # Session
    "AssessmentSession",
    "QuestionPayload",
    "SessionState",
]
