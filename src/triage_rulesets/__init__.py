"""triage_rulesets — Rule-based symptom triage SDK.

Public API:
    TriageEngine      — entry point: free-text analysis and questionnaire sessions
    SymptomMatcher    — keyword-presence scorer for free-text symptoms
    RulesetStore      — loads YAML rulesets into typed models with lookup helpers
    classify, resolve — threshold classification shared by both pipelines
    EngineSettings    — environment-driven engine configuration

Results:
    SymptomResult       — scored free text with urgency tier and conditions
    InvalidInputMarker  — free text failed the well-formedness gate
    AssessmentResult    — classified questionnaire total with recommendations
    SessionState        — renderable snapshot of an assessment session

Errors:
    ConfigurationError, AssessmentNotFoundError, PreconditionError,
    InvalidTransitionError
"""

from triage_rulesets.classifier import classify, resolve
from triage_rulesets.config import EngineSettings, configure_logging, load_settings
from triage_rulesets.engine import TriageEngine
from triage_rulesets.errors import (
    AssessmentNotFoundError,
    ConfigurationError,
    InvalidTransitionError,
    PreconditionError,
    TriageError,
)
from triage_rulesets.matcher import SymptomMatcher
from triage_rulesets.models import (
    AnalysisResult,
    AssessmentDefinition,
    AssessmentResult,
    AssessmentSession,
    InvalidInputMarker,
    Option,
    Question,
    SessionState,
    SessionStatus,
    SymptomResult,
    ThresholdTable,
    Tier,
)
from triage_rulesets.ruleset import RulesetStore

__all__ = [
    # Engine & store
    "TriageEngine",
    "SymptomMatcher",
    "RulesetStore",
    "classify",
    "resolve",
    # Config
    "EngineSettings",
    "configure_logging",
    "load_settings",
    # Models
    "AnalysisResult",
    "AssessmentDefinition",
    "AssessmentResult",
    "AssessmentSession",
    "InvalidInputMarker",
    "Option",
    "Question",
    "SessionState",
    "SessionStatus",
    "SymptomResult",
    "ThresholdTable",
    "Tier",
    # Errors
    "TriageError",
    "ConfigurationError",
    "AssessmentNotFoundError",
    "PreconditionError",
    "InvalidTransitionError",
]
