"""Exception types raised by the triage SDK.

The SDK follows a ``ValueError``-with-a-descriptive-message convention so
that callers which only know about ``ValueError`` still behave sensibly.
The subclasses let presentation code tell the three failure families
apart:

  - ConfigurationError: a ruleset table is unusable (missing 0-minimum
    threshold, empty question list, duplicate keyword ...).  Fatal for
    the requested operation.
  - AssessmentNotFoundError: the requested disease has no questionnaire.
    The caller should redirect to a safe screen.
  - PreconditionError / InvalidTransitionError: the caller issued an
    action the UI should already have disabled (advance without a
    selection, abandon while submitting, analyze on short text).

Poor-quality free text is *not* an error; the matcher returns an
``InvalidInputMarker`` instead.
"""


class TriageError(Exception):
    """Base class for every exception raised by ``triage_rulesets``."""


class ConfigurationError(TriageError, ValueError):
    """A configuration table is missing or violates its invariants."""


class AssessmentNotFoundError(ConfigurationError, KeyError):
    """No assessment definition exists for the requested disease."""

    def __init__(self, disease: str) -> None:
        self.disease = disease
        super().__init__(f"Assessment for disease {disease!r} not found")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class PreconditionError(TriageError, ValueError):
    """The caller violated an operation's contract."""


class InvalidTransitionError(PreconditionError):
    """The operation is not defined in the session's current state."""
