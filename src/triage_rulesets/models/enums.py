"""Enumerations shared by the triage models."""

import enum


class Tier(str, enum.Enum):
    """Risk / urgency tier assigned by thresholding a numeric score.

    Ordered from least to most severe; compare with :attr:`rank`.
    """

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {Tier.LOW: 0, Tier.MODERATE: 1, Tier.HIGH: 2}


class SessionStatus(str, enum.Enum):
    """Lifecycle states for an assessment session.

    Transitions:
        answering -> answering   (select / next / previous)
        answering -> submitting  (next on the last question)
        submitting -> completed  (after the presentation delay)
        answering | completed -> abandoned (cancel or navigate away)
    """

    ANSWERING = "answering"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
