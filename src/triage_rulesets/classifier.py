"""Threshold classification shared by the free-text matcher and the questionnaire.

Given a non-negative score and a :class:`ThresholdTable`, pick the entry
with the largest ``min_score`` that the score meets or exceeds.  Boundary
scores belong to the higher tier (``>=``)::

    table = ThresholdTable.from_minimums({0: "low", 10: "moderate", 20: "high"})
    classify(9, table)   # Tier.LOW
    classify(10, table)  # Tier.MODERATE
"""

from __future__ import annotations

import logging

from triage_rulesets.errors import ConfigurationError
from triage_rulesets.models.enums import Tier
from triage_rulesets.models.schema import ThresholdEntry, ThresholdTable

logger = logging.getLogger(__name__)


def resolve(score: int, table: ThresholdTable) -> ThresholdEntry:
    """Return the threshold entry ``score`` falls into.

    Raises:
        ValueError: if ``score`` is negative.
        ConfigurationError: if no entry matches, which only happens when the
            table lacks its 0-minimum entry.
    """
    if score < 0:
        raise ValueError(f"score must be non-negative, got {score}")

    # Entries are stored ascending; scan from the top so the first hit wins.
    for entry in reversed(table.entries):
        if score >= entry.min_score:
            return entry

    raise ConfigurationError(
        f"threshold table has no entry covering score {score} (missing 0-minimum tier)"
    )


def classify(score: int, table: ThresholdTable) -> Tier:
    """Return the tier ``score`` falls into.  See :func:`resolve`."""
    tier = resolve(score, table).tier
    logger.debug("classified score=%d as %s", score, tier.value)
    return tier
