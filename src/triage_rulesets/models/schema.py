"""Pydantic models for the triage configuration tables.

These models mirror the YAML files in ``v1/const/``:

  - KeywordRuleTable: keyword -> weight map for free-text scoring
    (``symptom_rules.yaml`` / ``keyword_scores``)
  - ThresholdEntry / ThresholdTable: ordered score tiers, used both for
    free-text urgency (``symptom_rules.yaml`` / ``urgency_levels``) and for
    questionnaire risk (``risk_levels.yaml`` / ``thresholds``)
  - SuggestedCondition / SuggestedConditionSet: conditions to check per
    urgency tier (``suggested_conditions.yaml``)
  - Recommendation / RecommendationSet: boilerplate advice per risk tier
    (``risk_levels.yaml`` / ``recommendations``)

All tables are frozen once built, and their mappings are exposed as
``MappingProxyType`` views so entries cannot be edited in place.  The two threshold tables use unrelated
numeric scales and are configured independently.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator

from .enums import Tier


# ---------------------------------------------------------------------------
# Keyword scores
# ---------------------------------------------------------------------------

class KeywordRuleTable(BaseModel):
    """Case-insensitive keyword -> integer weight map.

    Keys are lower-cased on construction and otherwise kept verbatim, so a
    key such as ``" cold"`` still needs the leading space to match.  Two
    keys that only differ by case are rejected.  ``scores`` is a read-only
    view.
    """

    model_config = ConfigDict(frozen=True)

    scores: dict[str, NonNegativeInt]

    @field_validator("scores")
    @classmethod
    def _normalise(cls, scores: dict[str, int]) -> Mapping[str, int]:
        normalised: dict[str, int] = {}
        for keyword, weight in scores.items():
            if not keyword.strip():
                raise ValueError("keyword must not be blank")
            key = keyword.lower()
            if key in normalised:
                raise ValueError(f"duplicate keyword after case folding: {key!r}")
            normalised[key] = weight
        return MappingProxyType(normalised)

    def __len__(self) -> int:
        return len(self.scores)

    def keywords(self) -> list[str]:
        return list(self.scores)

    def items(self):
        return self.scores.items()


# ---------------------------------------------------------------------------
# Threshold tiers
# ---------------------------------------------------------------------------

class ThresholdEntry(BaseModel):
    """One tier of a threshold table: scores >= ``min_score`` reach ``tier``."""

    model_config = ConfigDict(frozen=True)

    min_score: NonNegativeInt
    tier: Tier
    label: str
    description: str = ""


class ThresholdTable(BaseModel):
    """Ordered score tiers.

    Invariants (checked on construction):
      - at least one entry, and the lowest entry is ``min_score: 0`` / LOW,
        so classification is total over non-negative scores
      - ``min_score`` strictly increasing
      - tier severity never decreases as ``min_score`` grows; adjacent
        bands may share a tier with different labels

    Entries are stored ascending by ``min_score`` whatever the input order.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[ThresholdEntry, ...]

    @field_validator("entries")
    @classmethod
    def _chk(cls, entries: tuple[ThresholdEntry, ...]) -> tuple[ThresholdEntry, ...]:
        if not entries:
            raise ValueError("threshold table must not be empty")
        ordered = tuple(sorted(entries, key=lambda e: e.min_score))
        if ordered[0].min_score != 0 or ordered[0].tier is not Tier.LOW:
            raise ValueError("threshold table must start with a LOW tier at min_score 0")
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.min_score == prev.min_score:
                raise ValueError(f"duplicate min_score {cur.min_score} in threshold table")
            if cur.tier.rank < prev.tier.rank:
                raise ValueError(
                    f"tier {cur.tier.value!r} at {cur.min_score} is milder "
                    f"than {prev.tier.value!r} at {prev.min_score}"
                )
        return ordered

    @classmethod
    def from_minimums(cls, minimums: Mapping[int, Tier | str]) -> ThresholdTable:
        """Build a table from ``{min_score: tier}`` with default labels."""
        entries = []
        for min_score, tier in minimums.items():
            tier = Tier(tier)
            entries.append(
                ThresholdEntry(min_score=min_score, tier=tier, label=tier.value.title())
            )
        return cls(entries=tuple(entries))

    @property
    def tiers(self) -> list[Tier]:
        return [e.tier for e in self.entries]

    def entry_for(self, tier: Tier) -> ThresholdEntry:
        """Return the entry for ``tier``.

        Raises:
            KeyError: if the table has no entry for that tier.
        """
        for entry in self.entries:
            if entry.tier is tier:
                return entry
        raise KeyError(tier)


# ---------------------------------------------------------------------------
# Suggested conditions (free-text matcher)
# ---------------------------------------------------------------------------

class SuggestedCondition(BaseModel):
    """A condition worth checking, shown alongside a free-text result."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class SuggestedConditionSet(BaseModel):
    """Tier -> ordered suggested conditions.  Tiers without an entry suggest nothing."""

    model_config = ConfigDict(frozen=True)

    conditions: dict[Tier, tuple[SuggestedCondition, ...]] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator("conditions")
    @classmethod
    def _freeze(cls, conditions):
        return MappingProxyType(conditions)

    def for_tier(self, tier: Tier) -> list[SuggestedCondition]:
        return list(self.conditions.get(tier, ()))


# ---------------------------------------------------------------------------
# Recommendations (questionnaire)
# ---------------------------------------------------------------------------

class Recommendation(BaseModel):
    """Advice attached to a questionnaire risk tier.

    The text is the same whichever disease was assessed.
    """

    model_config = ConfigDict(frozen=True)

    items: tuple[str, ...] = ()
    next_step: str = ""
    consult_professional: bool = False


class RecommendationSet(BaseModel):
    """Tier -> Recommendation, plus the disclaimer printed under every result."""

    model_config = ConfigDict(frozen=True)

    by_tier: dict[Tier, Recommendation]
    disclaimer: str = ""

    @field_validator("by_tier")
    @classmethod
    def _freeze(cls, by_tier):
        return MappingProxyType(by_tier)

    def for_tier(self, tier: Tier) -> Recommendation:
        """Return the recommendation for ``tier``.

        Raises:
            KeyError: if the tier has no recommendation configured.
        """
        return self.by_tier[tier]
