"""RulesetStore — loads the triage configuration tables from ``v1/`` into typed models.

This is the single source of truth for rule data at runtime.  The store is
loaded once at startup and is read-only afterwards; the engine receives it
injected and never touches the filesystem itself.

Usage::

    store = RulesetStore()          # defaults to v1/ relative to repo root
    store.load()                    # parse all YAML files

``v1/`` is not shipped as package data, so the default only resolves in a
source checkout.  Installed copies pass ``ruleset_dir`` explicitly or set
``TRIAGE_RULESET_DIR`` (see :func:`triage_rulesets.config.load_settings`).

    flu = store.get_assessment("Flu")
    names = store.list_assessments(search="fl")

Or, without any file I/O::

    store = RulesetStore.from_mapping(
        keyword_scores={"fever": 2},
        urgency_levels=[{"min_score": 0, "tier": "low", "label": "Low"}],
        risk_levels=[{"min_score": 0, "tier": "low", "label": "LOW RISK"}],
        recommendations={"low": {"items": ["Rest"]}},
        assessments={"Flu": {"questions": [...]}},
    )
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from triage_rulesets.constants import ALL_CATEGORIES
from triage_rulesets.errors import AssessmentNotFoundError, ConfigurationError
from triage_rulesets.models.question import AssessmentDefinition
from triage_rulesets.models.schema import (
    KeywordRuleTable,
    RecommendationSet,
    SuggestedConditionSet,
    ThresholdTable,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _build(model: type[BaseModel], source: str, **data: Any) -> Any:
    """Validate ``data`` into ``model``, re-raising failures as ConfigurationError."""
    try:
        return model(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {source}: {exc}") from exc


# ---------------------------------------------------------------------------
# RulesetStore
# ---------------------------------------------------------------------------

class RulesetStore:
    """Loads all YAML from ``v1/`` and provides typed lookup.

    Attributes populated after :meth:`load` (or by :meth:`from_mapping`):

        keywords         — KeywordRuleTable for free-text scoring
        urgency_levels   — ThresholdTable for free-text urgency
        suggestions      — SuggestedConditionSet per urgency tier
        risk_levels      — ThresholdTable for questionnaire totals
        recommendations  — RecommendationSet per risk tier
        assessments      — read-only mapping of disease -> AssessmentDefinition
    """

    def __init__(self, ruleset_dir: str | Path | None = None) -> None:
        if ruleset_dir is None:
            ruleset_dir = find_repo_root() / "v1"
        self._base = Path(ruleset_dir)
        self._loaded = False

        # Populated by load()
        self.keywords: KeywordRuleTable | None = None
        self.urgency_levels: ThresholdTable | None = None
        self.suggestions: SuggestedConditionSet = SuggestedConditionSet()
        self.risk_levels: ThresholdTable | None = None
        self.recommendations: RecommendationSet | None = None
        self.assessments: Mapping[str, AssessmentDefinition] = MappingProxyType({})

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse all YAML files under the ruleset directory into typed models.

        Call this once at startup.  Raises ``FileNotFoundError`` if expected
        YAML files are missing and ``ConfigurationError`` if their content
        violates a table invariant.
        """
        const_dir = self._base / "const"

        symptom_rules = load_yaml(const_dir / "symptom_rules.yaml") or {}
        self._set_symptom_rules(
            symptom_rules.get("keyword_scores", {}),
            symptom_rules.get("urgency_levels", []),
            "symptom_rules.yaml",
        )
        self._set_suggestions(
            load_yaml(const_dir / "suggested_conditions.yaml") or {},
            "suggested_conditions.yaml",
        )

        risk = load_yaml(const_dir / "risk_levels.yaml") or {}
        self._set_risk_levels(
            risk.get("thresholds", []),
            risk.get("recommendations", {}),
            risk.get("disclaimer", ""),
            "risk_levels.yaml",
        )

        self._set_assessments(
            load_yaml(self._base / "rules" / "assessments.yaml") or {},
            "assessments.yaml",
        )
        self._loaded = True
        logger.info(
            "RulesetStore loaded: %d keywords, %d urgency tiers, %d risk tiers, %d assessments",
            len(self.keywords),
            len(self.urgency_levels.entries),
            len(self.risk_levels.entries),
            len(self.assessments),
        )

    @classmethod
    def from_mapping(
        cls,
        *,
        keyword_scores: Mapping[str, int],
        urgency_levels: list[Mapping[str, Any]],
        risk_levels: list[Mapping[str, Any]],
        recommendations: Mapping[str, Mapping[str, Any]],
        assessments: Mapping[str, Any],
        suggested_conditions: Mapping[str, list[Mapping[str, Any]]] | None = None,
        disclaimer: str = "",
    ) -> RulesetStore:
        """Build a loaded store from in-memory structures shaped like the YAML files."""
        store = cls(ruleset_dir=Path.cwd())
        store._set_symptom_rules(keyword_scores, urgency_levels, "keyword_scores")
        store._set_suggestions(suggested_conditions or {}, "suggested_conditions")
        store._set_risk_levels(risk_levels, recommendations, disclaimer, "risk_levels")
        store._set_assessments(assessments, "assessments")
        store._loaded = True
        return store

    def _set_symptom_rules(
        self, keyword_scores: Mapping[str, int], urgency_levels: list, source: str
    ) -> None:
        self.keywords = _build(KeywordRuleTable, source, scores=dict(keyword_scores))
        self.urgency_levels = _build(ThresholdTable, source, entries=list(urgency_levels))

    def _set_suggestions(self, raw: Mapping[str, list], source: str) -> None:
        self.suggestions = _build(SuggestedConditionSet, source, conditions=dict(raw))

    def _set_risk_levels(
        self,
        thresholds: list,
        recommendations: Mapping[str, Mapping[str, Any]],
        disclaimer: str,
        source: str,
    ) -> None:
        self.risk_levels = _build(ThresholdTable, source, entries=list(thresholds))
        self.recommendations = _build(
            RecommendationSet, source,
            by_tier=dict(recommendations), disclaimer=disclaimer or "",
        )
        # Every reachable risk tier must have advice attached
        missing = [t.value for t in self.risk_levels.tiers if t not in self.recommendations.by_tier]
        if missing:
            raise ConfigurationError(
                f"Invalid configuration in {source}: no recommendations for tiers {missing}"
            )

    def _set_assessments(self, raw: Mapping[str, Any], source: str) -> None:
        """Parse ``{disease: {category, questions}}``.

        A bare list of questions is accepted as shorthand for
        ``{questions: [...]}`` with the default category.
        """
        parsed: dict[str, AssessmentDefinition] = {}
        for disease, body in raw.items():
            if isinstance(body, list):
                body = {"questions": body}
            elif not isinstance(body, Mapping):
                raise ConfigurationError(
                    f"Invalid configuration in {source}: assessment {disease!r} "
                    f"must be a mapping or a list of questions"
                )
            parsed[disease] = _build(
                AssessmentDefinition, f"{source}/{disease}", **{**body, "disease": disease}
            )
        self.assessments = MappingProxyType(parsed)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def has_assessment(self, disease: str) -> bool:
        return disease in self.assessments

    def get_assessment(self, disease: str) -> AssessmentDefinition:
        """Look up the questionnaire for a disease.

        Raises:
            AssessmentNotFoundError: if the disease has no questionnaire.
        """
        try:
            return self.assessments[disease]
        except KeyError:
            raise AssessmentNotFoundError(disease) from None

    def categories(self) -> list[str]:
        """Distinct assessment categories in first-seen order."""
        seen: dict[str, None] = {}
        for definition in self.assessments.values():
            seen.setdefault(definition.category, None)
        return list(seen)

    def list_assessments(
        self, search: str = "", category: str | None = None
    ) -> list[AssessmentDefinition]:
        """Filter the catalog by case-insensitive name substring and category.

        ``category`` of ``None`` or ``"All"`` disables the category filter.
        Results keep YAML order.
        """
        needle = search.strip().lower()
        return [
            d for d in self.assessments.values()
            if (category in (None, ALL_CATEGORIES) or d.category == category)
            and needle in d.disease.lower()
        ]
