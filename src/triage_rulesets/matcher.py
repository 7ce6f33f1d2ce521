"""SymptomMatcher — scores free-text symptom descriptions.

Analysis runs in three stages:

  1. **Length gate** — the stripped text must be at least ``MIN_CHARS``
     long.  The UI disables the analyse action below that, so calling
     :meth:`SymptomMatcher.analyze` with shorter text is a contract error.
  2. **Well-formedness gate** — a heuristic against gibberish and
     non-medical input (token count, keyword presence, letters only,
     vowel presence).  Failing it yields an ``InvalidInputMarker``, never
     an exception.  Legitimate text containing digits or punctuation is
     rejected too; that is the intended behaviour.
  3. **Scoring** — every keyword found as a substring of the lower-cased
     text adds its weight once, however often it occurs.  The total is
     classified against the urgency threshold table and the tier's
     suggested conditions are attached.
"""

from __future__ import annotations

import logging
import re

from triage_rulesets.classifier import resolve
from triage_rulesets.constants import (
    INVALID_INPUT_HINT,
    INVALID_INPUT_MESSAGE,
    MIN_CHARS,
    MIN_WORDS,
)
from triage_rulesets.errors import PreconditionError
from triage_rulesets.models.result import AnalysisResult, InvalidInputMarker, SymptomResult
from triage_rulesets.models.schema import (
    KeywordRuleTable,
    SuggestedConditionSet,
    ThresholdTable,
)

logger = logging.getLogger(__name__)

# Applied to lower-cased text, so ASCII lower-case letters suffice.
_LETTERS_ONLY = re.compile(r"[a-z\s]+")
_VOWEL = re.compile(r"[aeiou]")


class SymptomMatcher:
    """Keyword-presence scorer for free-form symptom text.

    Args:
        keywords: keyword -> weight table
        thresholds: urgency threshold table for free text
        suggestions: suggested conditions per urgency tier
        min_chars: length gate; defaults to ``MIN_CHARS``
    """

    def __init__(
        self,
        keywords: KeywordRuleTable,
        thresholds: ThresholdTable,
        suggestions: SuggestedConditionSet,
        *,
        min_chars: int = MIN_CHARS,
    ) -> None:
        self._keywords = keywords
        self._thresholds = thresholds
        self._suggestions = suggestions
        self._min_chars = min_chars

    @property
    def min_chars(self) -> int:
        return self._min_chars

    # ------------------------------------------------------------------
    # Length gate
    # ------------------------------------------------------------------

    def meets_length_gate(self, text: str) -> bool:
        """True once the stripped text is long enough to analyse."""
        return len(text.strip()) >= self._min_chars

    def chars_remaining(self, text: str) -> int:
        """How many more characters the user must type before analysis is enabled."""
        return max(0, self._min_chars - len(text.strip()))

    # ------------------------------------------------------------------
    # Well-formedness gate
    # ------------------------------------------------------------------

    def is_well_formed(self, text: str) -> bool:
        """Heuristic gate: enough words, a known keyword, letters only, a vowel.

        All four checks must pass.  This is not a language check; it
        accepts plenty of nonsense and rejects e.g. "fever of 39 degrees".
        """
        lowered = text.lower()

        if len(lowered.split()) < MIN_WORDS:
            return False

        has_keyword = any(keyword in lowered for keyword in self._keywords.scores)
        only_letters = _LETTERS_ONLY.fullmatch(lowered) is not None
        has_vowel = _VOWEL.search(lowered) is not None

        return has_keyword and only_letters and has_vowel

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def matched_keywords(self, text: str) -> list[str]:
        """Keywords present in ``text`` (sorted), each listed once."""
        lowered = text.lower()
        return sorted(k for k in self._keywords.scores if k in lowered)

    def score(self, text: str) -> int:
        """Sum the weight of every keyword present in ``text``, counting each once."""
        return sum(self._keywords.scores[k] for k in self.matched_keywords(text))

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self, text: str) -> AnalysisResult:
        """Validate, score, and classify ``text``.

        Returns:
            ``InvalidInputMarker`` if the text fails the well-formedness
            gate, otherwise a ``SymptomResult``.

        Raises:
            PreconditionError: if the text is shorter than the length gate.
        """
        if not self.meets_length_gate(text):
            logger.warning(
                "analyze() called with %d chars, gate is %d",
                len(text.strip()), self._min_chars,
            )
            raise PreconditionError(
                f"symptom text must be at least {self._min_chars} characters"
            )

        if not self.is_well_formed(text):
            logger.info("symptom text rejected by well-formedness gate")
            return InvalidInputMarker(message=INVALID_INPUT_MESSAGE, hint=INVALID_INPUT_HINT)

        matched = self.matched_keywords(text)
        score = sum(self._keywords.scores[k] for k in matched)
        entry = resolve(score, self._thresholds)
        logger.debug("symptom text matched %s -> score=%d tier=%s", matched, score, entry.tier.value)

        return SymptomResult(
            score=score,
            tier=entry.tier,
            label=entry.label,
            description=entry.description,
            conditions=tuple(self._suggestions.for_tier(entry.tier)),
            matched_keywords=tuple(matched),
        )
