"""Questionnaire models for per-disease risk assessments.

Each disease in ``v1/rules/assessments.yaml`` maps to an ordered list of
multiple-choice questions.  Every option carries an integer score weight;
a completed assessment's total is the sum of the selected options'
weights.

The YAML layout is::

    Flu:
      category: Respiratory
      questions:
        - question: Do you have a fever?
          options:
            - {text: "No", score: 0}
            - {text: "Yes, above 38°C", score: 5}
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from triage_rulesets.constants import DEFAULT_CATEGORY


class Option(BaseModel):
    """A selectable answer with its score weight (may be 0)."""

    model_config = ConfigDict(frozen=True)

    text: str
    score: NonNegativeInt = 0


class Question(BaseModel):
    """A multiple-choice question; at least one option is required."""

    model_config = ConfigDict(frozen=True)

    question: str
    options: tuple[Option, ...] = Field(min_length=1)

    def index_of(self, option: Option) -> int:
        """Position of ``option`` in this question.

        Identity is checked first so that two options with equal text and
        score still resolve to the one the caller actually holds.

        Raises:
            ValueError: if the option does not belong to this question.
        """
        for idx, opt in enumerate(self.options):
            if opt is option:
                return idx
        return self.options.index(option)


class AssessmentDefinition(BaseModel):
    """The fixed, ordered questionnaire for one disease."""

    model_config = ConfigDict(frozen=True)

    disease: str
    category: str = DEFAULT_CATEGORY
    questions: tuple[Question, ...] = Field(min_length=1)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def max_score(self) -> int:
        """Highest total reachable by picking the heaviest option everywhere."""
        return sum(max(o.score for o in q.options) for q in self.questions)
