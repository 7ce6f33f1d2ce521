"""Session and state models — the contract between the engine and the UI.

``AssessmentSession`` is the mutable runtime state of one questionnaire
walk-through.  It is owned by the active assessment screen and mutated
only through :class:`~triage_rulesets.engine.TriageEngine`.

``SessionState`` and ``QuestionPayload`` are read-only snapshots that
carry exactly what a screen needs to render: progress, the current
question with its options, which buttons are enabled, and the result
once the session completes.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from .enums import SessionStatus
from .question import AssessmentDefinition, Option, Question
from .result import AssessmentResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssessmentSession(BaseModel):
    """Runtime state of one questionnaire: one nullable slot per question plus a cursor."""

    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    definition: AssessmentDefinition
    answers: list[Option | None] = Field(default_factory=list)
    cursor: int = 0
    status: SessionStatus = SessionStatus.ANSWERING
    total_score: int | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    def model_post_init(self, __context) -> None:
        if not self.answers:
            self.answers = [None] * self.definition.total_questions

    @property
    def disease(self) -> str:
        return self.definition.disease

    @property
    def total_questions(self) -> int:
        return self.definition.total_questions

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    @property
    def all_answered(self) -> bool:
        return bool(self.answers) and all(a is not None for a in self.answers)

    @property
    def current_question(self) -> Question | None:
        """The question under the cursor, or None once the session has left answering."""
        if self.status is not SessionStatus.ANSWERING:
            return None
        return self.definition.questions[self.cursor]

    @property
    def is_last_question(self) -> bool:
        return self.cursor == self.total_questions - 1


class QuestionPayload(BaseModel):
    """Flattened question for the UI.

    ``selected_index`` is the position of the previously chosen option, so
    navigating back re-highlights it.
    """

    index: int
    question: str
    options: list[dict]
    selected_index: int | None = None


class SessionState(BaseModel):
    """Public snapshot of an assessment session."""

    session_id: str
    disease: str
    status: SessionStatus
    question_index: int
    total_questions: int
    answered_count: int
    is_complete: bool
    # (question_index + 1) / total_questions * 100, for the progress bar
    progress: float
    is_last_question: bool
    can_go_back: bool
    can_advance: bool
    current_question: QuestionPayload | None = None
    result: AssessmentResult | None = None
