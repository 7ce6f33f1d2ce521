"""TriageEngine — the entry point the presentation layer talks to.

The engine wraps two independent pipelines that share one threshold
classifier:

  - **Free-text analysis**: :meth:`TriageEngine.analyze_text` delegates to
    :class:`~triage_rulesets.matcher.SymptomMatcher`.
  - **Questionnaire assessment**: a small state machine over an
    :class:`~triage_rulesets.models.session.AssessmentSession`.

Questionnaire states::

    Answering(i) ──next (i < N-1)──► Answering(i+1)
    Answering(i) ──previous (i > 0)─► Answering(i-1)
    Answering(N-1) ──next──► Submitting ──(delay)──► Completed(total)
    Answering(i) | Completed ──abandon──► Abandoned

``next`` requires a selection at the current slot, so ``Completed`` is
only reachable once every slot is filled.  ``Submitting`` has no exit
except automatic completion; abandoning it is rejected.

Exactly one session is active at a time.  Starting a new assessment
discards the previous one unconditionally; a discarded session that was
waiting out its submit delay is simply never completed.

The delays are cosmetic (they let the UI show a spinner) and can be set
to 0.  They are the only ``await`` points in the engine.
"""

from __future__ import annotations

import asyncio
import logging

from triage_rulesets.classifier import resolve
from triage_rulesets.config import EngineSettings, load_settings
from triage_rulesets.constants import DEFAULT_ANALYZE_DELAY, DEFAULT_SUBMIT_DELAY
from triage_rulesets.errors import (
    ConfigurationError,
    InvalidTransitionError,
    PreconditionError,
)
from triage_rulesets.matcher import SymptomMatcher
from triage_rulesets.models.enums import SessionStatus
from triage_rulesets.models.question import AssessmentDefinition, Option
from triage_rulesets.models.result import AnalysisResult, AssessmentResult, SymptomResult
from triage_rulesets.models.session import AssessmentSession, QuestionPayload, SessionState
from triage_rulesets.ruleset import RulesetStore

logger = logging.getLogger(__name__)


class TriageEngine:
    """Orchestrates free-text analysis and questionnaire sessions.

    Args:
        store: a loaded :class:`RulesetStore` instance
        submit_delay: seconds spent in ``Submitting`` before completion
        analyze_delay: seconds to wait before returning a scored text result
    """

    def __init__(
        self,
        store: RulesetStore,
        *,
        submit_delay: float = DEFAULT_SUBMIT_DELAY,
        analyze_delay: float = DEFAULT_ANALYZE_DELAY,
    ) -> None:
        if not store.loaded:
            raise ConfigurationError("RulesetStore must be loaded before building the engine")
        if submit_delay < 0 or analyze_delay < 0:
            raise ConfigurationError("delays must be non-negative")

        self._store = store
        self._matcher = SymptomMatcher(store.keywords, store.urgency_levels, store.suggestions)
        self._submit_delay = submit_delay
        self._analyze_delay = analyze_delay
        self._active: AssessmentSession | None = None

    @classmethod
    def from_settings(cls, settings: EngineSettings | None = None) -> TriageEngine:
        """Load the rulesets named by ``settings`` and build an engine on them."""
        if settings is None:
            settings = load_settings()
        store = RulesetStore(ruleset_dir=settings.ruleset_dir)
        store.load()
        return cls(
            store,
            submit_delay=settings.submit_delay,
            analyze_delay=settings.analyze_delay,
        )

    @property
    def store(self) -> RulesetStore:
        return self._store

    @property
    def matcher(self) -> SymptomMatcher:
        return self._matcher

    @property
    def active_session(self) -> AssessmentSession | None:
        return self._active

    # ==================================================================
    # Free-text analysis
    # ==================================================================

    async def analyze_text(self, text: str) -> AnalysisResult:
        """Analyse free-text symptoms.

        Invalid input is reported immediately; a scored result is returned
        after the analyse delay.

        Raises:
            PreconditionError: if ``text`` is below the length gate.
        """
        result = self._matcher.analyze(text)
        if isinstance(result, SymptomResult) and self._analyze_delay > 0:
            await asyncio.sleep(self._analyze_delay)
        return result

    # ==================================================================
    # Catalog
    # ==================================================================

    def list_assessments(
        self, search: str = "", category: str | None = None
    ) -> list[AssessmentDefinition]:
        """Diseases with a questionnaire, filtered by name and category."""
        return self._store.list_assessments(search=search, category=category)

    # ==================================================================
    # Session lifecycle
    # ==================================================================

    def start_assessment(self, disease: str) -> AssessmentSession:
        """Start a fresh session for ``disease``, discarding any active one.

        Raises:
            AssessmentNotFoundError: if the disease has no questionnaire.
        """
        definition = self._store.get_assessment(disease)

        if self._active is not None:
            logger.info(
                "discarding session %s (%s) in favour of a new one",
                self._active.session_id, self._active.status.value,
            )
            self._discard(self._active)

        session = AssessmentSession(definition=definition)
        self._active = session
        logger.info(
            "started session %s for %r (%d questions)",
            session.session_id, disease, definition.total_questions,
        )
        return session

    def select_option(
        self, session: AssessmentSession, question_index: int, option: Option | int
    ) -> SessionState:
        """Record ``option`` for the question under the cursor.

        ``option`` is either an ``Option`` of that question or its index.
        Re-selecting replaces the earlier choice.
        """
        self._require_answering(session, "select_option")
        if question_index != session.cursor:
            raise InvalidTransitionError(
                f"cannot answer question {question_index} while on question {session.cursor}"
            )

        question = session.definition.questions[question_index]
        if isinstance(option, int) and not isinstance(option, bool):
            if not 0 <= option < len(question.options):
                raise PreconditionError(
                    f"option index {option} out of range for question {question_index}"
                )
            chosen = question.options[option]
        else:
            try:
                chosen = question.options[question.index_of(option)]
            except ValueError:
                raise PreconditionError(
                    f"option {option!r} does not belong to question {question_index}"
                ) from None

        session.answers[question_index] = chosen
        logger.debug("session %s: q%d -> %r", session.session_id, question_index, chosen.text)
        return self.current_state(session)

    async def advance(self, session: AssessmentSession) -> SessionState:
        """Move to the next question, or submit and complete on the last one."""
        self._require_answering(session, "advance")
        if session.answers[session.cursor] is None:
            raise PreconditionError(
                f"question {session.cursor} must be answered before advancing"
            )

        if not session.is_last_question:
            session.cursor += 1
            return self.current_state(session)

        session.status = SessionStatus.SUBMITTING
        if self._submit_delay > 0:
            await asyncio.sleep(self._submit_delay)

        # A new assessment may have discarded this one while we waited
        if session.status is not SessionStatus.SUBMITTING:
            logger.info("session %s discarded during submit; not completing", session.session_id)
            return self.current_state(session)

        self._complete(session)
        return self.current_state(session)

    def retreat(self, session: AssessmentSession) -> SessionState:
        """Go back one question, keeping the selection made at the current one."""
        self._require_answering(session, "retreat")
        if session.cursor == 0:
            raise InvalidTransitionError("already at the first question")
        session.cursor -= 1
        return self.current_state(session)

    def abandon(self, session: AssessmentSession) -> None:
        """Cancel or leave the assessment, wiping every selection and the cursor.

        Abandoning an already abandoned session is a no-op, so screen
        teardown hooks may call this unconditionally.

        Raises:
            InvalidTransitionError: while the session is submitting.
        """
        if session.status is SessionStatus.ABANDONED:
            return
        if session.status is SessionStatus.SUBMITTING:
            logger.warning("abandon() rejected for session %s: submitting", session.session_id)
            raise InvalidTransitionError("cannot abandon a session while it is submitting")
        self._discard(session)

    # ==================================================================
    # Read API
    # ==================================================================

    def result(self, session: AssessmentSession) -> AssessmentResult:
        """Classify a completed session and attach its recommendations.

        Raises:
            PreconditionError: if the session is not completed.
        """
        if session.status is not SessionStatus.COMPLETED or session.total_score is None:
            raise PreconditionError(
                f"result is only available for completed sessions, "
                f"session {session.session_id} is {session.status.value}"
            )

        entry = resolve(session.total_score, self._store.risk_levels)
        try:
            rec = self._store.recommendations.for_tier(entry.tier)
        except KeyError:
            raise ConfigurationError(
                f"no recommendations configured for tier {entry.tier.value!r}"
            ) from None

        return AssessmentResult(
            disease=session.disease,
            total_score=session.total_score,
            tier=entry.tier,
            label=entry.label,
            description=entry.description,
            recommendations=rec.items,
            next_step=rec.next_step,
            consult_professional=rec.consult_professional,
            disclaimer=self._store.recommendations.disclaimer,
        )

    def current_state(self, session: AssessmentSession) -> SessionState:
        """Snapshot of ``session`` for rendering."""
        answering = session.status is SessionStatus.ANSWERING
        complete = session.status is SessionStatus.COMPLETED
        total = session.total_questions

        payload = None
        question = session.current_question
        if question is not None:
            selected = session.answers[session.cursor]
            payload = QuestionPayload(
                index=session.cursor,
                question=question.question,
                options=[
                    {"index": idx, "text": opt.text}
                    for idx, opt in enumerate(question.options)
                ],
                selected_index=question.index_of(selected) if selected is not None else None,
            )

        return SessionState(
            session_id=session.session_id,
            disease=session.disease,
            status=session.status,
            question_index=session.cursor,
            total_questions=total,
            answered_count=session.answered_count,
            is_complete=complete,
            progress=(session.cursor + 1) / total * 100,
            is_last_question=session.is_last_question,
            can_go_back=answering and session.cursor > 0,
            can_advance=answering and session.answers[session.cursor] is not None,
            current_question=payload,
            result=self.result(session) if complete else None,
        )

    # ==================================================================
    # Internal helpers
    # ==================================================================

    @staticmethod
    def _require_answering(session: AssessmentSession, op: str) -> None:
        if session.status is not SessionStatus.ANSWERING:
            logger.warning(
                "%s() rejected for session %s: status is %s",
                op, session.session_id, session.status.value,
            )
            raise InvalidTransitionError(
                f"{op} is only valid while answering, session is {session.status.value}"
            )

    @staticmethod
    def _complete(session: AssessmentSession) -> None:
        if not session.all_answered:
            raise PreconditionError("every question must be answered before completion")
        session.total_score = sum(a.score for a in session.answers)
        session.status = SessionStatus.COMPLETED
        logger.info(
            "session %s completed for %r with score %d",
            session.session_id, session.disease, session.total_score,
        )

    def _discard(self, session: AssessmentSession) -> None:
        session.answers = [None] * session.total_questions
        session.cursor = 0
        session.total_score = None
        session.status = SessionStatus.ABANDONED
        if self._active is session:
            self._active = None
        logger.info("session %s abandoned", session.session_id)
