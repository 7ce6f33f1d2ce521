"""TriageEngine tests — questionnaire state machine and free-text entry point.

Uses the in-memory ``mini_store`` from conftest:

    Flu    — 2 questions, options (0, 5) and (0, 8); risk tiers {0: low, 10: moderate}
    Triple — 3 questions, second options weigh 2, 5, 3

Delays are 0 except in the tests that exercise them explicitly.
"""

import asyncio

import pytest

from triage_rulesets.engine import TriageEngine
from triage_rulesets.errors import (
    AssessmentNotFoundError,
    ConfigurationError,
    InvalidTransitionError,
    PreconditionError,
)
from triage_rulesets.models.enums import SessionStatus, Tier
from triage_rulesets.models.result import InvalidInputMarker, SymptomResult
from triage_rulesets.ruleset import RulesetStore


async def _answer_all(engine, session, option_index=1):
    """Select ``option_index`` on every question, advancing through to completion."""
    state = None
    for i in range(session.total_questions):
        engine.select_option(session, i, option_index)
        state = await engine.advance(session)
    return state


# =====================================================================
# Session start
# =====================================================================


class TestStartAssessment:

    def test_starts_at_first_question_with_empty_slots(self, engine):
        session = engine.start_assessment("Flu")
        state = engine.current_state(session)
        assert state.status is SessionStatus.ANSWERING
        assert state.question_index == 0
        assert state.answered_count == 0
        assert state.total_questions == 2
        assert session.answers == [None, None]
        assert state.can_go_back is False
        assert state.can_advance is False
        assert state.current_question.question == "Fever?"
        assert state.current_question.selected_index is None
        assert state.progress == 50.0

    def test_unknown_disease_raises_not_found(self, engine):
        """Not-found is a configuration error distinct from any normal result."""
        with pytest.raises(AssessmentNotFoundError, match="not found") as exc_info:
            engine.start_assessment("Scurvy")
        assert isinstance(exc_info.value, ConfigurationError)
        assert isinstance(exc_info.value, KeyError)
        assert engine.active_session is None

    def test_engine_requires_loaded_store(self):
        with pytest.raises(ConfigurationError):
            TriageEngine(RulesetStore(ruleset_dir="/nonexistent"))

    def test_negative_delay_rejected(self, mini_store):
        with pytest.raises(ConfigurationError):
            TriageEngine(mini_store, submit_delay=-1)


# =====================================================================
# Transitions
# =====================================================================


class TestTransitions:

    def test_select_records_option_and_stays(self, engine):
        session = engine.start_assessment("Flu")
        state = engine.select_option(session, 0, 1)
        assert state.question_index == 0
        assert state.answered_count == 1
        assert state.can_advance is True
        assert state.current_question.selected_index == 1
        assert session.answers[0].score == 5

    def test_select_accepts_option_object(self, engine):
        session = engine.start_assessment("Flu")
        option = session.definition.questions[0].options[1]
        engine.select_option(session, 0, option)
        assert session.answers[0] is option

    def test_reselect_replaces_choice(self, engine):
        session = engine.start_assessment("Flu")
        engine.select_option(session, 0, 1)
        engine.select_option(session, 0, 0)
        assert session.answers[0].score == 0

    def test_select_rejects_other_question_index(self, engine):
        session = engine.start_assessment("Flu")
        with pytest.raises(InvalidTransitionError):
            engine.select_option(session, 1, 0)

    def test_select_rejects_foreign_option(self, engine):
        session = engine.start_assessment("Flu")
        foreign = session.definition.questions[1].options[1]  # "Yes" worth 8
        with pytest.raises(PreconditionError):
            engine.select_option(session, 0, foreign)

    def test_select_rejects_out_of_range_index(self, engine):
        session = engine.start_assessment("Flu")
        with pytest.raises(PreconditionError):
            engine.select_option(session, 0, 5)

    @pytest.mark.asyncio
    async def test_advance_requires_selection(self, engine):
        session = engine.start_assessment("Flu")
        with pytest.raises(PreconditionError):
            await engine.advance(session)
        assert session.cursor == 0

    @pytest.mark.asyncio
    async def test_advance_moves_to_next_question(self, engine):
        session = engine.start_assessment("Flu")
        engine.select_option(session, 0, 0)
        state = await engine.advance(session)
        assert state.question_index == 1
        assert state.is_last_question is True
        assert state.can_go_back is True
        assert state.progress == 100.0

    @pytest.mark.asyncio
    async def test_retreat_keeps_selection(self, engine):
        """Going back preserves the answer given at the question we left."""
        session = engine.start_assessment("Flu")
        engine.select_option(session, 0, 1)
        await engine.advance(session)
        engine.select_option(session, 1, 1)

        state = engine.retreat(session)
        assert state.question_index == 0
        assert state.current_question.selected_index == 1
        assert session.answers[1].score == 8

        state = await engine.advance(session)
        assert state.current_question.selected_index == 1

    def test_retreat_rejected_on_first_question(self, engine):
        session = engine.start_assessment("Flu")
        with pytest.raises(InvalidTransitionError):
            engine.retreat(session)


# =====================================================================
# Completion
# =====================================================================


class TestCompletion:

    @pytest.mark.asyncio
    async def test_flu_end_to_end(self, engine):
        """Second option on both questions -> Completed(13) -> MODERATE."""
        session = engine.start_assessment("Flu")
        engine.select_option(session, 0, 1)
        await engine.advance(session)
        engine.select_option(session, 1, 1)
        state = await engine.advance(session)

        assert state.status is SessionStatus.COMPLETED
        assert state.is_complete is True
        assert session.total_score == 13
        assert state.result.total_score == 13
        assert state.result.tier is Tier.MODERATE
        assert state.result.label == "MODERATE RISK"
        assert state.result.consult_professional is True
        assert state.result.recommendations == ("Rest", "See a doctor")
        assert state.result.disclaimer == "Not medical advice."
        assert state.current_question is None

    @pytest.mark.asyncio
    async def test_three_question_total(self, engine):
        session = engine.start_assessment("Triple")
        state = await _answer_all(engine, session)
        assert session.total_score == 10
        assert state.result.tier is Tier.MODERATE

    @pytest.mark.asyncio
    async def test_incomplete_session_cannot_complete(self, engine):
        """Completed is unreachable while any slot is empty."""
        session = engine.start_assessment("Triple")
        engine.select_option(session, 0, 1)
        await engine.advance(session)
        engine.select_option(session, 1, 1)
        await engine.advance(session)

        with pytest.raises(PreconditionError):
            await engine.advance(session)
        assert session.status is SessionStatus.ANSWERING
        with pytest.raises(PreconditionError):
            engine.result(session)

    @pytest.mark.asyncio
    async def test_low_result(self, engine):
        session = engine.start_assessment("Flu")
        state = await _answer_all(engine, session, option_index=0)
        assert state.result.total_score == 0
        assert state.result.tier is Tier.LOW
        assert state.result.consult_professional is False

    @pytest.mark.asyncio
    async def test_no_mutation_after_completion(self, engine):
        session = engine.start_assessment("Flu")
        await _answer_all(engine, session)
        with pytest.raises(InvalidTransitionError):
            engine.select_option(session, 1, 0)
        with pytest.raises(InvalidTransitionError):
            await engine.advance(session)
        with pytest.raises(InvalidTransitionError):
            engine.retreat(session)

    @pytest.mark.asyncio
    async def test_submitting_state_during_delay(self, mini_store):
        """The session sits in SUBMITTING while the cosmetic delay runs."""
        engine = TriageEngine(mini_store, submit_delay=0.05, analyze_delay=0)
        session = engine.start_assessment("Flu")
        engine.select_option(session, 0, 1)
        await engine.advance(session)
        engine.select_option(session, 1, 1)

        task = asyncio.create_task(engine.advance(session))
        await asyncio.sleep(0)
        assert session.status is SessionStatus.SUBMITTING

        # Cancellation is disabled while submitting
        with pytest.raises(InvalidTransitionError):
            engine.abandon(session)

        state = await task
        assert state.status is SessionStatus.COMPLETED
        assert state.result.total_score == 13


# =====================================================================
# Abandonment & isolation
# =====================================================================


class TestAbandon:

    def test_abandon_clears_everything(self, engine):
        session = engine.start_assessment("Flu")
        engine.select_option(session, 0, 1)
        engine.abandon(session)

        assert session.status is SessionStatus.ABANDONED
        assert session.answers == [None, None]
        assert session.cursor == 0
        assert engine.active_session is None

    def test_abandon_is_idempotent(self, engine):
        session = engine.start_assessment("Flu")
        engine.abandon(session)
        engine.abandon(session)
        assert session.status is SessionStatus.ABANDONED

    @pytest.mark.asyncio
    async def test_abandon_after_completion(self, engine):
        session = engine.start_assessment("Flu")
        await _answer_all(engine, session)
        engine.abandon(session)
        assert session.total_score is None
        with pytest.raises(PreconditionError):
            engine.result(session)

    def test_abandoned_session_rejects_mutation(self, engine):
        session = engine.start_assessment("Flu")
        engine.abandon(session)
        with pytest.raises(InvalidTransitionError):
            engine.select_option(session, 0, 0)

    @pytest.mark.asyncio
    async def test_new_session_starts_clean(self, engine):
        """Abandon then restart the same disease: Answering(0), all slots empty."""
        first = engine.start_assessment("Flu")
        engine.select_option(first, 0, 1)
        await engine.advance(first)
        engine.select_option(first, 1, 1)
        engine.abandon(first)

        second = engine.start_assessment("Flu")
        state = engine.current_state(second)
        assert second is not first
        assert state.question_index == 0
        assert second.answers == [None, None]
        assert state.answered_count == 0

    def test_starting_new_session_discards_active(self, engine):
        first = engine.start_assessment("Flu")
        engine.select_option(first, 0, 1)
        second = engine.start_assessment("Triple")

        assert engine.active_session is second
        assert first.status is SessionStatus.ABANDONED
        assert first.answers == [None, None]

    @pytest.mark.asyncio
    async def test_session_discarded_while_submitting_never_completes(self, mini_store):
        engine = TriageEngine(mini_store, submit_delay=0.05, analyze_delay=0)
        first = engine.start_assessment("Flu")
        engine.select_option(first, 0, 1)
        await engine.advance(first)
        engine.select_option(first, 1, 1)

        task = asyncio.create_task(engine.advance(first))
        await asyncio.sleep(0)
        engine.start_assessment("Flu")

        state = await task
        assert state.status is SessionStatus.ABANDONED
        assert first.total_score is None


# =====================================================================
# Free text & catalog
# =====================================================================


class TestAnalyzeText:

    @pytest.mark.asyncio
    async def test_scored_result(self, engine):
        result = await engine.analyze_text("sudden chest pain and a fever since morning")
        assert isinstance(result, SymptomResult)
        assert result.score == 10
        assert result.tier is Tier.HIGH

    @pytest.mark.asyncio
    async def test_invalid_marker(self, engine):
        result = await engine.analyze_text("fever of 39 degrees since two days ago")
        assert isinstance(result, InvalidInputMarker)

    @pytest.mark.asyncio
    async def test_scored_result_waits_for_delay(self, mini_store):
        """A scored result is held back for the analyse delay."""
        engine = TriageEngine(mini_store, submit_delay=0, analyze_delay=0.05)
        task = asyncio.create_task(
            engine.analyze_text("sudden chest pain and a fever since morning")
        )
        await asyncio.sleep(0)
        assert not task.done()

        result = await task
        assert isinstance(result, SymptomResult)
        assert result.score == 10

    @pytest.mark.asyncio
    async def test_invalid_marker_skips_delay(self, mini_store):
        """Invalid input comes back without waiting out the analyse delay."""
        engine = TriageEngine(mini_store, submit_delay=0, analyze_delay=10)
        task = asyncio.create_task(
            engine.analyze_text("fever of 39 degrees since two days ago")
        )
        await asyncio.sleep(0)
        assert task.done()
        assert isinstance(task.result(), InvalidInputMarker)

    @pytest.mark.asyncio
    async def test_short_text_rejected(self, engine):
        with pytest.raises(PreconditionError):
            await engine.analyze_text("fever")


class TestCatalog:

    def test_list_assessments_search_and_category(self, engine):
        assert [d.disease for d in engine.list_assessments()] == ["Flu", "Triple"]
        assert [d.disease for d in engine.list_assessments(search="FL")] == ["Flu"]
        assert [d.disease for d in engine.list_assessments(category="Infectious")] == ["Flu"]
        assert [d.disease for d in engine.list_assessments(category="All")] == ["Flu", "Triple"]
        assert engine.list_assessments(search="zzz") == []
