import asyncio
import unittest
from unittest.mock import MagicMock

from quizsync_app.core.signals import content_availability_changed, explanation_discarded
from quizsync_app.modules.display.engine import AsyncioTickScheduler, VirtualTickScheduler
from quizsync_app.modules.display.interface import DisplayInterface
from quizsync_app.modules.display.providers import (
    BannerSource,
    InMemoryDisplayModeStore,
    QuestionSource,
    StaticQuizSource,
)
from quizsync_app.modules.display.schemas import DisplaySyncSettings, ResolveOutcome
from quizsync_app.modules.display.services.session_service import DisplaySession

Q0 = 'Which planet is known as the Red Planet?'
Q0_EXPLANATION = 'Option 2 is correct because Iron oxide on its surface gives it a reddish look.'
Q1_VIEW = 'Which of these are prime numbers? <span class="correct-count">(2 answers are correct)</span>'


def test_initial_load_shows_question_text(session):
    generation = session.start(0)

    assert generation == 0
    assert session.display_text == Q0
    assert session.current_index == 0


def test_answer_reveals_formatted_explanation(session, scheduler):
    """Scenario A: current token, gate open, shouldShow -> explanation text."""
    session.start(0)
    scheduler.advance(200)

    session.answer()
    scheduler.advance(0)

    assert session.display_text == Q0_EXPLANATION
    snapshot = session.snapshot()
    assert snapshot['state'] == 'explanation_visible'
    assert snapshot['gate_open'] is True
    assert snapshot['answered'] is True


def test_result_arriving_while_locked_is_parked_then_shown(session, scheduler):
    session.start(0)
    session.mark_answered()

    outcome = session.resolve_explanation(0, 'Because.', session.generation)

    assert outcome is ResolveOutcome.PARKED
    assert session.context.channel.get_gate(0) is False
    assert session.display_text == Q0

    scheduler.advance(200)
    assert session.context.channel.get_gate(0) is True
    assert session.display_text == 'Because.'


def test_late_result_from_previous_question_is_discarded(scheduler, questions):
    """Scenario B: a gen-0 result landing after navigation never renders."""
    session = DisplayInterface.build_session(
        questions,
        scheduler=scheduler,
        settings=DisplaySyncSettings(explanation_delay_ms=300),
    )
    seen = []
    reasons = []

    def on_discard(sender, **kwargs):
        reasons.append(kwargs['reason'])

    session.start(0)
    scheduler.advance(200)
    session.stream.subscribe(seen.append)

    with explanation_discarded.connected_to(on_discard):
        session.answer()
        session.navigate(1)
        assert session.generation == 1
        scheduler.advance(400)

    assert reasons == ['stale']
    assert session.display_text == Q1_VIEW
    assert not any('reddish' in text for text in seen)
    assert session.context.channel.get_text(1) == ''


def test_explanation_inside_quiet_window_renders_once_after_it(session, scheduler):
    """Scenario C: held until the quiet window ends, then one frame."""
    session.start(0)
    scheduler.advance(200)
    seen = []
    session.stream.subscribe(seen.append)

    session.navigate(1)
    scheduler.advance_to(250)
    session.mark_answered(1)
    outcome = session.resolve_explanation(1, 'Because they are prime.', session.generation)
    assert outcome is ResolveOutcome.APPLIED

    scheduler.advance_to(349)
    assert session.stream.latest == Q1_VIEW

    scheduler.advance_to(400)
    assert seen == [Q0, Q1_VIEW, 'Because they are prime.']


def test_superseded_unlock_keeps_channel_locked(session, scheduler):
    session.start(0)
    scheduler.advance(200)

    session.navigate(1)
    scheduler.advance(10)
    session.navigate(2)

    scheduler.advance_to(249)
    assert session.context.channel.locked is True
    assert session.coordinator.target_index == 2

    scheduler.advance_to(259)
    assert session.context.channel.locked is False
    assert session.coordinator.navigating is False


def test_returning_to_a_question_does_not_resurrect_its_explanation(session, scheduler):
    session.start(0)
    scheduler.advance(200)
    session.answer()
    scheduler.advance(0)
    assert session.display_text == Q0_EXPLANATION

    seen = []
    session.stream.subscribe(seen.append)
    session.navigate(1)
    scheduler.advance(500)
    session.navigate(0)
    scheduler.advance(500)

    assert session.context.channel.get_text(0) == ''
    assert session.display_text == Q0
    assert session.snapshot()['state'] == 'awaiting_explanation'
    assert seen[0] == Q0_EXPLANATION
    assert Q0_EXPLANATION not in seen[1:]


def test_missing_explanation_uses_fallback_literal(session, scheduler):
    session.start(2)
    scheduler.advance(200)

    session.answer()
    scheduler.advance(0)

    assert session.display_text == 'No explanation available'


def test_explanation_mode_makes_explanation_eligible(session, scheduler):
    session.start(0)
    scheduler.advance(200)
    session.resolve_explanation(0, 'Because.', session.generation)
    assert session.display_text == Q0

    session.set_display_mode('explanation')

    assert session.display_text == 'Because.'
    assert session.snapshot()['mode'] == 'explanation'


def test_show_explanation_flag_is_reset_by_navigation(session, scheduler):
    session.start(0)
    session.show_explanation(True)
    assert session.should_show is True

    session.navigate(1)

    assert session.should_show is False


def test_blank_question_text_holds_last_good_text(session, scheduler):
    changes = []

    def on_change(sender, **kwargs):
        changes.append(kwargs['available'])

    session.start(0)
    scheduler.advance(200)
    assert session.display_text == Q0

    with content_availability_changed.connected_to(on_change, sender=session):
        session.questions.update_question(0, text='')
        session.refresh()

    assert session.display_text == Q0
    assert session.content_available is False
    assert changes == [False]


def test_fetch_explanation_async(session, scheduler):
    session.start(0)
    scheduler.advance(200)
    session.show_explanation(True)

    outcome = asyncio.run(session.fetch_explanation())

    assert outcome is ResolveOutcome.APPLIED
    assert session.display_text == Q0_EXPLANATION


def test_navigate_rejects_negative_index(session):
    session.start(0)
    try:
        session.navigate(-1)
    except ValueError as exc:
        assert 'non-negative' in str(exc)
    else:
        raise AssertionError('negative index accepted')


def test_session_on_asyncio_scheduler(questions):
    settings = DisplaySyncSettings(tick_ms=1, coalesce_ms=1, unlock_delay_ms=2, quiet_zone_ms=10, settle_ms=2)

    async def scenario():
        session = DisplayInterface.build_session(
            questions, scheduler=AsyncioTickScheduler(tick_ms=settings.tick_ms), settings=settings
        )
        seen = []
        session.start(0)
        session.stream.subscribe(seen.append)
        session.answer()
        assert session.context.channel.locked is True

        await asyncio.sleep(0.1)
        return session.context.channel.locked, session.display_text, seen

    locked, text, seen = asyncio.run(scenario())

    assert locked is False
    assert text == Q0_EXPLANATION
    assert seen == [Q0, Q0_EXPLANATION]


class AlwaysBanner(BannerSource):
    def correct_answer_banner(self, index):
        return '(2 answers are correct)'


class TestDisplaySessionCollaborators(unittest.TestCase):

    def setUp(self):
        self.scheduler = VirtualTickScheduler()

    def test_single_answer_question_never_gets_banner(self):
        """Scenario D: banner output is ignored for single-answer questions."""
        source = StaticQuizSource([{'text': 'Q0 text?', 'options': [{'correct': True}, {'correct': False}]}])
        session = DisplaySession(source, AlwaysBanner(), InMemoryDisplayModeStore(), self.scheduler)
        session.start(0)

        self.assertEqual(session.display_text, 'Q0 text?')
        self.assertNotIn('correct-count', session.display_text)

    def test_failing_question_source_falls_back_to_loading_text(self):
        questions = MagicMock(spec=QuestionSource)
        questions.question_text.side_effect = RuntimeError('backend down')
        questions.is_multiple_answer.return_value = False
        questions.option_count.return_value = 0
        banners = MagicMock(spec=BannerSource)
        banners.correct_answer_banner.return_value = ''

        session = DisplaySession(questions, banners, InMemoryDisplayModeStore(), self.scheduler)
        session.start(0)

        self.assertEqual(session.display_text, 'Loading question…')
        self.assertFalse(session.content_available)

    def test_request_without_explanation_source_is_noop(self):
        source = StaticQuizSource([{'text': 'Q0 text?', 'options': [{'correct': True}]}])
        session = DisplaySession(source, source, InMemoryDisplayModeStore(), self.scheduler)
        session.start(0)

        self.assertIsNone(session.request_explanation())
        self.assertEqual(self.scheduler.flush(), 2)
        self.assertEqual(session.display_text, 'Q0 text?')


if __name__ == '__main__':
    unittest.main()
