import asyncio

import pytest

from quizsync_app.core.defaults import DEFAULT_APP_CONFIGS
from quizsync_app.core.error_handlers import NotFoundError
from quizsync_app.core.signals import navigation_completed, navigation_started
from quizsync_app.modules.display.exceptions import DisplaySyncError, StaleGenerationError
from quizsync_app.modules.display.interface import DisplayInterface
from quizsync_app.modules.display.providers import (
    ExplanationSource,
    InMemoryDisplayModeStore,
    StaticQuizSource,
)
from quizsync_app.modules.display.schemas import DisplayMode, DisplaySyncSettings
from quizsync_app.modules.display.services.producer import ExplanationProducer
from quizsync_app.modules.display.services.registry import SessionRegistry
from quizsync_app.services.config_service import collect_display_settings, get_runtime_config


# ── configuration ───────────────────────────────────────────────────


def test_settings_from_mapping():
    settings = DisplaySyncSettings.from_mapping(
        {'DISPLAY_QUIET_ZONE_MS': '200', 'DISPLAY_SETTLE_MS': -5, 'DISPLAY_LOADING_TEXT': 'Wait…'}
    )

    assert settings.quiet_zone_ms == 200.0
    assert settings.settle_ms == 0.0
    assert settings.loading_text == 'Wait…'
    assert settings.unlock_delay_ms == 32


def test_collect_display_settings_uses_defaults_for_missing_keys():
    resolved = collect_display_settings({'DISPLAY_TICK_MS': 8})

    assert resolved['DISPLAY_TICK_MS'] == 8
    assert resolved['DISPLAY_COALESCE_MS'] == DEFAULT_APP_CONFIGS['DISPLAY_COALESCE_MS']


def test_runtime_config_reads_app_config(app):
    app.config['DISPLAY_QUIET_ZONE_MS'] = 90

    assert get_runtime_config('DISPLAY_QUIET_ZONE_MS') == 90
    assert get_runtime_config('DISPLAY_UNKNOWN', 'fallback') == 'fallback'
    assert DisplayInterface.load_settings().quiet_zone_ms == 90


def test_runtime_config_outside_app_context():
    assert get_runtime_config('DISPLAY_SETTLE_MS') == 40


def test_display_blueprint_registered(app):
    assert 'display' in app.blueprints
    assert isinstance(app.extensions['display_sessions'], SessionRegistry)
    assert app.extensions['display_sessions'].max_sessions == 4


# ── collaborators ───────────────────────────────────────────────────


def test_static_source_reads_question_fields(questions):
    source = StaticQuizSource(questions)

    assert len(source) == 3
    assert source.question_text(2) == 'What is the boiling point of water at sea level?'
    assert source.correct_option_numbers(1) == [1, 3]
    assert source.is_multiple_answer(1) is True
    assert source.correct_answer_banner(1) == '(2 answers are correct)'
    assert source.correct_answer_banner(0) == ''
    assert source.question_text(10) == ''
    assert source.option_count(10) == 0


def test_mode_store_keeps_mode_and_answered_apart():
    store = InMemoryDisplayModeStore()

    store.mark_answered(0)
    state = store.set_mode(0, 'explanation')

    assert state.mode is DisplayMode.EXPLANATION
    assert state.answered is True
    assert store.get(1).mode is DisplayMode.QUESTION
    with pytest.raises(ValueError):
        store.set_mode(0, 'sideways')


class AsyncExplanations(ExplanationSource):
    async def raw_explanation(self, index):
        await asyncio.sleep(0)
        return 'It is the only even prime.'

    def correct_option_numbers(self, index):
        return [1]


def test_producer_formats_and_tags(questions):
    producer = ExplanationProducer(StaticQuizSource(questions))

    result = producer.produce(1, token=7)

    assert result.index == 1
    assert result.token == 7
    assert result.text == 'Options 1 and 3 are correct because They have no divisors other than 1 and themselves.'
    assert producer.produce(2, token=7).text == 'No explanation available'


def test_producer_async_source():
    producer = ExplanationProducer(AsyncExplanations())

    result = asyncio.run(producer.produce_async(0, token=3))

    assert result.text == 'Option 1 is correct because It is the only even prime.'
    with pytest.raises(TypeError):
        producer.produce(0, token=3)


# ── errors and signals ──────────────────────────────────────────────


def test_display_errors_carry_context():
    error = StaleGenerationError(0, token=0, current=1)

    assert isinstance(error, DisplaySyncError)
    assert error.message == 'Stale explanation for Q1 (token=0, current=1)'
    assert error.to_dict()['code'] == 'STALE_GENERATION'
    assert error.to_dict()['details'] == {'index': 0}


def test_registry_errors():
    registry = SessionRegistry(max_sessions=1)

    with pytest.raises(NotFoundError):
        registry.get('nope')
    with pytest.raises(NotFoundError):
        registry.remove('nope')


def test_navigation_signals(session, scheduler):
    started = []
    completed = []

    def on_start(sender, **kwargs):
        started.append(kwargs)

    def on_complete(sender, **kwargs):
        completed.append(kwargs)

    with navigation_started.connected_to(on_start), navigation_completed.connected_to(on_complete):
        session.start(0)
        session.navigate(2)
        scheduler.advance(16)

    assert [(s['target_index'], s['generation']) for s in started] == [(0, 0), (2, 1)]
    assert [c['target_index'] for c in completed] == [0, 2]
