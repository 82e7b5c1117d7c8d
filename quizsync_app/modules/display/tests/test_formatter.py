import pytest

from quizsync_app.modules.display.logics.formatter import (
    correct_answers_banner,
    correct_option_numbers,
    format_explanation,
    join_option_numbers,
    strip_formatted_prefix,
)


@pytest.mark.parametrize(
    'numbers, expected',
    [
        ([2], 'Option 2 is correct because it orbits closest.'),
        ([3, 1], 'Options 1 and 3 are correct because it orbits closest.'),
        ([4, 1, 2], 'Options 1, 2 and 4 are correct because it orbits closest.'),
        ([], 'it orbits closest.'),
    ],
)
def test_format_explanation_prefixes_correct_options(numbers, expected):
    assert format_explanation('it orbits closest.', numbers) == expected


def test_format_explanation_reformats_existing_prefix():
    raw = 'Option 1 is correct because it orbits closest.'
    assert format_explanation(raw, [2]) == 'Option 2 is correct because it orbits closest.'

    raw = 'options 1, 2 and 3 are correct because all are even.'
    assert format_explanation(raw, [2, 4]) == 'Options 2 and 4 are correct because all are even.'


def test_format_explanation_blank_is_empty():
    assert format_explanation(None, [1]) == ''
    assert format_explanation('   ', [1]) == ''
    assert format_explanation('Option 1 is correct because ', [1]) == ''


def test_strip_formatted_prefix_leaves_plain_text():
    assert strip_formatted_prefix('  Mars is red.  ') == 'Mars is red.'


def test_join_option_numbers():
    assert join_option_numbers([1]) == '1'
    assert join_option_numbers([1, 2]) == '1 and 2'
    assert join_option_numbers([1, 2, 3]) == '1, 2 and 3'


def test_correct_option_numbers_are_one_based():
    options = [
        {'text': 'a', 'correct': True},
        {'text': 'b', 'correct': False},
        {'text': 'c', 'is_correct': 'true'},
        'not-an-option',
        {'text': 'e', 'correct': 'yes'},
    ]
    assert correct_option_numbers(options) == [1, 3]
    assert correct_option_numbers(None) == []


@pytest.mark.parametrize(
    'count, expected',
    [
        (0, 'No correct answers'),
        (None, 'No correct answers'),
        (1, '(1 answer is correct)'),
        (3, '(3 answers are correct)'),
    ],
)
def test_correct_answers_banner(count, expected):
    assert correct_answers_banner(count) == expected
