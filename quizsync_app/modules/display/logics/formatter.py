"""
Explanation formatting rules.
Pure logic: no engine state, no Flask.
"""

import re
from typing import Iterable, List, Optional, Sequence

# "Option 2 is correct because ..." / "Options 1, 3 and 4 are correct because ..."
FORMATTED_PREFIX_RE = re.compile(
    r'^(?:option|options)\s+\d+(?:\s*,\s*\d+)*(?:\s+and\s+\d+)?\s+(?:is|are)\s+correct\s+because\b\s*',
    re.IGNORECASE,
)


def strip_formatted_prefix(explanation: str) -> str:
    """Remove an existing "Option(s) N ... correct because" prefix."""
    text = (explanation or '').strip()
    return FORMATTED_PREFIX_RE.sub('', text, count=1).strip()


def join_option_numbers(numbers: Sequence[int]) -> str:
    if len(numbers) > 2:
        return f"{', '.join(str(n) for n in numbers[:-1])} and {numbers[-1]}"
    return ' and '.join(str(n) for n in numbers)


def format_explanation(explanation: Optional[str], correct_numbers: Optional[Iterable[int]]) -> str:
    """
    Prefix a raw explanation with the (1-based) correct option numbers.

    Already formatted text is stripped and re-formatted so the numbers always
    match the options passed in. No numbers means the raw text is returned.
    """
    raw = strip_formatted_prefix(explanation or '')
    if not raw:
        return ''

    numbers = sorted({int(n) for n in (correct_numbers or []) if int(n) > 0})

    if len(numbers) > 1:
        return f"Options {join_option_numbers(numbers)} are correct because {raw}"
    if len(numbers) == 1:
        return f"Option {numbers[0]} is correct because {raw}"
    return raw


def correct_option_numbers(options: Optional[Iterable[dict]]) -> List[int]:
    """1-based positions of options flagged correct."""
    numbers = []
    for position, option in enumerate(options or [], start=1):
        if not isinstance(option, dict):
            continue
        flag = option.get('correct', option.get('is_correct'))
        if flag is True or (isinstance(flag, str) and flag.strip().lower() == 'true'):
            numbers.append(position)
    return numbers


def correct_answers_banner(num_correct: Optional[int]) -> str:
    """Banner shown next to multi-answer prompts, e.g. "(2 answers are correct)"."""
    count = num_correct or 0
    if count == 0:
        return 'No correct answers'
    suffix = 'answer is' if count == 1 else 'answers are'
    return f"({count} {suffix} correct)"
