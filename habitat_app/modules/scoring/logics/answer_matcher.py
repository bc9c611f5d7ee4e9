"""
Answer Matcher - pure verdict for a single answer item.

Comparison is exact and case-sensitive: no trimming, no case folding.
NO database, NO Flask, NO model dependencies allowed.
"""
from typing import Any, Optional

from ..schemas import AnswerItem


def match(item: AnswerItem, submitted: Optional[Any]) -> bool:
    """
    Decide whether ``submitted`` answers ``item`` correctly.

    Args:
        item: The answer item being checked.
        submitted: The learner's answer, or None when the item was left blank.

    Returns:
        True only for an exact match. A set-valued ``correct_answer`` accepts
        any one of its members. Unanswered items never match.

    Examples:
        >>> match(AnswerItem('gap-0', 'coral'), 'coral')
        True
        >>> match(AnswerItem('gap-0', 'coral'), 'Coral ')
        False
        >>> match(AnswerItem('gap-0', 'coral'), None)
        False
    """
    if submitted is None:
        return False

    expected = item.correct_answer
    if isinstance(expected, frozenset):
        try:
            return submitted in expected
        except TypeError:
            # Unhashable submissions (lists, dicts) can never equal a string.
            return False
    return submitted == expected
