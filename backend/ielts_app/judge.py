"""
Answer judge for the vocabulary fill-in game.

Decides whether a learner's free-text answer should count against a reference
answer while tolerating case, punctuation, spacing, small typos and partial
phrasing. The decision is made in a fixed order:

1. exact match of the normalized strings
2. containment, when the shorter string is at least 60% of the longer one
3. Levenshtein similarity of at least 85%

The similarity score is always computed and returned, even when an earlier rule
already accepted the answer.
"""

from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel


CONTAINMENT_MIN_RATIO = 0.6
SIMILARITY_THRESHOLD = 85.0

_PUNCTUATION_RE = re.compile(r"[.,;:!?()\[\]{}'\"]")
_WHITESPACE_RE = re.compile(r"\s+")


class InvalidAnswer(ValueError):
    pass


class Judgment(BaseModel):
    is_correct: bool
    # Percentage in [0, 100], rounded to two decimals
    similarity: float
    normalized_user: str
    normalized_correct: str


def normalize(text: str) -> str:
    text = _PUNCTUATION_RE.sub("", text.lower().strip())
    return _WHITESPACE_RE.sub(" ", text).strip()


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance with unit costs, keeping a single rolling row."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)
    previous: List[int] = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j], current[j - 1], previous[j - 1]) + 1)
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 100.0
    distance = levenshtein(a.lower(), b.lower())
    return (max_len - distance) / max_len * 100


def _contains_enough(a: str, b: str) -> bool:
    if a not in b and b not in a:
        return False
    shorter, longer = sorted((len(a), len(b)))
    return shorter / longer >= CONTAINMENT_MIN_RATIO


def judge(user_answer: str, correct_answer: str) -> Judgment:
    """Judge ``user_answer`` against ``correct_answer``.

    Raises:
        InvalidAnswer: either input is missing, blank, or has nothing left
            after normalization (e.g. only punctuation).
    """
    if not user_answer or not user_answer.strip() or not correct_answer or not correct_answer.strip():
        raise InvalidAnswer("Missing required fields: userAnswer and correctAnswer")
    normalized_user = normalize(user_answer)
    normalized_correct = normalize(correct_answer)
    if not normalized_user or not normalized_correct:
        raise InvalidAnswer("Answers must contain at least one letter or digit")

    score = similarity(normalized_user, normalized_correct)
    if normalized_user == normalized_correct:
        is_correct = True
    elif _contains_enough(normalized_user, normalized_correct):
        is_correct = True
    else:
        # Threshold uses the unrounded score; rounding is for display only
        is_correct = score >= SIMILARITY_THRESHOLD

    return Judgment(
        is_correct=is_correct,
        similarity=round(score, 2),
        normalized_user=normalized_user,
        normalized_correct=normalized_correct,
    )
