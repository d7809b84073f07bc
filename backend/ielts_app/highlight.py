from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

_WORD_CHAR_RE = re.compile(r"\w")


@dataclass(frozen=True)
class Segment:
    text: str
    # The phrase this span matched, as written in the phrase list; None for plain text
    label: Optional[str] = None

    def to_dict(self) -> dict:
        return {"text": self.text, "label": self.label}


def _pattern_for(phrase: str) -> re.Pattern:
    escaped = re.escape(phrase)
    # Single words only match whole words; phrases match anywhere
    if " " not in phrase:
        if _WORD_CHAR_RE.match(phrase[0]):
            escaped = r"\b" + escaped
        if _WORD_CHAR_RE.match(phrase[-1]):
            escaped = escaped + r"\b"
    return re.compile(escaped, re.IGNORECASE)


def find_segments(text: str, phrases: Iterable[str]) -> List[Segment]:
    """Split ``text`` into plain and highlighted segments.

    Longer phrases claim their spans first; a later match overlapping an
    already claimed span is skipped. Concatenating the segment texts always
    reproduces ``text`` exactly.
    """
    unique = {p.strip(): None for p in phrases if p and p.strip()}
    ordered = sorted(unique, key=len, reverse=True)

    claimed: List[Tuple[int, int, str]] = []
    for phrase in ordered:
        for match in _pattern_for(phrase).finditer(text):
            start, end = match.span()
            if start == end:
                continue
            if any(start < c_end and c_start < end for c_start, c_end, _ in claimed):
                continue
            claimed.append((start, end, phrase))
    claimed.sort()

    segments: List[Segment] = []
    cursor = 0
    for start, end, phrase in claimed:
        if start > cursor:
            segments.append(Segment(text[cursor:start]))
        segments.append(Segment(text[start:end], phrase))
        cursor = end
    if cursor < len(text):
        segments.append(Segment(text[cursor:]))
    return segments


def segments_for_items(text: str, *groups: Iterable[dict], key: str = "english") -> List[dict]:
    """Highlight the ``key`` field of generated vocabulary-style items in ``text``."""
    phrases = [str(item.get(key) or "") for group in groups for item in (group or []) if isinstance(item, dict)]
    return [segment.to_dict() for segment in find_segments(text or "", phrases)]
