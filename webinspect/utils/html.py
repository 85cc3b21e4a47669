"""
Regex helpers for heuristic HTML signal extraction.

Nothing here builds a DOM: the audits count opening tags and attribute
substrings, and a missing pattern simply yields an empty result.
"""
import re
from typing import List, Pattern

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")
_SENTENCE_RE = re.compile(r"[.!?]+")
_VOWEL_RUN_RE = re.compile(r"[aeiou]+", re.IGNORECASE)


def find_all(pattern: Pattern, html: str) -> List[str]:
    """Full-text matches of ``pattern`` (capture groups ignored)."""
    return [m.group(0) for m in pattern.finditer(html or "")]


def first_capture(pattern: Pattern, html: str) -> str:
    m = pattern.search(html or "")
    return m.group(1) if m else ""


def text_content(html: str) -> str:
    """Markup replaced by spaces, whitespace collapsed."""
    return _WS_RE.sub(" ", _TAG_RE.sub(" ", html or "")).strip()


def words_of(text: str) -> List[str]:
    return [w for w in text.split(" ") if w]


def count_syllables(word: str) -> int:
    # collapsed vowel runs, never less than one per word
    return max(1, len(_VOWEL_RUN_RE.findall(word)))


def count_sentences(text: str) -> int:
    return len([s for s in _SENTENCE_RE.split(text) if s.strip()])


def flesch_reading_ease(text: str) -> float:
    """Unclamped Flesch Reading Ease; 0 when there are no words or sentences."""
    words = words_of(text)
    sentences = count_sentences(text)
    if not words or not sentences:
        return 0.0
    syllables = sum(count_syllables(w) for w in words)
    return 206.835 - 1.015 * (len(words) / sentences) - 84.6 * (syllables / len(words))
