"""Text processing utilities for label content."""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence, Tuple

DEFAULT_USE = "Medical Use"
MAX_PHRASE_TOKENS = 3
MIN_PHRASE_LENGTH = 3

# Applied in order; later patterns assume earlier ones already ran.
STRIP_PATTERNS: Tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"purposes?:?",
        r"indications?( and usage)?:?",
        r"uses?:?",
        r"for the temporary relief of",
        r"helps prevent",
        r"relieves",
        r"treatment of",
        r"indicated for",
        r"temporarily",
        r"\bthe\b",
        r"\bfor\b",
    )
)
NEWLINES = re.compile(r"[\r\n]+")
DISALLOWED_CHARS = re.compile(r"[^a-zA-Z\s,-]")
CANDIDATE_SPLIT = re.compile(r",|\band\b", re.IGNORECASE)
WORD_RUN = re.compile(r"\w\S*")

TextStep = Callable[[str], str]


def _strip_fragments(text: str) -> str:
    for pattern in STRIP_PATTERNS:
        text = pattern.sub("", text)
    return text


def _collapse_newlines(text: str) -> str:
    return NEWLINES.sub(" ", text)


def _drop_symbols(text: str) -> str:
    return DISALLOWED_CHARS.sub("", text)


CLEANUP_STEPS: Tuple[TextStep, ...] = (_strip_fragments, _collapse_newlines, _drop_symbols, str.strip)


def clean_use_text(text: str, steps: Sequence[TextStep] = CLEANUP_STEPS) -> str:
    """Run the ordered cleanup pipeline over raw purpose/indication text."""
    for step in steps:
        text = step(text)
    return text


def title_case(phrase: str) -> str:
    return WORD_RUN.sub(lambda match: match.group(0)[0].upper() + match.group(0)[1:].lower(), phrase)


def split_candidates(text: str) -> List[str]:
    return CANDIDATE_SPLIT.split(text)


def shorten_phrase(candidate: str) -> Optional[str]:
    """Return a badge-sized phrase for a candidate, or None if it is too short."""
    cleaned = candidate.strip()
    if len(cleaned) <= MIN_PHRASE_LENGTH:
        return None
    return title_case(" ".join(cleaned.split()[:MAX_PHRASE_TOKENS]))


def extract_use_phrases(text: Optional[str], limit: int = 1) -> List[str]:
    """Reduce free-form label text to at most ``limit`` short, title-cased use tags."""
    cleaned = clean_use_text(text or DEFAULT_USE)
    phrases: List[str] = []
    for candidate in split_candidates(cleaned):
        phrase = shorten_phrase(candidate)
        if phrase is None:
            continue
        phrases.append(phrase)
        if len(phrases) >= limit:
            break
    return phrases or [DEFAULT_USE]
