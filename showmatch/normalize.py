import re
from pathlib import PurePath
from typing import Iterable, List, Optional

STOP_WORDS = frozenset({"the", "and", "&", "of", "in", "on", "at", "to", "for", "with", "a", "an"})

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,5}$")


def _stop_word_pattern(stop_words: Iterable[str]) -> Optional[re.Pattern]:
    words = sorted(w.lower() for w in stop_words if w)
    if not words:
        return None
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b")


_DEFAULT_STOP_PATTERN = _stop_word_pattern(STOP_WORDS)


def normalize_label(text: Optional[str], stop_words: Iterable[str] = STOP_WORDS) -> str:
    """Canonical comparable form of a show name or filename.

    Lower-cases, turns punctuation into spaces, drops standalone stop-words
    and collapses whitespace. Never raises; may return an empty string.
    """
    if not text:
        return ""
    pattern = _DEFAULT_STOP_PATTERN if stop_words is STOP_WORDS else _stop_word_pattern(stop_words)
    s = _NON_WORD.sub(" ", text.lower())
    if pattern is not None:
        s = pattern.sub("", s)
    return _WHITESPACE.sub(" ", s).strip()


def extract_keywords(
    text: Optional[str],
    min_length: int = 3,
    stop_words: Iterable[str] = STOP_WORDS,
) -> List[str]:
    normalized = normalize_label(text, stop_words)
    return [word for word in normalized.split(" ") if len(word) >= min_length]


def strip_extension(filename: Optional[str]) -> str:
    """Base name of a file without directory or trailing extension.

    Only a short alphanumeric suffix counts as an extension, so titles
    such as "Mr. Rogers" survive intact.
    """
    if not filename:
        return ""
    name = PurePath(filename).name
    return _EXTENSION.sub("", name)


def slugify_show_name(name: str) -> str:
    s = re.sub(r"[^\w\s]", "", name.lower())
    return _WHITESPACE.sub("-", s.strip())


def compact_name(name: Optional[str]) -> str:
    if not name:
        return ""
    return re.sub(r"[^a-z0-9]", "", name.lower())
