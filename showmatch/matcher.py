"""
Composite fuzzy matcher for show names.

Responsibilities:
- Score one target label against each candidate label.
- Pick the single best candidate and explain its score.

Non-Responsibilities:
- No I/O, no persistence, no logging.
- No confidence policy beyond the acceptance floor (see classify_match).

Invariant:
Given identical inputs and config, find_best_match always returns
the same result. Ties keep the earliest candidate.
"""

from dataclasses import asdict, dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple

from .normalize import STOP_WORDS, extract_keywords, normalize_label, strip_extension
from .similarity import edit_similarity, keyword_score

# Caller-side confidence policy
HIGH_CONFIDENCE = 60.0
LOW_CONFIDENCE = 40.0


@dataclass(frozen=True)
class MatchConfig:
    stop_words: FrozenSet[str] = field(default_factory=lambda: STOP_WORDS)
    min_keyword_length: int = 3
    keyword_similarity_cutoff: float = 80.0
    exact_word_bonus: float = 20.0
    partial_bonus: float = 30.0
    direct_weight: float = 0.4
    keyword_weight: float = 0.4
    exact_word_weight: float = 0.1
    partial_weight: float = 0.1
    acceptance_floor: float = 40.0
    strip_extensions: bool = True


DEFAULT_CONFIG = MatchConfig()


@dataclass(frozen=True)
class MatchBreakdown:
    direct_similarity: float = 0.0
    keyword_score: float = 0.0
    exact_word_bonus: float = 0.0
    partial_bonus: float = 0.0


@dataclass(frozen=True)
class MatchResult:
    matched_label: Optional[str] = None
    score: float = 0.0
    breakdown: MatchBreakdown = field(default_factory=MatchBreakdown)
    candidate: Optional[str] = None  # as passed in, extension included

    @property
    def matched(self) -> bool:
        return self.matched_label is not None

    def to_dict(self) -> dict:
        return asdict(self)


NO_MATCH = MatchResult()


def _prepare(label: str, config: MatchConfig) -> Tuple[str, list]:
    return (
        normalize_label(label, config.stop_words),
        extract_keywords(label, config.min_keyword_length, config.stop_words),
    )


def _score_prepared(
    target_norm: str,
    target_words: list,
    cand_norm: str,
    cand_words: list,
    config: MatchConfig,
) -> Tuple[float, MatchBreakdown]:
    direct = edit_similarity(target_norm, cand_norm)
    keywords = keyword_score(target_words, cand_words, config.keyword_similarity_cutoff)

    exact = 0.0
    for word in target_words:
        if word in cand_words:
            exact += config.exact_word_bonus

    partial = 0.0
    if target_norm in cand_norm or cand_norm in target_norm:
        partial = config.partial_bonus

    score = (
        direct * config.direct_weight
        + keywords * config.keyword_weight
        + exact * config.exact_word_weight
        + partial * config.partial_weight
    )
    breakdown = MatchBreakdown(
        direct_similarity=round(direct, 1),
        keyword_score=round(keywords, 1),
        exact_word_bonus=round(exact, 1),
        partial_bonus=round(partial, 1),
    )
    return score, breakdown


def score_candidate(
    target: str,
    candidate: str,
    config: MatchConfig = DEFAULT_CONFIG,
) -> Tuple[float, MatchBreakdown]:
    """Unrounded composite score of one candidate plus its rounded breakdown.

    No acceptance floor is applied here.
    """
    if config.strip_extensions:
        candidate = strip_extension(candidate)
    target_norm, target_words = _prepare(target or "", config)
    cand_norm, cand_words = _prepare(candidate or "", config)
    return _score_prepared(target_norm, target_words, cand_norm, cand_words, config)


def find_best_match(
    target: str,
    candidates: Optional[Iterable[str]],
    config: MatchConfig = DEFAULT_CONFIG,
) -> MatchResult:
    """Best candidate for ``target``, or NO_MATCH.

    Only a composite score strictly above ``config.acceptance_floor`` is
    accepted. A later candidate wins only on a strict improvement.
    """
    if not target or not candidates:
        return NO_MATCH

    target_norm, target_words = _prepare(target, config)
    if not target_norm:
        return NO_MATCH

    best = NO_MATCH
    best_score = 0.0
    for candidate in candidates:
        if not candidate:
            continue
        label = strip_extension(candidate) if config.strip_extensions else candidate
        cand_norm, cand_words = _prepare(label, config)
        if not cand_norm:
            continue

        score, breakdown = _score_prepared(target_norm, target_words, cand_norm, cand_words, config)
        if score > best_score and score > config.acceptance_floor:
            best_score = score
            best = MatchResult(
                matched_label=label,
                score=round(score, 1),
                breakdown=breakdown,
                candidate=candidate,
            )
    return best


def classify_match(
    result: MatchResult,
    high: float = HIGH_CONFIDENCE,
    low: float = LOW_CONFIDENCE,
) -> str:
    """Bucket a result as "high", "low" or "none" confidence."""
    if not result.matched:
        return "none"
    if result.score >= high:
        return "high"
    if result.score >= low:
        return "low"
    return "none"
