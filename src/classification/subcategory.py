"""Subcategory inference from OCR text.

Scores every configured :class:`~src.utils.config.SubcategoryMapping`
against the text and ranks the results. A mapping's score grows with
the number of keyword/pattern hits (logarithmically) and with the length
of its longest hit, is capped, then scaled by the mapping's weight.
The top candidate is auto-populated only when its confidence clears the
configured threshold.
"""

import math
from dataclasses import dataclass, field
from functools import lru_cache

import regex

from src.utils.config import (
    DEFAULT_PATTERN_TIMEOUT_SECONDS,
    SubcategoryInferenceConfig,
    SubcategoryMapping,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)

MATCH_COUNT_WEIGHT = 0.3
SPECIFICITY_WEIGHT = 0.4
MAX_SPECIFICITY_LENGTH = 20
MAX_BASE_SCORE = 0.7


@dataclass
class SubcategoryCandidate:
    """A ranked subcategory suggestion."""

    subcategory: str
    score: float
    matched_text: str


@dataclass
class SubcategoryInferenceResult:
    """Result of subcategory inference."""

    confidence: float
    auto_populate: bool
    inferred_subcategory: str | None = None
    candidates: list[SubcategoryCandidate] = field(default_factory=list)


@dataclass
class _MappingScore:
    subcategory: str
    total_score: float
    match_count: int
    longest_match: str


@lru_cache(maxsize=1024)
def _compile_keyword(keyword: str) -> regex.Pattern:
    return regex.compile(rf"\b{regex.escape(keyword.lower())}\b", regex.IGNORECASE)


@lru_cache(maxsize=1024)
def _compile_pattern(pattern: str) -> regex.Pattern | None:
    """Compile a mapping pattern, or ``None`` if it is not a valid regex."""
    try:
        return regex.compile(pattern, regex.IGNORECASE)
    except regex.error as exc:
        logger.warning("Invalid regex pattern %r skipped: %s", pattern, exc)
        return None


def find_keyword_matches(text: str, mapping: SubcategoryMapping) -> list[str]:
    """Find whole-word, case-insensitive keyword hits for a mapping."""
    normalized = text.lower()
    matches: list[str] = []
    for keyword in mapping.keywords:
        if not keyword:
            continue
        matches.extend(_compile_keyword(keyword).findall(normalized))
    return matches


def find_pattern_matches(
    text: str,
    mapping: SubcategoryMapping,
    timeout: float = DEFAULT_PATTERN_TIMEOUT_SECONDS,
) -> list[str]:
    """Find case-insensitive regex hits for a mapping.

    Invalid patterns, and patterns that run past ``timeout`` seconds
    (e.g. catastrophic backtracking in a user-supplied expression), are
    skipped with a warning and contribute no matches.
    """
    matches: list[str] = []
    for pattern in mapping.patterns:
        compiled = _compile_pattern(pattern)
        if compiled is None:
            continue
        try:
            found = [
                m.group(0)
                for m in compiled.finditer(text, timeout=timeout)
                if m.group(0)
            ]
        except TimeoutError:
            logger.warning(
                "Regex pattern %r for '%s' timed out after %.2fs, skipped",
                pattern,
                mapping.subcategory,
                timeout,
            )
            continue
        matches.extend(found)
    return matches


def round_score(value: float) -> float:
    """Round a score to two decimals, halves rounding up."""
    return math.floor(value * 100 + 0.5) / 100


def _score(matches: list[str], mapping: SubcategoryMapping) -> _MappingScore:
    longest = max(matches, key=len)
    match_count_score = math.log2(len(matches) + 1) * MATCH_COUNT_WEIGHT
    specificity_score = (len(longest) / MAX_SPECIFICITY_LENGTH) * SPECIFICITY_WEIGHT
    base_score = min(match_count_score + specificity_score, MAX_BASE_SCORE)
    return _MappingScore(
        subcategory=mapping.subcategory,
        total_score=min(base_score * mapping.weight, 1.0),
        match_count=len(matches),
        longest_match=longest,
    )


def infer_subcategory(
    text: str, config: SubcategoryInferenceConfig | None = None
) -> SubcategoryInferenceResult:
    """Infer the most likely subcategory of a document from its text.

    Args:
        text: OCR text of the document.
        config: Inference config with mappings and the auto-populate gate.
            Defaults to :class:`SubcategoryInferenceConfig`.

    Returns:
        Top subcategory (if any matched), its confidence, ranked
        candidates, and whether the caller should auto-populate.
    """
    config = config or SubcategoryInferenceConfig()

    if not text or not text.strip():
        return SubcategoryInferenceResult(confidence=0.0, auto_populate=False)

    scores: list[_MappingScore] = []
    for mapping in config.mappings:
        matches = find_keyword_matches(text, mapping) + find_pattern_matches(
            text, mapping, config.pattern_timeout_seconds
        )
        if matches:
            scores.append(_score(matches, mapping))

    scores.sort(key=lambda s: s.total_score, reverse=True)

    candidates = [
        SubcategoryCandidate(
            subcategory=s.subcategory,
            score=round_score(s.total_score),
            matched_text=s.longest_match,
        )
        for s in scores[: config.max_candidates]
    ]

    if not scores or scores[0].total_score == 0:
        logger.debug("No subcategory matched")
        return SubcategoryInferenceResult(
            confidence=0.0, auto_populate=False, candidates=candidates
        )

    top = scores[0]
    confidence = round_score(top.total_score)
    auto_populate = (
        config.auto_populate and confidence >= config.min_confidence_for_auto_populate
    )
    logger.info(
        "Inferred subcategory '%s' (confidence=%.2f, matches=%d, auto_populate=%s)",
        top.subcategory,
        confidence,
        top.match_count,
        auto_populate,
    )
    return SubcategoryInferenceResult(
        confidence=confidence,
        auto_populate=auto_populate,
        inferred_subcategory=top.subcategory,
        candidates=candidates,
    )


def infer_subcategory_from_multiple_texts(
    texts: list[str], config: SubcategoryInferenceConfig | None = None
) -> SubcategoryInferenceResult:
    """Infer a subcategory from several text segments, e.g. document pages.

    Segments are joined with newlines and scored as one text.
    """
    return infer_subcategory("\n".join(texts), config)
