"""Ending-balance selection for financial statement OCR text.

Extracts amounts and dates, pairs them by proximity, and walks a fixed
priority cascade to pick a single ending balance:

1. amount near a balance keyword on the latest date
2. amount near a balance keyword on any date
3. amount on the latest date
4. best-scoring association overall

Documents without dates, or without any in-range pairing, fall back to
position-based heuristics. Every path returns a result with a
confidence and a human-readable reason; nothing here raises on text
input.
"""

import math
from dataclasses import dataclass, field

from src.extraction.amount_extractor import ExtractedAmount, extract_amounts
from src.extraction.date_extractor import ExtractedDate, extract_dates
from src.utils.config import BalanceDetectionConfig
from src.utils.logger import get_logger

from .associator import AmountDateAssociation, associate_amounts_with_dates
from .keywords import BalanceKeywordIndex

logger = get_logger(__name__)

NON_NEGATIVE_BONUS = 0.1
CURRENCY_SYMBOL_BONUS = 0.15
# log10(|value| + 1) / 6 maps amounts up to a million onto roughly [0, 1].
MAGNITUDE_LOG_SCALE = 6


@dataclass
class EndingBalanceResult:
    """Outcome of ending-balance detection, with the evidence behind it."""

    ending_balance: ExtractedAmount | None
    ending_date: ExtractedDate | None
    confidence: float
    selection_reason: str
    all_amounts: list[ExtractedAmount] = field(default_factory=list)
    all_dates: list[ExtractedDate] = field(default_factory=list)
    associations: list[AmountDateAssociation] = field(default_factory=list)


def _tie_break_score(
    association: AmountDateAssociation, config: BalanceDetectionConfig
) -> float:
    score = association.confidence
    if not association.amount.is_negative:
        score += NON_NEGATIVE_BONUS
    magnitude = math.log10(abs(association.amount.value) + 1) / MAGNITUDE_LOG_SCALE
    score += magnitude * config.amount_magnitude_weight
    if config.prefer_currency_symbol and association.amount.currency_symbol:
        score += CURRENCY_SYMBOL_BONUS
    if association.near_balance_keyword:
        score += config.balance_keyword_weight
    return score


def select_best_association(
    candidates: list[AmountDateAssociation], config: BalanceDetectionConfig
) -> AmountDateAssociation:
    """Pick the association most likely to be a balance.

    Favors non-negative amounts, larger magnitudes (log-damped), amounts
    with a currency symbol, and amounts near a balance keyword. Ties keep
    the earlier candidate.

    Args:
        candidates: Non-empty list of associations to choose from.
        config: Detection config supplying the scoring weights.

    Returns:
        The highest-scoring association.
    """
    return max(candidates, key=lambda a: _tie_break_score(a, config))


def _last_by_position(amounts: list[ExtractedAmount]) -> ExtractedAmount:
    return max(amounts, key=lambda a: a.position)


def detect_ending_balance(
    text: str, config: BalanceDetectionConfig | None = None
) -> EndingBalanceResult:
    """Detect the ending balance and its date in OCR text.

    Args:
        text: Full OCR text of a statement or similar document.
        config: Detection config. Defaults to :class:`BalanceDetectionConfig`.

    Returns:
        The selected amount and date, all extracted evidence, a
        confidence in ``[0, 1]`` and the reason for the selection.
    """
    config = config or BalanceDetectionConfig()
    all_amounts = extract_amounts(text)
    all_dates = extract_dates(text)

    if not all_amounts:
        logger.info("No monetary amounts found")
        return EndingBalanceResult(
            ending_balance=None,
            ending_date=None,
            confidence=0.0,
            selection_reason="No monetary amounts found in document",
            all_dates=all_dates,
        )

    keyword_index = BalanceKeywordIndex(text, config)

    if not all_dates:
        near_keyword = [
            a
            for a in all_amounts
            if keyword_index.find(a.line_number) is not None
        ]
        if near_keyword:
            return _finish(
                _last_by_position(near_keyword),
                None,
                0.5,
                "Selected last amount near balance keyword (no dates found)",
                all_amounts,
                all_dates,
            )
        return _finish(
            _last_by_position(all_amounts),
            None,
            0.3,
            "Selected last amount in document (no dates or keywords found)",
            all_amounts,
            all_dates,
        )

    associations = associate_amounts_with_dates(
        all_amounts, all_dates, text, config, keyword_index
    )
    latest = max(d.date for d in all_dates)

    if not associations:
        latest_date = next(d for d in all_dates if d.date == latest)
        return _finish(
            _last_by_position(all_amounts),
            latest_date,
            0.4,
            "No direct associations found - selected last amount and latest date",
            all_amounts,
            all_dates,
        )

    keyword_associations = [a for a in associations if a.near_balance_keyword]
    if keyword_associations:
        on_latest = [a for a in keyword_associations if a.date.date == latest]
        if on_latest:
            best = select_best_association(on_latest, config)
            reason = (
                f'Selected amount near "{best.balance_keyword}" keyword '
                "with latest date"
            )
            confidence = 0.95
        else:
            best = select_best_association(keyword_associations, config)
            reason = (
                f'Selected amount near "{best.balance_keyword}" keyword '
                "(not latest date)"
            )
            confidence = 0.75
        return _finish(
            best.amount,
            best.date,
            confidence,
            reason,
            all_amounts,
            all_dates,
            associations,
        )

    latest_associations = [a for a in associations if a.date.date == latest]
    if latest_associations:
        best = select_best_association(latest_associations, config)
        return _finish(
            best.amount,
            best.date,
            0.7,
            "Selected amount associated with latest date",
            all_amounts,
            all_dates,
            associations,
        )

    best = sorted(
        associations, key=lambda a: (a.date.date, a.confidence), reverse=True
    )[0]
    return _finish(
        best.amount,
        best.date,
        best.confidence,
        "Selected best scoring amount-date association",
        all_amounts,
        all_dates,
        associations,
    )


def _finish(
    amount: ExtractedAmount,
    date: ExtractedDate | None,
    confidence: float,
    reason: str,
    all_amounts: list[ExtractedAmount],
    all_dates: list[ExtractedDate],
    associations: list[AmountDateAssociation] | None = None,
) -> EndingBalanceResult:
    logger.info(
        "Ending balance %.2f selected (confidence=%.2f): %s",
        amount.value,
        confidence,
        reason,
    )
    return EndingBalanceResult(
        ending_balance=amount,
        ending_date=date,
        confidence=confidence,
        selection_reason=reason,
        all_amounts=all_amounts,
        all_dates=all_dates,
        associations=associations or [],
    )
