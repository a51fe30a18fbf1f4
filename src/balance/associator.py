"""Proximity-based pairing of amounts with dates.

Each amount is paired with its nearest date. On the same line the
distance is the character offset delta; across lines it is the line
delta times :data:`LINE_DISTANCE_WEIGHT`, which keeps any in-range
same-line pairing ahead of any cross-line one.
"""

import bisect
from collections import defaultdict
from dataclasses import dataclass

from src.extraction.amount_extractor import ExtractedAmount
from src.extraction.date_extractor import ExtractedDate
from src.utils.config import BalanceDetectionConfig
from src.utils.logger import get_logger

from .keywords import BalanceKeywordIndex

logger = get_logger(__name__)

LINE_DISTANCE_WEIGHT = 100
KEYWORD_CONFIDENCE_BONUS = 0.3


@dataclass(frozen=True)
class AmountDateAssociation:
    """An amount paired with its nearest date."""

    amount: ExtractedAmount
    date: ExtractedDate
    distance: int
    confidence: float
    near_balance_keyword: bool
    balance_keyword: str | None = None


class _DateIndex:
    """Dates bucketed by line for nearest-date lookups.

    Cross-line candidates all share the same distance, so only the first
    date (in extraction order) on each line is kept for them. Same-line
    candidates are sorted by position and narrowed with a binary search.
    """

    def __init__(self, dates: list[ExtractedDate]) -> None:
        self.first_on_line: dict[int, tuple[int, ExtractedDate]] = {}
        by_line: dict[int, list[tuple[int, int, ExtractedDate]]] = defaultdict(list)
        for index, date in enumerate(dates):
            self.first_on_line.setdefault(date.line_number, (index, date))
            by_line[date.line_number].append((date.position, index, date))

        self.same_line: dict[int, list[tuple[int, int, ExtractedDate]]] = {}
        self.same_line_positions: dict[int, list[int]] = {}
        for line, entries in by_line.items():
            entries.sort(key=lambda e: (e[0], e[1]))
            self.same_line[line] = entries
            self.same_line_positions[line] = [e[0] for e in entries]

    def nearest(
        self, amount: ExtractedAmount, config: BalanceDetectionConfig
    ) -> tuple[int, ExtractedDate] | None:
        """Return ``(distance, date)`` for the nearest in-range date.

        Ties go to the date extracted first.
        """
        best: tuple[int, int, ExtractedDate] | None = None
        line = amount.line_number

        entries = self.same_line.get(line)
        if entries:
            positions = self.same_line_positions[line]
            low = bisect.bisect_left(
                positions, amount.position - config.max_char_distance
            )
            high = bisect.bisect_right(
                positions, amount.position + config.max_char_distance
            )
            for position, index, date in entries[low:high]:
                candidate = (abs(amount.position - position), index, date)
                if best is None or candidate[:2] < best[:2]:
                    best = candidate

        for line_diff in range(1, config.max_line_distance + 1):
            distance = line_diff * LINE_DISTANCE_WEIGHT
            for other in (line - line_diff, line + line_diff):
                found = self.first_on_line.get(other)
                if found is None:
                    continue
                candidate = (distance, found[0], found[1])
                if best is None or candidate[:2] < best[:2]:
                    best = candidate

        if best is None:
            return None
        return best[0], best[2]


def associate_amounts_with_dates(
    amounts: list[ExtractedAmount],
    dates: list[ExtractedDate],
    text: str,
    config: BalanceDetectionConfig | None = None,
    keyword_index: BalanceKeywordIndex | None = None,
) -> list[AmountDateAssociation]:
    """Pair every amount with its nearest in-range date.

    Args:
        amounts: Amounts extracted from ``text``.
        dates: Dates extracted from ``text``.
        text: Full OCR text, used for balance keyword lookups.
        config: Detection config. Defaults to :class:`BalanceDetectionConfig`.
        keyword_index: Prebuilt keyword index for ``text``, if the caller
            already has one.

    Returns:
        At most one association per amount. Amounts with no date in
        range are left out; a date may serve several amounts.
    """
    config = config or BalanceDetectionConfig()
    index = keyword_index or BalanceKeywordIndex(text, config)
    date_index = _DateIndex(dates)
    associations: list[AmountDateAssociation] = []

    for amount in amounts:
        nearest = date_index.nearest(amount, config)
        if nearest is None:
            continue
        distance, date = nearest

        keyword = index.find(amount.line_number)
        confidence = max(0.0, 1 - distance / (config.max_char_distance * 2))
        if keyword:
            confidence = min(1.0, confidence + KEYWORD_CONFIDENCE_BONUS)

        associations.append(
            AmountDateAssociation(
                amount=amount,
                date=date,
                distance=distance,
                confidence=confidence,
                near_balance_keyword=keyword is not None,
                balance_keyword=keyword,
            )
        )

    logger.debug(
        "Associated %d of %d amounts with dates", len(associations), len(amounts)
    )
    return associations
