"""Balance keyword proximity checks.

A balance keyword ("ending balance", "available balance", ...) near an
amount is strong evidence that the amount is a balance rather than a
transaction line. Matching is a case-insensitive substring search so
compound phrases such as "new balance due" still count.
"""

import bisect

from src.utils.config import BalanceDetectionConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


class BalanceKeywordIndex:
    """All balance keyword occurrences in a text, indexed for proximity lookups.

    Built once per text. Each lookup costs a binary search per configured
    keyword, so checking every amount in a document stays close to linear
    in the text length.

    Args:
        text: Full OCR text.
        config: Detection config supplying keywords and proximity windows.
    """

    def __init__(self, text: str, config: BalanceDetectionConfig) -> None:
        self.config = config
        self.line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self.line_starts.append(index + 1)
        self.text_length = len(text)

        lowered = text.lower()
        self.occurrences: list[tuple[str, list[int]]] = []
        for keyword in config.balance_keywords:
            needle = keyword.lower()
            if not needle:
                continue
            offsets: list[int] = []
            start = lowered.find(needle)
            while start != -1:
                offsets.append(start)
                start = lowered.find(needle, start + 1)
            if offsets:
                self.occurrences.append((keyword, offsets))

        logger.debug(
            "Indexed %d balance keywords present in text", len(self.occurrences)
        )

    def _line_end(self, line: int) -> int:
        if line + 1 < len(self.line_starts):
            return self.line_starts[line + 1] - 1
        return self.text_length

    def find(self, line_number: int) -> str | None:
        """Return the first configured keyword occurring near a line.

        The window spans ``max_line_distance`` lines either side of
        ``line_number``, widened by ``max_char_distance`` characters past
        the first line's start and the last line's end.

        Args:
            line_number: Line the token was found on.

        Returns:
            The keyword as configured, or ``None``.
        """
        max_lines = self.config.max_line_distance
        max_chars = self.config.max_char_distance
        first_line = max(0, line_number - max_lines)
        last_line = min(len(self.line_starts) - 1, line_number + max_lines)
        if first_line > last_line:
            return None

        low = self.line_starts[first_line] - max_chars
        high = self._line_end(last_line) + max_chars
        for keyword, offsets in self.occurrences:
            index = bisect.bisect_left(offsets, low)
            if index < len(offsets) and offsets[index] <= high:
                return keyword
        return None


def find_nearby_balance_keyword(
    text: str,
    position: int,
    line_number: int,
    config: BalanceDetectionConfig | None = None,
) -> str | None:
    """Find a balance keyword near a token.

    Args:
        text: Full OCR text.
        position: Absolute character offset of the token. The window is
            computed from ``line_number`` alone.
        line_number: Line number of ``position``.
        config: Detection config. Defaults to :class:`BalanceDetectionConfig`.

    Returns:
        The matched keyword, or ``None`` if none is in range.
    """
    index = BalanceKeywordIndex(text, config or BalanceDetectionConfig())
    return index.find(line_number)


def contains_balance_keywords(
    text: str, config: BalanceDetectionConfig | None = None
) -> bool:
    """Check whether any balance keyword appears anywhere in the text."""
    lowered = text.lower()
    keywords = (config or BalanceDetectionConfig()).balance_keywords
    return any(keyword.lower() in lowered for keyword in keywords if keyword)
