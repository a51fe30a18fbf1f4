"""Monetary amount extraction from OCR text.

Scans text line by line and emits one token per monetary amount.
Three pattern families are tried in priority order, and a character
range claimed by a higher-priority family is never reused by a lower one:

1. parenthesized accounting negatives, e.g. ``($1,234.56)``
2. currency-prefixed amounts, e.g. ``€ 1.234,56`` or ``$-250.00``
3. plain decimals with exactly two fractional digits, e.g. ``1,234.56``
"""

import re
from dataclasses import dataclass

from src.utils.logger import get_logger

logger = get_logger(__name__)

CURRENCY_SYMBOLS: tuple[str, ...] = ("$", "€", "£", "¥", "₹")

_SYMBOL_CLASS = "[" + "".join(re.escape(s) for s in CURRENCY_SYMBOLS) + "]"

_PAREN_PATTERN = re.compile(r"\(" + _SYMBOL_CLASS + r"?\s*([\d,]+(?:\.\d{1,2})?)\)")

# Accepts both US (1,234.56) and European (1.234,56) grouping.
_CURRENCY_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (
        symbol,
        re.compile(re.escape(symbol) + r"\s*(-?)\s*(\d+(?:[.,]\d{3})*(?:[.,]\d{1,2})?)"),
    )
    for symbol in CURRENCY_SYMBOLS
]

_PLAIN_PATTERN = re.compile(
    r"(?<![0-9" + "".join(re.escape(s) for s in CURRENCY_SYMBOLS) + r"\-])"
    r"([\d,]+\.\d{2})(?![0-9])"
)

_MIN_PLAIN_AMOUNT = 0.01


@dataclass(frozen=True)
class ExtractedAmount:
    """A monetary value found in OCR text."""

    raw: str
    value: float
    is_negative: bool
    position: int
    line_number: int
    currency_symbol: str | None = None


def parse_amount_value(value: str) -> float | None:
    """Parse a localized number string into a float.

    Whichever of ``.`` and ``,`` occurs last is taken as the decimal
    separator; the other one is treated as grouping and removed.

    Args:
        value: Number text such as ``"1,234.56"`` or ``"1.234,56"``.

    Returns:
        Parsed value, or ``None`` if the text is not numeric.
    """
    if not value:
        return None

    cleaned = re.sub(r"\s", "", value)
    if cleaned.rfind(",") > cleaned.rfind("."):
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    else:
        cleaned = cleaned.replace(",", "")

    try:
        return float(cleaned)
    except ValueError:
        return None


def _currency_symbol_in(raw: str) -> str | None:
    for symbol in CURRENCY_SYMBOLS:
        if symbol in raw:
            return symbol
    return None


def _overlaps(start: int, end: int, claimed: list[tuple[int, int]]) -> bool:
    return any(start < c_end and end > c_start for c_start, c_end in claimed)


def _extract_from_line(
    line: str, line_number: int, line_start: int
) -> list[ExtractedAmount]:
    """Extract amounts from one line, honoring family priority."""
    amounts: list[ExtractedAmount] = []
    claimed: list[tuple[int, int]] = []

    for match in _PAREN_PATTERN.finditer(line):
        if _overlaps(match.start(), match.end(), claimed):
            continue
        claimed.append((match.start(), match.end()))
        parsed = parse_amount_value(match.group(1))
        if parsed is not None:
            amounts.append(
                ExtractedAmount(
                    raw=match.group(0),
                    value=-abs(parsed),
                    is_negative=True,
                    position=line_start + match.start(),
                    line_number=line_number,
                    currency_symbol=_currency_symbol_in(match.group(0)),
                )
            )

    for symbol, pattern in _CURRENCY_PATTERNS:
        for match in pattern.finditer(line):
            if _overlaps(match.start(), match.end(), claimed):
                continue
            claimed.append((match.start(), match.end()))
            is_negative = match.group(1) == "-"
            parsed = parse_amount_value(match.group(2))
            if parsed is not None:
                amounts.append(
                    ExtractedAmount(
                        raw=match.group(0),
                        value=-parsed if is_negative else parsed,
                        is_negative=is_negative,
                        position=line_start + match.start(),
                        line_number=line_number,
                        currency_symbol=symbol,
                    )
                )

    for match in _PLAIN_PATTERN.finditer(line):
        if _overlaps(match.start(), match.end(), claimed):
            continue
        claimed.append((match.start(), match.end()))
        parsed = parse_amount_value(match.group(1))
        if parsed is not None and parsed >= _MIN_PLAIN_AMOUNT:
            amounts.append(
                ExtractedAmount(
                    raw=match.group(0),
                    value=parsed,
                    is_negative=False,
                    position=line_start + match.start(),
                    line_number=line_number,
                )
            )

    return amounts


def extract_amounts(text: str) -> list[ExtractedAmount]:
    """Extract all monetary amounts from OCR text.

    Amounts are returned in discovery order (by line, then by pattern
    family), not strictly in document order; sort on ``position`` when
    document order matters.

    Args:
        text: Full OCR text.

    Returns:
        Extracted amounts, unique by position.
    """
    amounts: list[ExtractedAmount] = []
    seen_positions: set[int] = set()
    line_start = 0

    for line_number, line in enumerate(text.split("\n")):
        for amount in _extract_from_line(line, line_number, line_start):
            if amount.position not in seen_positions:
                seen_positions.add(amount.position)
                amounts.append(amount)
        line_start += len(line) + 1

    logger.debug("Extracted %d amounts", len(amounts))
    return amounts
