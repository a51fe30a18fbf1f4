"""Tests for balance keyword lookup, amount-date association and selection."""

import datetime
import time
from collections.abc import Callable

import pytest

from src.balance.associator import (
    KEYWORD_CONFIDENCE_BONUS,
    AmountDateAssociation,
    associate_amounts_with_dates,
)
from src.balance.keywords import (
    BalanceKeywordIndex,
    contains_balance_keywords,
    find_nearby_balance_keyword,
)
from src.balance.selector import detect_ending_balance, select_best_association
from src.extraction.amount_extractor import ExtractedAmount, extract_amounts
from src.extraction.date_extractor import DateFormat, ExtractedDate, extract_dates
from src.utils.config import BalanceDetectionConfig


def _best_time(func: Callable[[], object], runs: int = 3) -> float:
    best = float("inf")
    for _ in range(runs):
        start = time.perf_counter()
        func()
        best = min(best, time.perf_counter() - start)
    return best


def _associate(text: str) -> list[AmountDateAssociation]:
    return associate_amounts_with_dates(extract_amounts(text), extract_dates(text), text)


def _association(
    value: float,
    position: int = 0,
    currency_symbol: str | None = None,
    confidence: float = 0.8,
    keyword: str | None = None,
) -> AmountDateAssociation:
    amount = ExtractedAmount(
        raw=str(value),
        value=value,
        is_negative=value < 0,
        position=position,
        line_number=0,
        currency_symbol=currency_symbol,
    )
    date = ExtractedDate(
        raw="01/31/2024",
        date=datetime.date(2024, 1, 31),
        format=DateFormat.US_SLASH,
        position=position + 20,
        line_number=0,
    )
    return AmountDateAssociation(
        amount=amount,
        date=date,
        distance=20,
        confidence=confidence,
        near_balance_keyword=keyword is not None,
        balance_keyword=keyword,
    )


class TestBalanceKeywords:
    """Tests for balance keyword proximity checks."""

    def test_same_line(self) -> None:
        assert (
            find_nearby_balance_keyword("Ending Balance: $100.00", 16, 0)
            == "ending balance"
        )

    def test_out_of_range(self, filler: str) -> None:
        text = "Ending balance\n" + filler + "\n\n$5.00"
        position = text.index("$")
        line_number = text.count("\n", 0, position)
        assert find_nearby_balance_keyword(text, position, line_number) is None

    def test_within_line_window(self) -> None:
        text = "Closing balance\n" + "y" * 150 + "\n$5.00"
        position = text.index("$")
        assert find_nearby_balance_keyword(text, position, 2) == "closing balance"

    def test_within_char_window(self) -> None:
        text = "New balance\na\nb\nc\n$1.00"
        position = text.index("$")
        assert find_nearby_balance_keyword(text, position, 4) == "new balance"

    def test_char_window_extends_past_line_window(self) -> None:
        text = "$5.00\nx\n" + "y" * 150 + "\nEnding balance"
        assert find_nearby_balance_keyword(text, 0, 0) == "ending balance"

    def test_char_window_measured_from_line_window_edge(self) -> None:
        text = "$5.00\nx\ny\n" + "z" * 120 + "\nEnding balance"
        assert find_nearby_balance_keyword(text, 0, 0) is None

    def test_line_past_end_of_text(self) -> None:
        assert find_nearby_balance_keyword("Ending balance", 0, 5) is None

    def test_first_configured_keyword_wins(self) -> None:
        text = "Closing balance / Ending balance $10.00"
        assert find_nearby_balance_keyword(text, 33, 0) == "ending balance"

    def test_custom_keywords(self) -> None:
        config = BalanceDetectionConfig(balance_keywords=["saldo final"])
        assert find_nearby_balance_keyword("SALDO FINAL 10.00", 12, 0, config) == (
            "saldo final"
        )
        assert find_nearby_balance_keyword("Ending balance 10.00", 15, 0, config) is None

    def test_index_reused_for_many_lookups(self) -> None:
        index = BalanceKeywordIndex("Available balance $10.00", BalanceDetectionConfig())
        assert index.find(0) == "available balance"
        assert index.find(1) == "available balance"
        assert index.find(9) is None

    def test_contains_balance_keywords(self) -> None:
        assert contains_balance_keywords("AVAILABLE BALANCE") is True
        assert contains_balance_keywords("new balance due") is True
        assert contains_balance_keywords("Transactions") is False

    def test_contains_with_custom_keywords(self) -> None:
        config = BalanceDetectionConfig(balance_keywords=["saldo"])
        assert contains_balance_keywords("Saldo: 10,00", config) is True
        assert contains_balance_keywords("Ending balance", config) is False


class TestAssociator:
    """Tests for proximity pairing of amounts with dates."""

    def test_same_line(self) -> None:
        associations = _associate("01/31/2024 Balance $100.00")
        assert len(associations) == 1
        association = associations[0]
        assert association.distance == 19
        assert association.confidence == pytest.approx(1 - 19 / 200)
        assert association.near_balance_keyword is False
        assert association.balance_keyword is None

    def test_adjacent_line(self) -> None:
        associations = _associate("01/31/2024\n$100.00")
        assert len(associations) == 1
        assert associations[0].distance == 100
        assert associations[0].confidence == pytest.approx(0.5)

    def test_too_many_lines_apart(self) -> None:
        assert _associate("01/31/2024\n\n\n$100.00") == []

    def test_same_line_too_far(self) -> None:
        assert _associate("01/31/2024" + " " * 120 + "$5.00") == []

    def test_nearest_date_chosen(self) -> None:
        associations = _associate("01/01/2024\n01/31/2024 $50.00")
        assert len(associations) == 1
        assert associations[0].date.date == datetime.date(2024, 1, 31)
        assert associations[0].distance == 11

    def test_keyword_bonus_capped(self) -> None:
        associations = _associate("Ending balance 01/31/2024 $50.00")
        assert len(associations) == 1
        assert associations[0].near_balance_keyword is True
        assert associations[0].balance_keyword == "ending balance"
        assert associations[0].confidence == pytest.approx(1.0)

    def test_keyword_bonus_added(self) -> None:
        associations = _associate("Ending balance\n01/31/2024\n$50.00")
        assert associations[0].confidence == pytest.approx(
            0.5 + KEYWORD_CONFIDENCE_BONUS
        )

    def test_equal_distance_prefers_first_extracted_date(self) -> None:
        associations = _associate("01/15/2024\n$5.00\n01/31/2024")
        assert len(associations) == 1
        assert associations[0].date.date == datetime.date(2024, 1, 15)
        assert associations[0].distance == 100

    def test_same_line_beats_adjacent_line(self) -> None:
        text = "01/01/2024\n$5.00" + " " * 80 + "01/31/2024"
        associations = _associate(text)
        assert associations[0].date.date == datetime.date(2024, 1, 31)
        assert associations[0].distance == 85

    def test_date_shared_by_amounts(self) -> None:
        associations = _associate("01/31/2024 $10.00 $20.00")
        assert len(associations) == 2
        assert {a.date.position for a in associations} == {0}

    def test_no_dates(self) -> None:
        assert _associate("$10.00") == []

    def test_custom_line_window(self) -> None:
        text = "01/31/2024\n\n\n$100.00"
        config = BalanceDetectionConfig(max_line_distance=3)
        associations = associate_amounts_with_dates(
            extract_amounts(text), extract_dates(text), text, config
        )
        assert len(associations) == 1
        assert associations[0].distance == 300
        assert associations[0].confidence == 0.0


class TestSelectBestAssociation:
    """Tests for the tie-break scoring."""

    def test_prefers_non_negative_with_symbol(self) -> None:
        negative = _association(-500.0)
        positive = _association(100.0, position=40, currency_symbol="$")
        best = select_best_association([negative, positive], BalanceDetectionConfig())
        assert best is positive

    def test_prefers_larger_magnitude(self) -> None:
        small = _association(10.0)
        large = _association(10000.0, position=40)
        assert select_best_association([small, large], BalanceDetectionConfig()) is large

    def test_keyword_outweighs_magnitude(self) -> None:
        large = _association(10000.0)
        keyword = _association(10.0, position=40, keyword="ending balance")
        best = select_best_association([large, keyword], BalanceDetectionConfig())
        assert best is keyword

    def test_currency_preference_can_be_disabled(self) -> None:
        plain = _association(100.0)
        symbol = _association(100.0, position=40, currency_symbol="$")
        config = BalanceDetectionConfig(prefer_currency_symbol=False)
        assert select_best_association([plain, symbol], config) is plain

    def test_tie_keeps_first(self) -> None:
        first = _association(100.0)
        second = _association(100.0, position=40)
        best = select_best_association([first, second], BalanceDetectionConfig())
        assert best is first


class TestDetectEndingBalance:
    """Tests for the ending-balance selection cascade."""

    def test_no_amounts(self) -> None:
        result = detect_ending_balance("Statement date 01/31/2024, no figures")
        assert result.ending_balance is None
        assert result.ending_date is None
        assert result.confidence == 0.0
        assert result.selection_reason == "No monetary amounts found in document"
        assert len(result.all_dates) == 1

    def test_empty_text(self) -> None:
        result = detect_ending_balance("")
        assert result.ending_balance is None
        assert result.all_amounts == []

    def test_keyword_without_dates(self, filler: str) -> None:
        text = "Deposit $20.00\n" + filler + "\nEnding Balance $1,500.00\nFee $-3.00"
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(-3.0)
        assert result.ending_date is None
        assert result.confidence == 0.5
        assert result.selection_reason == (
            "Selected last amount near balance keyword (no dates found)"
        )

    def test_keyword_without_dates_skips_distant_amounts(self, filler: str) -> None:
        text = "Ending Balance $1,500.00\n" + filler + "\nDeposit $20.00"
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(1500.0)
        assert result.confidence == 0.5

    def test_no_dates_no_keywords(self) -> None:
        result = detect_ending_balance("Item $5.00\nItem $7.50")
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(7.5)
        assert result.confidence == 0.3
        assert result.selection_reason == (
            "Selected last amount in document (no dates or keywords found)"
        )
        assert result.associations == []

    def test_no_associations(self) -> None:
        result = detect_ending_balance("Statement date 01/31/2024\n\n\n\n$250.00")
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(250.0)
        assert result.ending_date is not None
        assert result.ending_date.date == datetime.date(2024, 1, 31)
        assert result.confidence == 0.4
        assert result.selection_reason == (
            "No direct associations found - selected last amount and latest date"
        )

    def test_keyword_with_latest_date(self, statement_text: str) -> None:
        result = detect_ending_balance(statement_text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(1500.0)
        assert result.ending_date is not None
        assert result.ending_date.date == datetime.date(2024, 1, 31)
        assert result.confidence == 0.95
        assert result.selection_reason == (
            'Selected amount near "ending balance" keyword with latest date'
        )
        assert len(result.all_amounts) == 3
        assert result.associations

    def test_larger_amount_wins_when_both_near_keyword(self) -> None:
        text = (
            "01/31/2024 Payment received $2,500.00\n"
            "01/31/2024 Closing Balance $1,200.00"
        )
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.confidence == 0.95
        assert result.ending_balance.value == pytest.approx(2500.0)

    def test_keyword_not_latest_date(self, filler: str) -> None:
        text = (
            "Closing Balance 12/31/2023 $900.00\n"
            + filler
            + "\nPayment 01/15/2024 $50.00"
        )
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(900.0)
        assert result.ending_date is not None
        assert result.ending_date.date == datetime.date(2023, 12, 31)
        assert result.confidence == 0.75
        assert result.selection_reason == (
            'Selected amount near "closing balance" keyword (not latest date)'
        )

    def test_latest_date_without_keyword(self, filler: str) -> None:
        text = (
            "01/15/2024 Payment $50.00\n" + filler + "\n01/31/2024 Deposit $75.00"
        )
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(75.0)
        assert result.confidence == 0.7
        assert result.selection_reason == "Selected amount associated with latest date"

    def test_best_scoring_association(self, filler: str) -> None:
        text = "01/15/2024 Payment $50.00\n" + filler + "\nPrinted 02/01/2024"
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(50.0)
        assert result.ending_date is not None
        assert result.ending_date.date == datetime.date(2024, 1, 15)
        assert result.confidence == pytest.approx(1 - 19 / 200)
        assert result.selection_reason == "Selected best scoring amount-date association"

    def test_opening_and_ending_balance_statement(self) -> None:
        text = (
            "01/01/2024 Opening Balance $1,000.00\n"
            "01/15/2024 Transaction $500.00\n"
            "01/31/2024 Ending Balance: $1,500.00"
        )
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(1500.0)
        assert result.confidence >= 0.9
        assert result.ending_date is not None
        assert result.ending_date.date == datetime.date(2024, 1, 31)

    def test_closing_balance_on_shared_date(self) -> None:
        text = (
            "01/31/2024 Transaction Amount: $500.00\n"
            "01/31/2024 Closing Balance: $2,500.00"
        )
        result = detect_ending_balance(text)
        assert result.ending_balance is not None
        assert result.ending_balance.value == pytest.approx(2500.0)

    def test_month_without_day_is_not_a_balance(self) -> None:
        result = detect_ending_balance("Statement for January 2024")
        assert result.ending_balance is None
        assert result.all_dates == []
        assert result.confidence == 0.0
        assert result.selection_reason == "No monetary amounts found in document"

    @pytest.mark.parametrize(
        "line",
        ["01/31/2024 Ending balance $1.00", "Ending balance $1.00"],
    )
    def test_runtime_grows_linearly(self, line: str) -> None:
        small = "\n".join([line] * 1000)
        large = "\n".join([line] * 8000)
        small_time = _best_time(lambda: detect_ending_balance(small))
        large_time = _best_time(lambda: detect_ending_balance(large))
        # 8x the lines; a quadratic pass would take about 64x as long.
        assert large_time < small_time * 24

    def test_confidence_in_unit_interval(self, statement_text: str) -> None:
        for text in (statement_text, "", "$1.00", "01/01/2024 $1.00"):
            result = detect_ending_balance(text)
            assert 0.0 <= result.confidence <= 1.0

    def test_custom_keywords(self) -> None:
        text = "01/31/2024 Total $10.00\n01/31/2024 Saldo $20.00"
        config = BalanceDetectionConfig(balance_keywords=["saldo"])
        result = detect_ending_balance(text, config)
        assert result.confidence == 0.95
        assert result.selection_reason == (
            'Selected amount near "saldo" keyword with latest date'
        )
