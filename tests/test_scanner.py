"""Tests for the OCR result processing entry points."""

import datetime

import pytest

from src.extraction.amount_extractor import ExtractedAmount
from src.extraction.date_extractor import DateFormat, ExtractedDate
from src.ocr.ocr_result import BoundingBox, OcrBlock, OcrResult
from src.ocr.scanner import (
    analyze_document,
    contains_balance_keywords,
    format_amount,
    format_date,
    has_extractable_content,
    process_ocr_result,
    process_ocr_text,
)
from src.utils.config import BalanceDetectionConfig, SubcategoryInferenceConfig


class TestProcessOcrText:
    """Tests for single-text processing."""

    def test_returns_enhanced_result(self, statement_text: str) -> None:
        result = process_ocr_text(statement_text)
        assert result.raw_text == statement_text
        assert result.ending_balance.ending_balance is not None
        assert result.ending_balance.ending_balance.value == pytest.approx(1500.0)
        assert result.processed_at.tzinfo is not None
        assert isinstance(result.config, BalanceDetectionConfig)

    def test_uses_given_config(self) -> None:
        config = BalanceDetectionConfig(balance_keywords=["saldo"])
        result = process_ocr_text("Saldo $10.00", config)
        assert result.config is config
        assert result.ending_balance.confidence == 0.5

    def test_from_provider_result(self, statement_text: str) -> None:
        ocr_result = OcrResult(
            text=statement_text,
            blocks=[
                OcrBlock(
                    text="Ending Balance",
                    bbox=BoundingBox(10, 200, 120, 14),
                    confidence=0.97,
                    line_number=6,
                )
            ],
            confidence=0.93,
        )
        result = process_ocr_result(ocr_result)
        assert result.raw_text == statement_text
        assert result.ending_balance.confidence == 0.95


class TestAnalyzeDocument:
    """Tests for multi-page analysis."""

    def test_two_pages(self, statement_text: str) -> None:
        analysis = analyze_document(["ATM WITHDRAWAL receipt", statement_text])
        assert analysis.page_count == 2
        assert analysis.combined_text.startswith("ATM WITHDRAWAL receipt\n")
        assert analysis.ending_balance.ending_balance is not None
        assert analysis.ending_balance.ending_balance.value == pytest.approx(1500.0)
        assert analysis.subcategory.inferred_subcategory is not None
        assert analysis.warnings == []

    def test_line_numbers_continue_across_pages(self) -> None:
        analysis = analyze_document(["page one", "Total $5.00"])
        amount = analysis.ending_balance.ending_balance
        assert amount is not None
        assert amount.line_number == 1
        assert amount.position == len("page one\n") + len("Total ")

    def test_warnings_for_empty_document(self) -> None:
        analysis = analyze_document(["Lorem ipsum"])
        assert "No monetary amounts found" in analysis.warnings
        assert "No subcategory could be inferred" in analysis.warnings

    def test_warning_for_undated_balance(self) -> None:
        analysis = analyze_document(["Ending Balance $10.00"])
        assert "Ending balance has no associated date" in analysis.warnings

    def test_configs_passed_through(self) -> None:
        analysis = analyze_document(
            ["ATM WITHDRAWAL $40.00"],
            inference_config=SubcategoryInferenceConfig(auto_populate=False),
        )
        assert analysis.subcategory.inferred_subcategory == "cash_withdrawal"
        assert analysis.subcategory.auto_populate is False


class TestFormatting:
    """Tests for display helpers."""

    def test_format_negative_amount(self) -> None:
        amount = ExtractedAmount(
            raw="($1,234.56)",
            value=-1234.56,
            is_negative=True,
            position=0,
            line_number=0,
            currency_symbol="$",
        )
        assert format_amount(amount) == "-$1,234.56"

    def test_format_plain_amount(self) -> None:
        amount = ExtractedAmount(
            raw="45.20", value=45.2, is_negative=False, position=0, line_number=0
        )
        assert format_amount(amount) == "45.20"

    def test_format_date(self) -> None:
        date = ExtractedDate(
            raw="January 31, 2024",
            date=datetime.date(2024, 1, 31),
            format=DateFormat.MONTH_DAY_YEAR,
            position=0,
            line_number=0,
        )
        assert format_date(date) == "2024-01-31"

    def test_has_extractable_content(self) -> None:
        assert has_extractable_content("Total 5.00") is True
        assert has_extractable_content("no figures") is False

    def test_contains_balance_keywords_reexported(self) -> None:
        assert contains_balance_keywords("Closing Balance") is True
