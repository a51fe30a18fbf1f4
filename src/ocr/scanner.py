"""Entry points that run the post-processing engine over OCR output.

Wraps ending-balance detection and subcategory inference for single
texts, provider :class:`~src.ocr.ocr_result.OcrResult` objects, and
multi-page documents, plus small display helpers.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.balance.keywords import contains_balance_keywords
from src.balance.selector import EndingBalanceResult, detect_ending_balance
from src.classification.subcategory import (
    SubcategoryInferenceResult,
    infer_subcategory_from_multiple_texts,
)
from src.extraction.amount_extractor import ExtractedAmount, extract_amounts
from src.extraction.date_extractor import ExtractedDate
from src.utils.config import BalanceDetectionConfig, SubcategoryInferenceConfig
from src.utils.logger import get_logger

from .ocr_result import OcrResult

logger = get_logger(__name__)

__all__ = [
    "DocumentAnalysis",
    "EnhancedOcrResult",
    "analyze_document",
    "contains_balance_keywords",
    "format_amount",
    "format_date",
    "has_extractable_content",
    "process_ocr_result",
    "process_ocr_text",
]


@dataclass
class EnhancedOcrResult:
    """Ending-balance result together with its input and processing metadata."""

    ending_balance: EndingBalanceResult
    raw_text: str
    processed_at: datetime
    config: BalanceDetectionConfig


@dataclass
class DocumentAnalysis:
    """Both engine outputs for a (possibly multi-page) document."""

    page_count: int
    combined_text: str
    ending_balance: EndingBalanceResult
    subcategory: SubcategoryInferenceResult
    warnings: list[str] = field(default_factory=list)


def process_ocr_text(
    text: str, config: BalanceDetectionConfig | None = None
) -> EnhancedOcrResult:
    """Detect the ending balance in raw OCR text.

    Args:
        text: Raw OCR text.
        config: Detection config. Defaults to :class:`BalanceDetectionConfig`.

    Returns:
        Detection result with the raw text, a UTC timestamp and the
        config that was applied.
    """
    config = config or BalanceDetectionConfig()
    return EnhancedOcrResult(
        ending_balance=detect_ending_balance(text, config),
        raw_text=text,
        processed_at=datetime.now(UTC),
        config=config,
    )


def process_ocr_result(
    ocr_result: OcrResult, config: BalanceDetectionConfig | None = None
) -> EnhancedOcrResult:
    """Detect the ending balance in a provider OCR result."""
    return process_ocr_text(ocr_result.text, config)


def analyze_document(
    pages: list[str],
    balance_config: BalanceDetectionConfig | None = None,
    inference_config: SubcategoryInferenceConfig | None = None,
) -> DocumentAnalysis:
    """Run both engine pipelines over the pages of one document.

    Pages are joined with newlines for balance detection, so line
    numbers and offsets continue across page boundaries. Subcategory
    inference uses the batch mode over the same pages.

    Args:
        pages: OCR text per page, in page order.
        balance_config: Ending-balance detection config.
        inference_config: Subcategory inference config.

    Returns:
        Combined analysis for the document.
    """
    combined_text = "\n".join(pages)
    ending_balance = detect_ending_balance(combined_text, balance_config)
    subcategory = infer_subcategory_from_multiple_texts(pages, inference_config)

    warnings: list[str] = []
    if ending_balance.ending_balance is None:
        warnings.append("No monetary amounts found")
    elif ending_balance.ending_date is None:
        warnings.append("Ending balance has no associated date")
    if subcategory.inferred_subcategory is None:
        warnings.append("No subcategory could be inferred")

    logger.info(
        "Analyzed %d pages: balance_confidence=%.2f subcategory=%s",
        len(pages),
        ending_balance.confidence,
        subcategory.inferred_subcategory,
    )
    return DocumentAnalysis(
        page_count=len(pages),
        combined_text=combined_text,
        ending_balance=ending_balance,
        subcategory=subcategory,
        warnings=warnings,
    )


def format_amount(amount: ExtractedAmount) -> str:
    """Format an amount for display, e.g. ``-$1,234.56``."""
    sign = "-" if amount.is_negative else ""
    symbol = amount.currency_symbol or ""
    return f"{sign}{symbol}{abs(amount.value):,.2f}"


def format_date(date: ExtractedDate) -> str:
    """Format an extracted date as ``YYYY-MM-DD``."""
    return date.date.isoformat()


def has_extractable_content(text: str) -> bool:
    """Check whether the text holds at least one monetary amount."""
    return bool(extract_amounts(text))
