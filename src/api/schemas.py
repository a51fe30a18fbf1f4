"""Pydantic request/response schemas for the FastAPI endpoints."""

import datetime

from pydantic import BaseModel, Field, model_validator

from src.balance.selector import EndingBalanceResult
from src.classification.subcategory import SubcategoryInferenceResult
from src.extraction.amount_extractor import ExtractedAmount
from src.extraction.date_extractor import ExtractedDate
from src.ocr.scanner import format_amount
from src.utils.config import SubcategoryMapping


class BalanceConfigOverride(BaseModel):
    """Partial ending-balance detection config; unset fields keep app defaults."""

    balance_keywords: list[str] | None = None
    max_line_distance: int | None = None
    max_char_distance: int | None = None
    balance_keyword_weight: float | None = None
    date_recency_weight: float | None = None
    amount_magnitude_weight: float | None = None
    prefer_currency_symbol: bool | None = None


class SubcategoryConfigOverride(BaseModel):
    """Partial subcategory inference config; unset fields keep app defaults."""

    auto_populate: bool | None = None
    min_confidence_for_auto_populate: float | None = None
    max_candidates: int | None = None
    pattern_timeout_seconds: float | None = None
    mappings: list[SubcategoryMapping] | None = None


class EndingBalanceRequest(BaseModel):
    """Request body for ending-balance detection."""

    text: str
    config: BalanceConfigOverride | None = None


class SubcategoryRequest(BaseModel):
    """Request body for subcategory inference over one text or several segments."""

    text: str | None = None
    texts: list[str] | None = None
    config: SubcategoryConfigOverride | None = None

    @model_validator(mode="after")
    def _require_text(self) -> "SubcategoryRequest":
        if self.text is None and self.texts is None:
            raise ValueError("either 'text' or 'texts' is required")
        return self


class AnalyzeRequest(BaseModel):
    """Request body for full document analysis."""

    pages: list[str] = Field(min_length=1)
    balance_config: BalanceConfigOverride | None = None
    subcategory_config: SubcategoryConfigOverride | None = None


class AmountResponse(BaseModel):
    """Response schema for an extracted amount."""

    raw: str
    value: float
    currency_symbol: str | None = None
    is_negative: bool
    position: int
    line_number: int
    formatted: str

    @classmethod
    def from_result(cls, amount: ExtractedAmount) -> "AmountResponse":
        return cls(
            raw=amount.raw,
            value=amount.value,
            currency_symbol=amount.currency_symbol,
            is_negative=amount.is_negative,
            position=amount.position,
            line_number=amount.line_number,
            formatted=format_amount(amount),
        )


class DateResponse(BaseModel):
    """Response schema for an extracted date."""

    raw: str
    date: datetime.date
    format: str
    position: int
    line_number: int

    @classmethod
    def from_result(cls, date: ExtractedDate) -> "DateResponse":
        return cls(
            raw=date.raw,
            date=date.date,
            format=str(date.format),
            position=date.position,
            line_number=date.line_number,
        )


class AssociationResponse(BaseModel):
    """Response schema for an amount-date association, keyed by token positions."""

    amount_position: int
    date_position: int
    distance: int
    confidence: float
    near_balance_keyword: bool
    balance_keyword: str | None = None


class EndingBalanceResponse(BaseModel):
    """Response schema for ending-balance detection."""

    ending_balance: AmountResponse | None = None
    ending_date: DateResponse | None = None
    confidence: float
    selection_reason: str
    amounts: list[AmountResponse]
    dates: list[DateResponse]
    associations: list[AssociationResponse]

    @classmethod
    def from_result(cls, result: EndingBalanceResult) -> "EndingBalanceResponse":
        """Serialize an engine result; associations refer to tokens by position."""
        return cls(
            ending_balance=(
                AmountResponse.from_result(result.ending_balance)
                if result.ending_balance
                else None
            ),
            ending_date=(
                DateResponse.from_result(result.ending_date)
                if result.ending_date
                else None
            ),
            confidence=result.confidence,
            selection_reason=result.selection_reason,
            amounts=[AmountResponse.from_result(a) for a in result.all_amounts],
            dates=[DateResponse.from_result(d) for d in result.all_dates],
            associations=[
                AssociationResponse(
                    amount_position=a.amount.position,
                    date_position=a.date.position,
                    distance=a.distance,
                    confidence=a.confidence,
                    near_balance_keyword=a.near_balance_keyword,
                    balance_keyword=a.balance_keyword,
                )
                for a in result.associations
            ],
        )


class CandidateResponse(BaseModel):
    """Response schema for a ranked subcategory candidate."""

    subcategory: str
    score: float
    matched_text: str


class SubcategoryResponse(BaseModel):
    """Response schema for subcategory inference."""

    inferred_subcategory: str | None = None
    confidence: float
    auto_populate: bool
    candidates: list[CandidateResponse]

    @classmethod
    def from_result(cls, result: SubcategoryInferenceResult) -> "SubcategoryResponse":
        return cls(
            inferred_subcategory=result.inferred_subcategory,
            confidence=result.confidence,
            auto_populate=result.auto_populate,
            candidates=[
                CandidateResponse(
                    subcategory=c.subcategory,
                    score=c.score,
                    matched_text=c.matched_text,
                )
                for c in result.candidates
            ],
        )


class AnalyzeResponse(BaseModel):
    """Response schema for full document analysis."""

    page_count: int
    ending_balance: EndingBalanceResponse
    subcategory: SubcategoryResponse
    warnings: list[str]


class SubcategoriesResponse(BaseModel):
    """Response schema listing the active subcategory mappings."""

    mappings: list[SubcategoryMapping]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
