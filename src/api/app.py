"""FastAPI application for the OCR post-processing engine.

Provides REST endpoints for ending-balance detection, subcategory
inference, combined document analysis, catalog listing, and health checks.
Callers send text already produced by an OCR provider.
"""

from typing import TypeVar

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from src.balance.selector import detect_ending_balance
from src.classification.subcategory import (
    infer_subcategory,
    infer_subcategory_from_multiple_texts,
)
from src.ocr.scanner import analyze_document
from src.utils.config import (
    AppConfig,
    BalanceDetectionConfig,
    SubcategoryInferenceConfig,
    load_config,
)
from src.utils.logger import get_logger

from .schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    BalanceConfigOverride,
    EndingBalanceRequest,
    EndingBalanceResponse,
    HealthResponse,
    SubcategoriesResponse,
    SubcategoryConfigOverride,
    SubcategoryRequest,
    SubcategoryResponse,
)

logger = get_logger(__name__)

API_VERSION = "1.0.0"

ConfigT = TypeVar("ConfigT", bound=BaseModel)

app = FastAPI(
    title="OCR Post-Processing API",
    description="Detect ending balances and infer document subcategories from OCR text",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> AppConfig:
    """Load the application configuration used as the base for each request."""
    return load_config()


def _merge(base: ConfigT, override: BaseModel | None) -> ConfigT:
    """Apply a partial override to a config model, re-validating the result.

    Raises:
        HTTPException: 422 if the merged config fails validation.
    """
    if override is None:
        return base
    merged = {**base.model_dump(), **override.model_dump(exclude_none=True)}
    try:
        return type(base).model_validate(merged)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        raise HTTPException(status_code=422, detail=errors) from exc


def _balance_config(override: BalanceConfigOverride | None) -> BalanceDetectionConfig:
    return _merge(_get_config().balance, override)


def _subcategory_config(
    override: SubcategoryConfigOverride | None,
) -> SubcategoryInferenceConfig:
    return _merge(_get_config().subcategory, override)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(status="healthy", version=API_VERSION)


@app.post("/ending-balance", response_model=EndingBalanceResponse)
async def ending_balance(request: EndingBalanceRequest) -> EndingBalanceResponse:
    """Detect the ending balance and its date in OCR text.

    Args:
        request: OCR text and optional detection config overrides.

    Returns:
        Selected balance and date with all extracted evidence.
    """
    config = _balance_config(request.config)
    try:
        result = detect_ending_balance(request.text, config)
    except Exception as exc:
        logger.error("Ending balance detection failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return EndingBalanceResponse.from_result(result)


@app.post("/subcategory", response_model=SubcategoryResponse)
async def subcategory(request: SubcategoryRequest) -> SubcategoryResponse:
    """Infer the document subcategory from one text or several segments.

    Args:
        request: ``text`` or ``texts`` plus optional inference config overrides.

    Returns:
        Top subcategory, confidence, candidates and the auto-populate decision.
    """
    config = _subcategory_config(request.config)
    try:
        if request.texts is not None:
            result = infer_subcategory_from_multiple_texts(request.texts, config)
        else:
            result = infer_subcategory(request.text or "", config)
    except Exception as exc:
        logger.error("Subcategory inference failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return SubcategoryResponse.from_result(result)


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest) -> AnalyzeResponse:
    """Run ending-balance detection and subcategory inference on a document.

    Args:
        request: OCR text per page plus optional config overrides.

    Returns:
        Both engine results and any analysis warnings.
    """
    balance_config = _balance_config(request.balance_config)
    inference_config = _subcategory_config(request.subcategory_config)
    try:
        analysis = analyze_document(request.pages, balance_config, inference_config)
    except Exception as exc:
        logger.error("Document analysis failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return AnalyzeResponse(
        page_count=analysis.page_count,
        ending_balance=EndingBalanceResponse.from_result(analysis.ending_balance),
        subcategory=SubcategoryResponse.from_result(analysis.subcategory),
        warnings=analysis.warnings,
    )


@app.get("/subcategories", response_model=SubcategoriesResponse)
async def list_subcategories() -> SubcategoriesResponse:
    """List the subcategory mappings the engine is configured with."""
    return SubcategoriesResponse(mappings=_get_config().subcategory.mappings)
