from dataclasses import replace
from io import BytesIO
import logging
from pathlib import Path
import sys
import time

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from PIL import Image
from pydantic import Field, ValidationError

# Ensure local src package is importable in serverless runtime.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from api.scan_logging import ScanLogger, ScanLoggingConfig, ScanRecord  # noqa: E402
from coffee_scan.catalog import CoffeeRecommendation, RoasterMatch, generate_recommendations, match_roaster  # noqa: E402
from coffee_scan.config import Settings, parse_bool  # noqa: E402
from coffee_scan.core import extract_with_metadata  # noqa: E402
from coffee_scan.exceptions import AuthenticationError, ImageError, RateLimitError  # noqa: E402
from coffee_scan.logging_utils import setup_logging  # noqa: E402
from coffee_scan.parsing import UNPARSEABLE  # noqa: E402
from coffee_scan.reviews import ReviewSummary, lookup_reviews  # noqa: E402
from coffee_scan.reviews.models import ReviewLookupDebug  # noqa: E402
from coffee_scan.schema import CamelModel, CoffeeExtraction, ProcessingMethod  # noqa: E402

SETTINGS = Settings.from_env()
setup_logging(SETTINGS.log_level)

app = FastAPI(title="coffee-scan API", version="1.0.0")
logger = logging.getLogger(__name__)
SCAN_LOGGER = ScanLogger(ScanLoggingConfig.from_env())

ALLOWED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}

app.add_middleware(
    CORSMiddleware,
    allow_origins=SETTINGS.allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_error_envelope(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_envelope(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "invalid request") if errors else "invalid request"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


class ScanData(CamelModel):
    id: str
    extraction: CoffeeExtraction
    confidence: float = Field(ge=0.0, le=1.0)
    processing_method: ProcessingMethod
    processing_time: int
    reviews: ReviewSummary | None = None
    roaster_match: RoasterMatch | None = None
    recommendations: list[CoffeeRecommendation] | None = None


class ScanResponse(CamelModel):
    success: bool = True
    data: ScanData


class ReviewsRequest(CamelModel):
    roaster: str | None = None
    product_name: str | None = None
    search_query: str | None = None


class ReviewsResponse(CamelModel):
    success: bool = True
    data: ReviewSummary
    search_query: str
    search_time: int
    debug: ReviewLookupDebug


class FeedbackRequest(CamelModel):
    scan_id: str = Field(min_length=1)
    extraction_accuracy: int | None = Field(default=None, ge=1, le=5)
    recommendation_quality: int | None = Field(default=None, ge=1, le=5)
    corrections: CoffeeExtraction | None = None
    comments: str | None = Field(default=None, max_length=2000)


def _validate_payload_size(payload: bytes) -> None:
    if len(payload) > SETTINGS.max_image_bytes:
        raise HTTPException(status_code=413, detail="image too large")


def _validate_multipart_content_type(content_type: str | None) -> None:
    if not content_type:
        raise HTTPException(status_code=400, detail="No image provided")
    normalized = content_type.split(";")[0].strip().lower()
    if normalized not in ALLOWED_MIME_TYPES:
        raise HTTPException(status_code=400, detail="unsupported image content type")


async def _log_failed_scan(record: ScanRecord, started: float, exc: Exception) -> None:
    await run_in_threadpool(
        SCAN_LOGGER.log_scan,
        replace(
            record,
            processing_time_ms=int((time.monotonic() - started) * 1000),
            error_detail=str(exc) or type(exc).__name__,
        ),
    )


def _usable(value: str | None) -> str | None:
    if not value or value == UNPARSEABLE:
        return None
    return value


@app.post("/api/scan", response_model=ScanResponse, response_model_exclude_none=True)
async def scan(
    request: Request,
    image: UploadFile | None = File(default=None),
    include_reviews: str | None = Form(default=None, alias="includeReviews"),
    include_recommendations: str | None = Form(default=None, alias="includeRecommendations"),
    depth: str | None = Form(default=None),
) -> ScanResponse:
    if image is None:
        raise HTTPException(status_code=400, detail="No image provided")
    if depth is not None and depth not in {"basic", "detailed"}:
        raise HTTPException(status_code=400, detail=f"invalid depth: {depth}")
    _validate_multipart_content_type(image.content_type)
    payload = await image.read()
    if not payload:
        raise HTTPException(status_code=400, detail="empty file")
    _validate_payload_size(payload)

    request_id = SCAN_LOGGER.new_request_id()
    content_type = (image.content_type or "").split(";")[0].strip().lower()
    started = time.monotonic()
    record = ScanRecord(
        request_id=request_id,
        processing_method=None,
        payload=payload,
        mime_type=content_type,
        original_filename=image.filename,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

    try:
        pil_image = Image.open(BytesIO(payload))
        pil_image.load()
    except OSError as exc:
        await _log_failed_scan(record, started, exc)
        raise HTTPException(status_code=400, detail="invalid image format") from exc
    width, height = pil_image.size

    try:
        result, extraction_metadata = await run_in_threadpool(
            extract_with_metadata, pil_image, depth=depth, settings=SETTINGS
        )
    except AuthenticationError as exc:
        await _log_failed_scan(record, started, exc)
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except RateLimitError as exc:
        await _log_failed_scan(record, started, exc)
        raise HTTPException(status_code=429, detail=str(exc)) from exc
    except ImageError as exc:
        await _log_failed_scan(record, started, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("scan failed")
        await _log_failed_scan(record, started, exc)
        raise HTTPException(status_code=500, detail="AI processing failed")

    extraction = result.structured_data
    roaster = _usable(extraction.roaster)
    product_name = _usable(extraction.product_name)
    roaster_match = match_roaster(brand_text=roaster) if roaster else None

    recommendations = None
    if parse_bool(include_recommendations, False):
        recommendations = generate_recommendations(extraction, roaster_match)

    reviews = None
    if parse_bool(include_reviews, False):
        if roaster and product_name:
            try:
                lookup = await lookup_reviews(roaster, product_name, settings=SETTINGS)
                reviews = lookup.summary
            except Exception:
                logger.exception("review lookup failed for %s - %s", roaster, product_name)
        else:
            logger.info("reviews requested but roaster or product name missing")

    processing_time = int((time.monotonic() - started) * 1000)
    processing_method = extraction_metadata.get("processing_method", "vision")
    await run_in_threadpool(
        SCAN_LOGGER.log_scan,
        replace(
            record,
            processing_method=processing_method,
            provider=extraction_metadata.get("provider"),
            parser=extraction_metadata.get("parser"),
            confidence=result.confidence,
            processing_time_ms=processing_time,
            image_width=width,
            image_height=height,
            extraction=extraction.model_dump(by_alias=True, exclude_none=True),
            roaster_id=roaster_match.id if roaster_match else None,
        ),
    )

    return ScanResponse(
        data=ScanData(
            id=request_id,
            extraction=extraction,
            confidence=result.confidence,
            processing_method=processing_method,
            processing_time=processing_time,
            reviews=reviews,
            roaster_match=roaster_match,
            recommendations=recommendations,
        )
    )


async def _reviews_response(request_data: ReviewsRequest) -> ReviewsResponse:
    roaster = (request_data.roaster or "").strip()
    product_name = (request_data.product_name or "").strip()
    if not roaster or not product_name:
        raise HTTPException(status_code=400, detail="Missing roaster or product name")

    try:
        lookup = await lookup_reviews(
            roaster,
            product_name,
            search_query=request_data.search_query,
            settings=SETTINGS,
        )
    except Exception as exc:
        logger.exception("reviews lookup failed")
        raise HTTPException(status_code=500, detail="Failed to fetch reviews") from exc

    return ReviewsResponse(
        data=lookup.summary,
        search_query=lookup.search_query,
        search_time=lookup.search_time,
        debug=lookup.debug,
    )


@app.get("/api/reviews", response_model=ReviewsResponse, response_model_exclude_none=True)
async def reviews_get(
    roaster: str | None = Query(default=None),
    product_name: str | None = Query(default=None, alias="productName"),
    search_query: str | None = Query(default=None, alias="searchQuery"),
) -> ReviewsResponse:
    return await _reviews_response(
        ReviewsRequest(roaster=roaster, product_name=product_name, search_query=search_query)
    )


@app.post("/api/reviews", response_model=ReviewsResponse, response_model_exclude_none=True)
async def reviews_post(request: Request) -> ReviewsResponse:
    try:
        body = ReviewsRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as exc:
        raise HTTPException(status_code=400, detail="Missing roaster or product name") from exc
    return await _reviews_response(body)


@app.post("/api/feedback")
async def feedback(body: FeedbackRequest) -> dict[str, bool]:
    stored = await run_in_threadpool(
        SCAN_LOGGER.save_feedback,
        body.scan_id,
        body.model_dump(by_alias=True, exclude_none=True, exclude={"scan_id"}),
    )
    return {"success": True, "stored": stored}


@app.get("/api/scans/{scan_id}")
async def get_scan(scan_id: str) -> dict:
    row = await run_in_threadpool(SCAN_LOGGER.get_scan, scan_id)
    if row is None:
        raise HTTPException(status_code=404, detail="scan not found")
    return {"success": True, "data": row}
