# src/api/app.py

"""HTTP surface: the barcode lookup endpoint served by FastAPI."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from src.api.schemas import LookupRequest
from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.services.image_service import ImageService
from src.services.lookup_orchestrator import LookupOrchestrator
from src.services.vision_client import VisionClient
from src.services.visual_analyzer import VisualAnalyzer

logger = logging.getLogger("product_lookup.api")

router = APIRouter()


class RequestBodyError(ValueError):
    """The request body is not a JSON object of the expected shape."""


async def _parse_body(request: Request) -> LookupRequest:
    """Decode the raw body; an empty body counts as ``{}``."""
    raw = await request.body()
    if not raw.strip():
        return LookupRequest()
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestBodyError(str(exc)) from exc
    if not isinstance(data, dict):
        raise RequestBodyError("Request body must be a JSON object")
    try:
        return LookupRequest.model_validate(data)
    except ValidationError as exc:
        raise RequestBodyError(str(exc)) from exc


def _error(message: str, status_code: int) -> JSONResponse:
    """Build an ``{error}`` JSON response."""
    return JSONResponse({"error": message}, status_code=status_code)


async def _fix_image(
    request: Request, body: LookupRequest,
) -> JSONResponse:
    """Re-search a product photo by name and brand."""
    images: ImageService = request.app.state.images
    if not images.configured:
        return _error("Google API invalid", 500)

    try:
        query = images.build_query(body.product_name or "", body.brand)
        logger.info("Fixing image for: %s", query)
        image_url = await asyncio.to_thread(images.search, query)
    except Exception as exc:
        logger.error("Image repair failed: %s", exc, exc_info=True)
        return _error(str(exc), 500)

    if not image_url:
        return _error("No image found", 404)
    return JSONResponse({"image_url": image_url})


async def _analyze_image(
    request: Request, body: LookupRequest,
) -> JSONResponse:
    """Identify a photographed product.

    Failures are answered with HTTP 200 and an ``{error}`` body because the
    web client's function-invoke helper drops response bodies on 5xx.
    """
    if not body.image:
        return _error("Missing image", 400)

    analyzer: VisualAnalyzer = request.app.state.analyzer
    try:
        product = await analyzer.analyze(body.image)
    except Exception as exc:
        logger.error("Image analysis failed: %s", exc, exc_info=True)
        return JSONResponse({"error": str(exc)}, status_code=200)
    return JSONResponse(product.to_dict())


@router.options("/")
@router.options("/barcode-lookup")
async def preflight() -> PlainTextResponse:
    """Answer CORS preflight requests."""
    return PlainTextResponse("ok")


@router.post("/")
@router.post("/barcode-lookup")
async def barcode_lookup(request: Request) -> JSONResponse:
    """Resolve a barcode, analyze a photo, or repair a product image."""
    try:
        body = await _parse_body(request)
    except RequestBodyError as exc:
        logger.warning("Rejected request body: %s", exc)
        return JSONResponse(
            {"error": "JSON Parse Error", "details": str(exc)},
            status_code=400,
        )

    try:
        if body.action == "fix_image" and body.product_name:
            return await _fix_image(request, body)

        if body.action == "analyze_image":
            return await _analyze_image(request, body)

        barcode = (body.barcode or "").strip()
        if not barcode:
            return _error("Missing barcode", 400)

        orchestrator: LookupOrchestrator = request.app.state.orchestrator
        result = await orchestrator.lookup(barcode)
        if result.record is None:
            return _error("Product not found", 404)
        return JSONResponse(result.record.to_dict())

    except Exception as exc:
        logger.error("Unhandled lookup error: %s", exc, exc_info=True)
        return _error(str(exc), 500)


@router.get("/health")
async def health() -> dict[str, object]:
    """Liveness probe listing the configured provider cascade."""
    return {
        "status": "ok",
        "providers": [p["id"] for p in Settings.AVAILABLE_PROVIDERS],
    }


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Set up per-run logging for the server process."""
    log_file = setup_logging()
    logger.info("product_lookup API starting, log file: %s", log_file)
    yield
    logger.info("product_lookup API shutting down")


def create_app(
    orchestrator: LookupOrchestrator | None = None,
    analyzer: VisualAnalyzer | None = None,
    images: ImageService | None = None,
) -> FastAPI:
    """Build the FastAPI application with shared service instances."""
    app = FastAPI(
        title="product_lookup",
        description="Barcode and photo product resolution",
        lifespan=_lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=Settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    images = images or ImageService()
    vision = VisionClient()
    app.state.images = images
    app.state.orchestrator = orchestrator or LookupOrchestrator(
        vision=vision, images=images
    )
    app.state.analyzer = analyzer or VisualAnalyzer(
        vision=vision, images=images
    )

    app.include_router(router)
    return app
