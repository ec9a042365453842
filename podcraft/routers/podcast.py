"""
Podcast creation endpoints: scrape a URL, generate a script, narrate it.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from podcraft.config import get_settings
from podcraft.dependencies import (
    get_audio_store,
    get_error_classifier,
    get_generation_service,
    get_scrape_service,
    get_synthesis_pipeline,
)
from podcraft.exceptions import OperationCancelledError
from podcraft.models.schemas import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    ScrapeRequest,
    ScrapeResponse,
    SynthesizeRequest,
    SynthesizeResponse,
    VoicesResponse,
)
from podcraft.services.generation import GenerationOptions, ScriptGenerationService
from podcraft.services.scraping import ScrapeOptions, ScrapeService
from podcraft.services.storage import AudioStore
from podcraft.services.tts import SynthesisOptions, SynthesisPipeline
from podcraft.services.tts.voices import available_voices
from podcraft.utils.error_classifier import ErrorClassification, ErrorClassifier, ErrorCode
from podcraft.utils.logger import get_logger
from podcraft.utils.retry import CancellationToken

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/v1/podcast", tags=["podcast"])

DISCONNECT_POLL_INTERVAL = 0.5
CLIENT_CLOSED_REQUEST = 499

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.CONTENT_POLICY: 422,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.AUTH_ERROR: 502,
    ErrorCode.NETWORK_ERROR: 502,
    ErrorCode.AUTOMATION_BLOCKED: 502,
    ErrorCode.SERVICE_UNAVAILABLE: 503,
    ErrorCode.TIMEOUT: 504,
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@asynccontextmanager
async def watch_disconnect(request: Request) -> AsyncIterator[CancellationToken]:
    """Yield a token that is cancelled if the client goes away mid-request."""
    token = CancellationToken()

    async def poll() -> None:
        while not token.cancelled:
            if await request.is_disconnected():
                logger.info(f"Client disconnected from {request.url.path}; cancelling")
                token.cancel("Client disconnected")
                return
            await asyncio.sleep(DISCONNECT_POLL_INTERVAL)

    watcher = asyncio.create_task(poll())
    try:
        yield token
    finally:
        watcher.cancel()
        await asyncio.gather(watcher, return_exceptions=True)


def error_response(
    error: ErrorClassification,
    metadata: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    metadata = dict(metadata or {})
    attempted: List[str] = list(metadata.get("attempted_providers") or [])
    body = ErrorResponse(
        error={
            "code": error.code.value,
            "severity": error.severity.value,
            "message": error.message,
            "suggestion": error.suggestion,
            "retryable": error.retryable,
            "attempted_providers": attempted,
        },
        metadata=metadata,
    )
    return JSONResponse(status_code=STATUS_BY_CODE.get(error.code, 500), content=body.dict())


def cancelled_response(e: OperationCancelledError) -> JSONResponse:
    return JSONResponse(
        status_code=CLIENT_CLOSED_REQUEST,
        content={"success": False, "error": {"code": "CANCELLED", "message": str(e)}},
    )


@router.post("/scrape", response_model=ScrapeResponse, responses=ERROR_RESPONSES)
async def scrape_content(
    request: ScrapeRequest,
    http_request: Request,
    service: ScrapeService = Depends(get_scrape_service),
):
    """Extract the main article text from a URL."""
    async with watch_disconnect(http_request) as token:
        try:
            result = await service.scrape_content(request.url, ScrapeOptions(provider_hint=request.provider), token)
        except OperationCancelledError as e:
            return cancelled_response(e)

    if not result.success:
        return error_response(result.error, dict(result.metadata))
    return ScrapeResponse(title=result.title, content=result.content, metadata=dict(result.metadata))


@router.post("/generate", response_model=GenerateResponse, responses=ERROR_RESPONSES)
async def generate_script(
    request: GenerateRequest,
    http_request: Request,
    service: ScriptGenerationService = Depends(get_generation_service),
):
    """Write a podcast script from source content."""
    options = GenerationOptions(
        style=request.style,
        duration=request.duration,
        tone=request.tone,
        audience=request.audience,
        provider_hint=request.provider,
    )
    async with watch_disconnect(http_request) as token:
        try:
            result = await service.generate_script(request.content, options, token)
        except OperationCancelledError as e:
            return cancelled_response(e)

    if not result.success:
        return error_response(result.error, dict(result.metadata))
    return GenerateResponse(script=result.script, sections=result.sections, metadata=dict(result.metadata))


@router.post("/synthesize", response_model=SynthesizeResponse, responses=ERROR_RESPONSES)
async def synthesize_podcast(
    request: SynthesizeRequest,
    http_request: Request,
    pipeline: SynthesisPipeline = Depends(get_synthesis_pipeline),
    audio_store: AudioStore = Depends(get_audio_store),
    classifier: ErrorClassifier = Depends(get_error_classifier),
):
    """
    Narrate a script into a single audio file.

    The script is split into sentence-aware chunks which are synthesized in
    order, falling back across TTS providers, then joined with short pauses.
    """
    options = SynthesisOptions(
        voice_id=request.voice_id or settings.TTS_DEFAULT_VOICE,
        provider_hint=request.provider,
        stability_hint=request.stability,
        similarity_hint=request.similarity_boost,
        enhance=request.enhance,
    )
    async with watch_disconnect(http_request) as token:
        try:
            result = await pipeline.synthesize(request.script, options, token)
        except OperationCancelledError as e:
            return cancelled_response(e)

    if not result.success:
        return error_response(result.error, dict(result.metadata))

    try:
        audio_url = await asyncio.to_thread(audio_store.save, result.audio, "mp3")
    except Exception as e:
        error = classifier.classify(e, {"operation": "store_audio"})
        return error_response(error, dict(result.metadata))

    return SynthesizeResponse(audio_url=audio_url, metadata=dict(result.metadata))


@router.get("/voices", response_model=VoicesResponse)
async def list_voices():
    """Voice names accepted by /synthesize and their per-provider ids."""
    return VoicesResponse(default_voice=settings.TTS_DEFAULT_VOICE, voices=available_voices())
