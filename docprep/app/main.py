from __future__ import annotations

"""FastAPI application exposing document preparation and the response cache."""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request

from docprep.app.dependencies import (
    get_answerer,
    get_cache_sweeper,
    get_preparer,
    get_response_cache,
)
from docprep.app.metrics import (
    metrics_middleware,
    metrics_response,
    record_cache_lookup,
    record_prepare_strategy,
)
from docprep.app.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    CacheEntryPayload,
    CacheStatsResponse,
    CleanupResponse,
    DocumentPayload,
    InvalidateRequest,
    InvalidateResponse,
    PrepareRequest,
    PrepareResponse,
)
from docprep.app.settings import settings
from docprep.cache.response_cache import safe_get, safe_set, sha256_hex
from docprep.rag.guardrails import DEFAULT_REFUSAL, require_documents
from docprep.rag.types import ChunkingConfigError, ChunkingOptions, QuestionType

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Run the periodic cache sweep for the lifetime of the app."""
    sweeper = get_cache_sweeper() if settings.cache_sweep_enabled else None
    if sweeper is not None:
        sweeper.start()
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.stop()


app = FastAPI(title="Document Preparation Engine", version="0.1.0", lifespan=lifespan)


def _build_options(
    question_type: str,
    max_chunk_size: int | None = None,
    overlap_size: int | None = None,
) -> ChunkingOptions:
    """Build chunking options from request overrides and settings defaults."""
    try:
        return ChunkingOptions(
            max_chunk_size=settings.max_chunk_size if max_chunk_size is None else max_chunk_size,
            overlap_size=settings.chunk_overlap if overlap_size is None else overlap_size,
            question_type=QuestionType(question_type),
        )
    except ChunkingConfigError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/health")
async def health() -> dict[str, str]:
    """Simple health probe for uptime checks."""
    return {"status": "ok"}


@app.post("/prepare", response_model=PrepareResponse)
async def prepare(request: PrepareRequest, http_request: Request) -> PrepareResponse:
    """Condense the documents to the chunks most relevant to the question."""
    request_id = getattr(http_request.state, "request_id", str(uuid.uuid4()))
    options = _build_options(request.question_type, request.max_chunk_size, request.overlap_size)
    documents = [payload.to_document() for payload in request.documents]
    result = await asyncio.to_thread(
        get_preparer().prepare_with_report, documents, request.question, options
    )
    record_prepare_strategy(result.strategy)
    logger.info(
        "prepare_completed",
        extra={
            "request_id": request_id,
            "question_hash": sha256_hex(request.question),
            "strategy": result.strategy,
            "documents": len(result.documents),
        },
    )
    return PrepareResponse(
        documents=[DocumentPayload.from_document(document) for document in result.documents],
        strategy=result.strategy,
        original_size=result.original_size,
        prepared_size=result.prepared_size,
        dropped=result.dropped,
        request_id=request_id,
    )


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest, http_request: Request) -> AnalyzeResponse:
    """Answer a question from documents, serving repeated requests from cache."""
    request_id = getattr(http_request.state, "request_id", str(uuid.uuid4()))
    options = _build_options(request.question_type)
    documents = [payload.to_document() for payload in request.documents]
    cache = get_response_cache()
    cache_key = cache.generate_key(request.question, documents, namespace=options.question_type.value)

    cached_answer = safe_get(cache, cache_key)
    record_cache_lookup(cached_answer is not None)
    if cached_answer is not None:
        logger.info(
            "analyze_cache_hit",
            extra={"request_id": request_id, "question_hash": sha256_hex(request.question)},
        )
        return AnalyzeResponse(
            answer=cached_answer,
            cached=True,
            cache_key=cache_key,
            request_id=request_id,
        )

    guardrail = require_documents(documents)
    if not guardrail.allowed:
        return AnalyzeResponse(
            answer=DEFAULT_REFUSAL,
            cached=False,
            cache_key=cache_key,
            refusal_reason=guardrail.reason,
            request_id=request_id,
        )

    result = await asyncio.to_thread(
        get_preparer().prepare_with_report, documents, request.question, options
    )
    record_prepare_strategy(result.strategy)
    answer = await asyncio.to_thread(
        get_answerer().generate, request.question, result.documents, options.question_type
    )
    if not answer:
        logger.info(
            "analyze_no_answer",
            extra={"request_id": request_id, "strategy": result.strategy},
        )
        return AnalyzeResponse(
            answer=DEFAULT_REFUSAL,
            cached=False,
            cache_key=cache_key,
            strategy=result.strategy,
            refusal_reason="no_relevant_content",
            request_id=request_id,
        )

    safe_set(cache, cache_key, answer, request.ttl_seconds)
    logger.info(
        "analyze_completed",
        extra={
            "request_id": request_id,
            "strategy": result.strategy,
            "answer_length": len(answer),
        },
    )
    return AnalyzeResponse(
        answer=answer,
        cached=False,
        cache_key=cache_key,
        strategy=result.strategy,
        request_id=request_id,
    )


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats() -> CacheStatsResponse:
    """Return response cache size and entry ages."""
    stats = get_response_cache().stats()
    return CacheStatsResponse(
        size=stats.size,
        entries=[CacheEntryPayload(**entry.__dict__) for entry in stats.entries],
    )


@app.post("/cache/cleanup", response_model=CleanupResponse)
async def cache_cleanup() -> CleanupResponse:
    """Sweep expired cache entries immediately."""
    return CleanupResponse(removed=get_response_cache().cleanup())


@app.post("/cache/invalidate", response_model=InvalidateResponse)
async def cache_invalidate(request: InvalidateRequest) -> InvalidateResponse:
    """Drop the cached answer for a question/document combination."""
    documents = [payload.to_document() for payload in request.documents]
    invalidated = get_response_cache().invalidate(
        request.question, documents, namespace=request.question_type
    )
    return InvalidateResponse(invalidated=invalidated)
