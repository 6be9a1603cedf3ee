"""
Photomaton Proxy Application
============================

FastAPI entry point for the trusted stylize proxy.

Native and browser clients call this service instead of the generative-image
API so the API key never leaves the server. Requests and responses use the
GenerateRequest / GenerateResponse shape; the server-side client injects the
credential.

Endpoints:
    GET  /          - Service information
    GET  /health    - Liveness probe (static service descriptor)
    GET  /metrics   - Request counters
    POST /generate  - Stylize one frame
"""

import asyncio
import binascii
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from photomaton.config import settings
from photomaton.errors import AuthError, RemoteError
from photomaton.models.frame import Frame
from photomaton.models.messages import GenerateRequest, GenerateResponse, HealthResponse
from photomaton.stylize import GeminiStylizeClient, MockStylizeClient, StylizeClient


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_stylize_client: Optional[StylizeClient] = None
_startup_time: float = 0.0

# Counters
_request_count: int = 0
_output_count: int = 0
_no_output_count: int = 0
_auth_error_count: int = 0
_remote_error_count: int = 0


# =============================================================================
# Getters
# =============================================================================

def get_stylize_client() -> Optional[StylizeClient]:
    return _stylize_client


# =============================================================================
# Upstream Client Factory
# =============================================================================

def create_upstream_client() -> StylizeClient:
    """
    Create the server-side stylize client.

    The proxy always calls the API directly (never another proxy); the mock
    backend is allowed for local development.
    """
    config = settings.stylize

    if config.backend == "mock":
        logger.info("Proxy upstream: MockStylizeClient")
        return MockStylizeClient()

    client = GeminiStylizeClient(
        api_key=config.api_key,
        model=config.model,
        api_base_url=config.api_base_url,
        timeout_seconds=config.timeout_seconds,
    )
    if not client.has_credentials:
        logger.warning("No API key configured; /generate will answer 401")

    logger.info(f"Proxy upstream: GeminiStylizeClient model={config.model}")
    return client


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _stylize_client, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")

    port = int(os.environ.get("PORT", settings.server.port))
    logger.info(f"Configured port: {port}")

    _stylize_client = create_upstream_client()

    yield

    logger.info("Shutting down...")
    close = getattr(_stylize_client, "close", None)
    if close is not None:
        await asyncio.to_thread(close)
    _stylize_client = None
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Photomaton API",
    description="Trusted proxy for the photo booth's generative-image calls",
    version=settings.service.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": settings.service.name,
        "version": settings.service.version,
        "status": "running",
        "model": settings.stylize.model,
    })


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe - is the process alive?

    Always returns the static service descriptor while the process runs.
    """
    return HealthResponse(
        service=settings.service.name,
        status="healthy",
        version=settings.service.version,
    )


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Request counters for observability."""
    client = get_stylize_client()
    client_metrics = client.get_metrics() if hasattr(client, "get_metrics") else {}

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1) if _startup_time else 0.0,
        "requests": _request_count,
        "outputs": _output_count,
        "no_output": _no_output_count,
        "auth_errors": _auth_error_count,
        "remote_errors": _remote_error_count,
        **{f"upstream_{key}": value for key, value in client_metrics.items()},
    })


@app.post("/generate", response_model=GenerateResponse, response_model_exclude_none=True)
async def generate(request: GenerateRequest):
    """
    Stylize one frame with the server-held credential.

    Returns 401 when the credential is missing or rejected, 502 when the
    upstream call fails and 400 for an undecodable image payload.
    """
    global _request_count, _output_count, _no_output_count
    global _auth_error_count, _remote_error_count

    _request_count += 1

    client = get_stylize_client()
    if client is None:
        return JSONResponse({"error": "Service not ready"}, status_code=503)

    try:
        frame = Frame.from_base64(request.image_base64, request.mime_type)
    except (binascii.Error, ValueError):
        return JSONResponse({"error": "image_base64 is not valid base64"}, status_code=400)

    try:
        result = await client.stylize(frame, request.instruction)
    except AuthError as e:
        _auth_error_count += 1
        logger.error(f"Upstream auth error: {e}")
        return JSONResponse({"error": str(e)}, status_code=401)
    except RemoteError as e:
        _remote_error_count += 1
        logger.error(f"Upstream error: {e}")
        return JSONResponse({"error": str(e)}, status_code=502)

    if result.is_no_output:
        _no_output_count += 1
        return GenerateResponse(text=result.advisory_text)

    _output_count += 1
    return GenerateResponse(
        image_base64=result.output_frame.to_base64(),
        mime_type=result.output_frame.mime_type,
        text=result.advisory_text,
    )


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Run the proxy with uvicorn."""
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "photomaton.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run()
