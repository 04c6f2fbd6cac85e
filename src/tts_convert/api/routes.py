"""
tts-convert API Routes.

Endpoints:
    POST /api/text-to-speech/convert   Text in, MP3 download out
    GET  /health                       Liveness and configuration summary
    GET  /metrics                      Prometheus metrics

Request Flow (convert):
    1. Assign a request id (X-Request-Id header, log correlation)
    2. Validate the body against the rule set      → 400 {"errors": [...]}
    3. SynthesisDelegate.convert(text)             → 500 {"error": ...}
    4. Check the artifact can be opened            → 500 plain text
    5. Stream the file as an attachment            → 200 audio/mpeg

Every request ends in exactly one response. Provider and storage errors
are logged with their cause but the client only ever sees the generic
message.

Example:
    curl -X POST http://localhost:3000/api/text-to-speech/convert \\
        -H "Content-Type: application/json" \\
        -d '{"text": "Hello, world!"}' \\
        --remote-header-name --remote-name
"""
from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from starlette.background import BackgroundTask
from starlette.types import Receive, Scope, Send

from tts_convert.api.dependencies import (
    get_app_config,
    get_delegate,
    read_json_payload,
)
from tts_convert.api.schemas import (
    ConvertRequest,
    ErrorResponse,
    HealthResponse,
    ValidationErrorResponse,
)
from tts_convert.core.config import AppConfig
from tts_convert.core.errors import (
    CONVERT_FAILED_MESSAGE,
    DELIVERY_FAILED_MESSAGE,
    DeliveryError,
    SynthesisError,
    ValidationError,
)
from tts_convert.core.logging import error, fail, get_logger, info, set_request_id, success, warn
from tts_convert.core.metrics import metrics
from tts_convert.services.synthesis import SynthesisDelegate
from tts_convert.services.validators import ensure_valid
from tts_convert.tts.storage import AudioArtifact
from tts_convert.utils.timeit import timeit

router = APIRouter()

_LOG = get_logger("tts-convert.api")

CONVERT_PATH = "/api/text-to-speech/convert"
AUDIO_MEDIA_TYPE = "audio/mpeg"
DEFAULT_DOWNLOAD_NAME = "output.mp3"


class ArtifactResponse(FileResponse):
    """
    FileResponse that reports how the send ended.

    The status line is already on the wire when a mid-stream failure
    (client disconnect, read error) happens, so such failures can only
    be logged and counted, then re-raised to the server.
    """

    def __init__(self, path: str, *, request_id: str, handler_seconds: float, **kwargs: Any):
        super().__init__(path, **kwargs)
        self.request_id = request_id
        self.handler_seconds = handler_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        set_request_id(self.request_id)
        try:
            await super().__call__(scope, receive, send)
        except Exception as e:
            metrics.record_outcome("send_failed")
            fail(_LOG, "send_failed", file=Path(str(self.path)).name,
                 error=f"{type(e).__name__}: {e}")
            raise
        metrics.record_outcome("delivered", self.handler_seconds)


def _download_name(artifact: AudioArtifact) -> str:
    """File name advertised in Content-Disposition."""
    return Path(artifact.file_path).name or artifact.file_name or DEFAULT_DOWNLOAD_NAME


def _ensure_deliverable(artifact: AudioArtifact) -> None:
    """
    Open the artifact once before committing to a 200.

    Raises:
        DeliveryError: If the file vanished or cannot be read.
    """
    try:
        with open(artifact.file_path, "rb"):
            pass
    except OSError as e:
        raise DeliveryError(
            f"artifact not readable: {e}",
            details={"file": artifact.file_name},
        ) from e


@router.post(
    CONVERT_PATH,
    response_class=FileResponse,
    responses={
        200: {"content": {AUDIO_MEDIA_TYPE: {}}, "description": "MP3 download"},
        400: {"model": ValidationErrorResponse, "description": "Invalid text"},
        500: {"model": ErrorResponse, "description": "Conversion failed"},
    },
    # Body is read raw (see read_json_payload); document its shape here
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ConvertRequest.model_json_schema()}},
        }
    },
)
def convert_text_to_speech(
    payload: Any = Depends(read_json_payload),
    delegate: SynthesisDelegate = Depends(get_delegate),
    config: AppConfig = Depends(get_app_config),
):
    """
    Convert text to speech and return the MP3 as a download.

    Body:
        {"text": "<1-500 characters>"}

    Returns:
        200 audio/mpeg with ``Content-Disposition: attachment; filename="<uuid>.mp3"``,
        400 ``{"errors": [...]}`` listing every violated rule,
        500 ``{"error": "Error converting text to audio"}`` on synthesis failure.
    """
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)
    headers = {"X-Request-Id": rid}

    with timeit("request_total") as total_t:
        # Stage 1: validate
        try:
            request = ensure_valid(payload)
        except ValidationError as e:
            metrics.record_outcome("rejected", total_t.seconds)
            warn(_LOG, "rejected", status=400, rules=len(e.violations), reasons=e.message)
            return JSONResponse(status_code=400, content=e.to_response(), headers=headers)

        info(_LOG, "request", chars=len(request.text))

        # Stage 2: synthesize + persist
        try:
            artifact = delegate.convert(request.text)
        except SynthesisError as e:
            metrics.record_outcome("failed", total_t.seconds)
            error(_LOG, "convert_failed", status=500, code=e.code, error=e.message)
            return JSONResponse(status_code=500, content={"error": CONVERT_FAILED_MESSAGE}, headers=headers)
        except Exception as e:
            metrics.record_outcome("failed", total_t.seconds)
            error(_LOG, "convert_failed", status=500, error=f"{type(e).__name__}: {e}", exc_info=e)
            return JSONResponse(status_code=500, content={"error": CONVERT_FAILED_MESSAGE}, headers=headers)

        # Stage 3: deliver
        try:
            _ensure_deliverable(artifact)
        except DeliveryError as e:
            metrics.record_outcome("send_failed", total_t.seconds)
            error(_LOG, "send_failed", status=500, code=e.code, error=e.message)
            return PlainTextResponse(DELIVERY_FAILED_MESSAGE, status_code=500, headers=headers)

    background: Optional[BackgroundTask] = None
    if config.storage.delete_after_send:
        background = BackgroundTask(delegate.store.discard, artifact.file_path)

    success(_LOG, "converted", status=200, file=artifact.file_name, bytes=artifact.size,
            seconds=round(total_t.seconds, 3))
    return ArtifactResponse(
        artifact.file_path,
        request_id=rid,
        handler_seconds=total_t.seconds,
        media_type=AUDIO_MEDIA_TYPE,
        filename=_download_name(artifact),
        headers=headers,
        background=background,
    )


@router.get("/health", response_model=HealthResponse)
def health(delegate: SynthesisDelegate = Depends(get_delegate)):
    """
    Health check for load balancers and probes.

    Reports the configured provider, the fixed model/voice pair and the
    artifact directory usage. Never calls the provider.
    """
    return HealthResponse(
        ok=True,
        provider=delegate.provider.describe(),
        model=delegate.model,
        voice=delegate.voice,
        storage_dir=str(delegate.store.base_dir),
        storage=delegate.store.stats(),
    )


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus metrics in text exposition format."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
