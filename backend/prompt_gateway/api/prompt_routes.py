from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from starlette.responses import PlainTextResponse, StreamingResponse

from prompt_gateway.core.errors import ChannelError, DecodingError, EmptyResultError, EncodingError
from prompt_gateway.services.inference_base import InferenceClient
from prompt_gateway.services.stream_adapter import TextStreamAdapter
from prompt_gateway.services.titan_codec import decode, encode, first_text


logger = logging.getLogger(__name__)

router = APIRouter(tags=["prompt"])


class PromptRequest(BaseModel):
    prompt: str


def get_inference_client(request: Request) -> InferenceClient:
    """Shared, read-only client built at startup."""
    return request.app.state.inference_client


def _encode_or_400(prompt: str) -> bytes:
    try:
        return encode(prompt)
    except EncodingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/")
def hello_world() -> PlainTextResponse:
    return PlainTextResponse("Hello, world!")


@router.post("/prompt")
def prompt(
    request_body: PromptRequest,
    client: InferenceClient = Depends(get_inference_client),
) -> PlainTextResponse:
    """Single round trip: returns the first result's text as plain text."""
    payload = _encode_or_400(request_body.prompt)

    try:
        raw = client.invoke_once(payload)
    except ChannelError as exc:
        raise HTTPException(status_code=502, detail="Inference provider request failed") from exc

    try:
        text = first_text(decode(raw))
    except (DecodingError, EmptyResultError) as exc:
        logger.warning("Unusable response from inference provider: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return PlainTextResponse(text)


@router.post("/prompt/streamed")
def streamed_prompt(
    request_body: PromptRequest,
    http_request: Request,
    client: InferenceClient = Depends(get_inference_client),
) -> StreamingResponse:
    """
    Returns a chunked text/plain body, one write per generated fragment.

    Once the body has started there is no way to signal an error, so any
    mid-stream failure just ends the body early.
    """
    payload = _encode_or_400(request_body.prompt)

    try:
        source = client.invoke_streaming(payload)
    except ChannelError as exc:
        raise HTTPException(status_code=502, detail="Inference provider request failed") from exc

    headers = {
        "Cache-Control": "no-cache",
        # Helps when behind Nginx / proxies that buffer streaming
        "X-Accel-Buffering": "no",
    }

    return StreamingResponse(
        TextStreamAdapter(source, request=http_request),
        media_type="text/plain",
        headers=headers,
    )
