from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Mapping
from enum import Enum
from typing import AsyncIterator, Iterable, Optional

from starlette.requests import Request

from prompt_gateway.core.errors import DecodingError, EmptyResultError
from prompt_gateway.core.metrics import STREAM_FRAGMENTS, STREAM_TERMINATIONS
from prompt_gateway.services.inference_base import StreamEvent
from prompt_gateway.services.titan_codec import decode, first_text


logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


class StreamState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class StreamOutcome(str, Enum):
    COMPLETED = "completed"
    CONTROL_FRAME = "control_frame"
    DECODE_FAILED = "decode_failed"
    EMPTY_RESULT = "empty_result"
    CHANNEL_FAILED = "channel_failed"
    CLIENT_DISCONNECTED = "client_disconnected"


class TextStreamAdapter:
    """Adapt a provider event stream into an async stream of text fragments.

    - Pulls exactly one event per requested fragment (blocking reads run in a worker thread)
    - Emits the first result's text of every data chunk, in arrival order
    - Ends the stream on end-of-stream, any non-data event, or any failure;
      failures are logged, never emitted
    - Closes the source once, on whichever terminal path is taken first

    Not restartable: once closed, iterating again yields nothing.
    """

    def __init__(self, source: Iterable[StreamEvent], *, request: Optional[Request] = None) -> None:
        self._source = source
        self._events = iter(source)
        self._request = request
        self.state = StreamState.OPEN
        self.outcome: Optional[StreamOutcome] = None
        self.fragments = 0

    def __aiter__(self) -> AsyncIterator[str]:
        return self._fragments()

    async def _fragments(self) -> AsyncIterator[str]:
        try:
            while self.state is StreamState.OPEN:
                text = await self._next_fragment()
                if text is None:
                    break
                self.fragments += 1
                STREAM_FRAGMENTS.inc()
                yield text
        finally:
            # Consumer went away (disconnect, cancellation) before the stream ended
            self._close(StreamOutcome.CLIENT_DISCONNECTED)

    async def _next_fragment(self) -> Optional[str]:
        if self._request is not None and await self._request.is_disconnected():
            self._close(StreamOutcome.CLIENT_DISCONNECTED)
            return None

        try:
            event = await asyncio.to_thread(next, self._events, _END_OF_STREAM)
        except Exception as exc:  # noqa: BLE001 - any upstream failure ends the stream
            logger.warning("Response stream failed: %s", exc)
            self._close(StreamOutcome.CHANNEL_FAILED)
            return None

        if event is _END_OF_STREAM:
            self._close(StreamOutcome.COMPLETED)
            return None

        chunk = event.get("chunk") if isinstance(event, Mapping) else None
        if chunk is None:
            kinds = list(event) if isinstance(event, Mapping) else type(event).__name__
            logger.info("Non-data stream event %s, ending stream", kinds)
            self._close(StreamOutcome.CONTROL_FRAME)
            return None

        raw = chunk.get("bytes") if isinstance(chunk, Mapping) else None
        if raw is None:
            logger.warning("Stream chunk carried no bytes")
            self._close(StreamOutcome.DECODE_FAILED)
            return None

        try:
            result = decode(raw)
        except DecodingError as exc:
            logger.warning("Unable to deserialize stream chunk: %s", exc)
            self._close(StreamOutcome.DECODE_FAILED)
            return None

        try:
            return first_text(result)
        except EmptyResultError:
            logger.warning("Stream chunk had no results")
            self._close(StreamOutcome.EMPTY_RESULT)
            return None

    def _close(self, outcome: StreamOutcome) -> None:
        if self.state is StreamState.CLOSED:
            return
        self.state = StreamState.CLOSED
        self.outcome = outcome
        STREAM_TERMINATIONS.labels(outcome=outcome.value).inc()

        close = getattr(self._source, "close", None)
        if callable(close):
            with contextlib.suppress(Exception):
                close()

        logger.info("Response stream closed (%s) after %d fragment(s)", outcome.value, self.fragments)
