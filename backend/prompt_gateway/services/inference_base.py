from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol

# One provider stream event, e.g. {"chunk": {"bytes": b"..."}}
StreamEvent = Mapping[str, Any]


class InferenceClient(Protocol):
    def invoke_once(self, payload: bytes) -> bytes:
        """Send one request and return the raw response body."""
        ...

    def invoke_streaming(self, payload: bytes) -> Iterable[StreamEvent]:
        """Open a response stream and return its event source."""
        ...
