from __future__ import annotations

from prometheus_client import Counter, Histogram

# Registered once per process; create_app may be called many times (tests)
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
)
STREAM_FRAGMENTS = Counter(
    "prompt_stream_fragments_total",
    "Text fragments relayed on streamed prompt responses",
)
STREAM_TERMINATIONS = Counter(
    "prompt_stream_terminations_total",
    "Streamed prompt responses by terminal outcome",
    ["outcome"],
)
