from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from prompt_gateway.api.prompt_routes import router as prompt_router
from prompt_gateway.core.metrics import REQUEST_COUNT, REQUEST_LATENCY
from prompt_gateway.core.settings import AppSettings, get_settings
from prompt_gateway.services.bedrock_client import BedrockInferenceClient
from prompt_gateway.services.inference_base import InferenceClient


def create_app(
    settings: Optional[AppSettings] = None,
    inference_client: Optional[InferenceClient] = None,
) -> FastAPI:
    # Missing AWS secrets raise here, before the server accepts traffic
    settings = settings or get_settings()

    application = FastAPI(
        title="Prompt Gateway",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger = logging.getLogger("prompt_gateway")

    allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]

    application.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    @application.middleware("http")
    async def logging_and_metrics_middleware(request: Request, call_next: Callable):
        start_time = time.perf_counter()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
        finally:
            duration = time.perf_counter() - start_time
            path = request.url.path
            method = request.method
            status = getattr(response, "status_code", 500)
            REQUEST_COUNT.labels(method=method, path=path, status=str(status)).inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration)
            logger.info(f"{method} {path} -> {status} in {duration:.3f}s")
        return response

    @application.get("/health")
    def health_check() -> dict:
        return {"status": "ok"}

    @application.get("/metrics")
    def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    application.state.inference_client = inference_client or BedrockInferenceClient(settings)
    application.include_router(prompt_router)
    return application
