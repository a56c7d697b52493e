from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from prompt_gateway.core.errors import ChannelError
from prompt_gateway.core.settings import AppSettings
from prompt_gateway.services.inference_base import InferenceClient, StreamEvent


logger = logging.getLogger(__name__)


class BedrockInferenceClient(InferenceClient):
    """Inference client backed by the Bedrock runtime API.

    Built once at startup and shared by every request. The underlying boto3
    client is thread-safe and carries no per-request state.
    """

    def __init__(self, settings: AppSettings, client: Optional[Any] = None) -> None:
        self._model_id = settings.model_id
        self._client = client or boto3.client(
            "bedrock-runtime",
            region_name=settings.aws_region,
            endpoint_url=settings.aws_url,
            # No session token; static keys only
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            config=Config(
                connect_timeout=settings.bedrock_connect_timeout,
                read_timeout=settings.bedrock_read_timeout,
                retries={"max_attempts": settings.bedrock_max_attempts, "mode": "standard"},
            ),
        )

    @property
    def model_id(self) -> str:
        return self._model_id

    def invoke_once(self, payload: bytes) -> bytes:
        try:
            response = self._client.invoke_model(
                modelId=self._model_id,
                body=payload,
                contentType="application/json",
                accept="application/json",
            )
            return response["body"].read()
        except (ClientError, BotoCoreError) as exc:
            logger.error("invoke_model failed for %s: %s", self._model_id, exc)
            raise ChannelError(str(exc)) from exc

    def invoke_streaming(self, payload: bytes) -> Iterable[StreamEvent]:
        try:
            response = self._client.invoke_model_with_response_stream(
                modelId=self._model_id,
                body=payload,
                contentType="application/json",
                accept="application/json",
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("invoke_model_with_response_stream failed for %s: %s", self._model_id, exc)
            raise ChannelError(str(exc)) from exc
        return response["body"]
