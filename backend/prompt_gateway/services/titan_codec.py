"""Request/response schemas for Amazon Titan text models on Bedrock.

The wire format is camelCase JSON:

    request:  {"inputText": ..., "textGenerationConfig": {"temperature": ..., "topP": ...,
               "maxTokenCount": ..., "stopSequences": [...]}}
    response: {"inputTextTokenCount": ..., "results": [{"tokenCount": ..., "outputText": ...,
               "completionReason": ...}]}

The same response schema is used for the single response body and for each
streamed chunk.
"""

from __future__ import annotations

from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticSerializationError

from prompt_gateway.core.errors import DecodingError, EmptyResultError, EncodingError


class _TitanModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TextGenerationConfig(_TitanModel):
    temperature: float = 0.0
    top_p: float = 0.0
    max_token_count: int = 100
    stop_sequences: Tuple[str] = ("|",)


class TitanRequest(_TitanModel):
    input_text: str
    text_generation_config: TextGenerationConfig = Field(default_factory=TextGenerationConfig)

    @classmethod
    def for_prompt(cls, prompt: str) -> TitanRequest:
        # Sampling config is fixed; callers only ever supply the prompt
        return cls(input_text=prompt)


class TitanTextResult(_TitanModel):
    model_config = ConfigDict(strict=True)

    token_count: int
    output_text: str
    completion_reason: str


class TitanResponse(_TitanModel):
    model_config = ConfigDict(strict=True)

    input_text_token_count: int
    results: List[TitanTextResult]


def encode(prompt: str) -> bytes:
    try:
        request = TitanRequest.for_prompt(prompt)
        return request.model_dump_json(by_alias=True).encode("utf-8")
    except (ValidationError, PydanticSerializationError, UnicodeEncodeError) as exc:
        raise EncodingError(f"Unable to serialize prompt: {exc}") from exc


def decode(raw: bytes) -> TitanResponse:
    try:
        return TitanResponse.model_validate_json(raw)
    except ValidationError as exc:
        raise DecodingError(f"Unable to deserialize response body ({exc.error_count()} error(s))") from exc


def first_text(result: TitanResponse) -> str:
    if not result.results:
        raise EmptyResultError("Response carried no results")
    return result.results[0].output_text
