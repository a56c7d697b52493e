from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from functools import lru_cache

class AppSettings(BaseSettings):
    # Required; startup fails if any of these is missing
    aws_access_key_id: str
    aws_secret_access_key: str
    aws_url: str

    aws_region: str = "eu-west-1"
    model_id: str = "amazon.titan-text-lite-v1:0:4k"

    # botocore client config; a single attempt means no retries
    bedrock_connect_timeout: float = 10.0
    bedrock_read_timeout: float = 60.0
    bedrock_max_attempts: int = 1

    allowed_origins: str = "http://localhost:5173"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        # Resolve to backend/prompt_gateway/.env regardless of current working directory
        env_file=str(Path(__file__).resolve().parents[1] / ".env"),
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
