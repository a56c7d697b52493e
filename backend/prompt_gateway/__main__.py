"""Prompt gateway entrypoint.

Example:
    python -m prompt_gateway --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import argparse

import uvicorn

from prompt_gateway.core.settings import get_settings
from prompt_gateway.main import create_app


def _parse_args(default_host: str, default_port: int) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Prompt gateway for Titan text models on Bedrock")
    p.add_argument("--host", default=default_host, help=f"Bind host (default: {default_host})")
    p.add_argument("--port", type=int, default=default_port, help=f"Bind port (default: {default_port})")
    p.add_argument("--log-level", default="info", help="uvicorn log level (default: info)")
    return p.parse_args()


def main() -> None:
    # Fails fast if AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY / AWS_URL are missing
    settings = get_settings()
    args = _parse_args(settings.host, settings.port)

    app = create_app(settings)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
