"""Process launcher: serves the FastAPI factory under uvicorn.

``PORT``, ``HOST`` and ``UVICORN_WORKERS`` tune the listener. ``DEBUG`` pins a
single worker and raises uvicorn's log level.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

import uvicorn

from text_extraction.config import parse_bool

APP_FACTORY = "text_extraction.main:create_app"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080


def worker_count(env: Mapping[str, str] = os.environ) -> int:
    raw = (env.get("UVICORN_WORKERS") or "").strip()
    if raw.isdigit() and int(raw) > 0:
        return int(raw)
    return max(1, os.cpu_count() or 1)


def uvicorn_options(env: Mapping[str, str] = os.environ) -> dict[str, Any]:
    debug = parse_bool(env.get("DEBUG"))
    return {
        "host": env.get("HOST") or DEFAULT_HOST,
        "port": int(env.get("PORT") or DEFAULT_PORT),
        "factory": True,
        "workers": 1 if debug else worker_count(env),
        "log_level": "debug" if debug else "info",
        # Hosting platforms terminate TLS in front of the container.
        "proxy_headers": True,
        "lifespan": "on",
    }


def main() -> None:
    uvicorn.run(os.getenv("FASTAPI_APP") or APP_FACTORY, **uvicorn_options())


if __name__ == "__main__":  # pragma: no cover
    main()
