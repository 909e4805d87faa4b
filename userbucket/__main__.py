"""Run the service with uvicorn: ``python -m userbucket``."""

from __future__ import annotations

import uvicorn

from userbucket.app import create_app
from userbucket.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
