"""Run the API server: ``python -m docqa``."""

from __future__ import annotations

import uvicorn

from docqa.config import settings
from docqa.logging_config import setup_logging


def main() -> None:
    setup_logging(settings.log_level)
    uvicorn.run("docqa.serving.app:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
