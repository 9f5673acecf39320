"""Command line entry for grepbase."""

from __future__ import annotations

import uvicorn

from grepbase.api.main import create_app
from grepbase.core.config import settings
from grepbase.core.logging import configure_logging


def run_server() -> None:
    configure_logging()
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT, log_config=None)


def main() -> None:
    run_server()


if __name__ == "__main__":
    main()
