"""Process-wide logging setup."""

from __future__ import annotations

import logging
from typing import Optional

from grepbase.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once for CLI and server processes."""

    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # The OpenAI and Anthropic SDKs log every HTTP request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
