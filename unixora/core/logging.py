"""Logging setup shared by the API server and the CLI."""

import logging
from typing import Optional

from unixora.config import get_settings


def configure_logging(level: Optional[str] = None) -> None:
    if level is None:
        level = get_settings().log_level
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
