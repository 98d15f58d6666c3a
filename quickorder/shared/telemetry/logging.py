"""Process-wide logging setup."""

import logging
import sys

from quickorder.core.config import Settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings) -> None:
    """Log to stdout at DEBUG when settings.debug is set, INFO otherwise.

    Access logs from uvicorn stay at WARNING so per-request lines come from
    the request-id middleware only.
    """
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
