from __future__ import annotations

import logging
import sys
from typing import Optional


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # httpx logs every request line at INFO; keep it for debug sessions only.
    logging.getLogger("httpx").setLevel(logging.WARNING if log_level != "DEBUG" else logging.DEBUG)
