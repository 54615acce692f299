import logging
import sys
from typing import Optional

from scriptboard.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once for the API process.

    Modules only ever call logging.getLogger(__name__); handlers live here.
    """
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if any(getattr(h, "_scriptboard", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._scriptboard = True
    root.addHandler(handler)

    # uvicorn access logs are noisy during autosave bursts
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
