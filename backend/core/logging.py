import logging
from typing import Optional

from backend.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once. Later calls only adjust the level.
    """
    lvl = (level or settings.log_level or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(lvl)

    # uvicorn access lines are noisy next to per-frame logs
    logging.getLogger("uvicorn.access").setLevel(max(logging.WARNING, root.level))
