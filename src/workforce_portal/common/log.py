from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(*, debug: bool = False, level: str | None = None) -> None:
    """Configure root logging once; later calls only adjust the level."""
    resolved = getattr(logging, (level or ("DEBUG" if debug else "INFO")).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    root.setLevel(resolved)
    logging.getLogger("workforce_portal").setLevel(resolved)
