import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Configure the ``levee`` logger for command-line use."""
    logger = logging.getLogger("levee")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if any(getattr(h, "_levee_cli", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._levee_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
