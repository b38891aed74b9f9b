import logging

from stridehr.core.config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    level_name = (level or get_settings().LOG_LEVEL).upper()
    lvl = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger("stridehr")
    logger.setLevel(lvl)

    # Avoid duplicate console handlers
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)
    for h in logger.handlers:
        h.setLevel(lvl)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger("stridehr")
    return base.getChild(name) if name else base

logger = setup_logging()
