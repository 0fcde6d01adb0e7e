# cardreco/core/logging.py
import logging
import sys
from typing import Union

import colorlog

# Client libraries whose request-level chatter drowns the recommender logs
_NOISY_LOGGERS = ("pymongo", "motor", "httpx", "httpcore", "openai")

_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def resolve_level(level: Union[int, str, None], debug: bool = False) -> int:
    """LOG_LEVEL wins when set ("debug", "INFO", 20...); otherwise DEBUG flag -> DEBUG, else INFO."""
    if level is None or level == "":
        return logging.DEBUG if debug else logging.INFO
    if isinstance(level, int):
        return level
    if level.isdigit():
        return int(level)
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level=logging.INFO, app_name: str = "cardreco"):
    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(
        colorlog.ColoredFormatter(
            f"%(log_color)s%(asctime)s %(levelname)-8s {app_name} [%(name)s]%(reset)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=_LOG_COLORS,
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for name in ("uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
