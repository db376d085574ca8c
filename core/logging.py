import logging

from core.config import get_settings

_LEVEL = get_settings().log_level

_formatter = logging.Formatter(
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_logger = logging.getLogger("rx_writer")
_logger.setLevel(_LEVEL)
if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter)
    _logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return _logger.getChild(name)
