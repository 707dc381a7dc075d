import logging

_ICONS = {"SUCCESS": "✓", "WARNING": "⚠", "ERROR": "✗"}
_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once per process (server start or CLI run).
    """
    logging.basicConfig(
        level=_LEVELS.get(level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log(module: str, message: str, level: str = "INFO", exc_info: bool = False):
    """
    Consistent logging helper.
    """
    icon = _ICONS.get(level, "ℹ")
    logger = logging.getLogger(f"coachnudge.{module}")
    logger.log(_LEVELS.get(level, logging.INFO), f"[{module}] {icon} {message}", exc_info=exc_info)
