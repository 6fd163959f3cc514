"""
Logging setup.

Call ``configure_logging`` once when the application is built; modules log
through ``logging.getLogger(__name__)`` so everything lands under ``app``.
"""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HANDLER_NAME = "app-console"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single named stream handler to the ``app`` logger."""
    logger = logging.getLogger("app")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
