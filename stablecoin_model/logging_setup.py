"""
Logging configuration for scripts and simulations.

Modules log through their own ``logging.getLogger(__name__)``; this only sets
the root level and format.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Set the root log level; unknown level names fall back to INFO."""
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)

    # matplotlib is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
