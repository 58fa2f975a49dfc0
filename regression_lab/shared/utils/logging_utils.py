"""
Logging helpers for the regression lab.

Handlers and levels come from settings.LOGGING; modules only ask for a
named logger here.
"""
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)
