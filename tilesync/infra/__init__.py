"""Infrastructure helpers (logging)."""

from .logging import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
