"""Utility modules for sitehook."""

from .logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
