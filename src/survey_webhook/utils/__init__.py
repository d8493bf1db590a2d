"""Utility functions and helpers."""

from .logging import LogContext, setup_logging

__all__ = ["LogContext", "setup_logging"]
