"""
Logging module for the supervisor.
This module provides functionality to set up console and file logging.
"""

from .setup import setup_logging, level_for_verbosity

__all__ = ["setup_logging", "level_for_verbosity"]
