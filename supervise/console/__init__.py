"""
This module initializes the console package, exposing command-line parsing
and the usage text of the supervise command.
"""

from .process import CommandLine, parse_arguments, parse_signal
from .handler import print_usage

__all__ = ["CommandLine", "parse_arguments", "parse_signal", "print_usage"]
