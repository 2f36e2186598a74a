"""
Command-line interface for dbhealth.
"""

from .main import build_parser, main_cli

__all__ = ["build_parser", "main_cli"]
