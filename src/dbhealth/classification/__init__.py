"""
Statement classification for the dbhealth package.

Recognizes diagnostic statements with configurable, cached rules.
"""

from .classifier import StatementClassifier
from .rules import DEFAULT_RULES

__all__ = [
    "DEFAULT_RULES",
    "StatementClassifier",
]
