"""
Anomaly detection for the dbhealth package.
"""

from .evaluator import ThresholdEvaluator

__all__ = [
    "ThresholdEvaluator",
]
