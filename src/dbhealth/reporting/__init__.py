"""
Output for the dbhealth package: JSON records and per-cycle summaries.
"""

from .serializer import RecordSerializer, to_jsonable
from .summary import SummaryReporter

__all__ = [
    "RecordSerializer",
    "SummaryReporter",
    "to_jsonable",
]
