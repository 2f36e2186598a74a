"""
Orchestration components: shared runtime state and signal handling.
"""

from .shared_state import RuntimeState, TimeoutConstants
from .signal_handler import SignalHandler

__all__ = [
    "RuntimeState",
    "SignalHandler",
    "TimeoutConstants",
]
