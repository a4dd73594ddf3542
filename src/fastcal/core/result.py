# src/fastcal/core/result.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NoSolution:
    """
    The requested solar altitude is not reached on that day (polar day/night),
    or a fallback lacked its inputs.

    This is an expected outcome, returned as a value and never raised.
    """
    reason: str = ""

    def __bool__(self) -> bool:
        return False
