"""
Utility helpers for shared packages.
"""

from .time import as_utc, utc_now

__all__ = [
    "as_utc",
    "utc_now",
]
