"""
Utilities Module
================

Helper functions and utility classes.
"""

from app.utils.helpers import format_datetime, from_epoch_ms, utc_now

__all__ = ["format_datetime", "from_epoch_ms", "utc_now"]
