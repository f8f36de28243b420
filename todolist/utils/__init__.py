"""
Utilities Module
================

Helper functions and utility classes.
"""

from todolist.utils.helpers import as_utc, epoch_millis, is_blank, utc_now

__all__ = ["as_utc", "epoch_millis", "is_blank", "utc_now"]
