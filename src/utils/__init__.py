"""
Utilities Module
"""
from .dates import month_key, shift_months

__all__ = ["month_key", "shift_months"]
