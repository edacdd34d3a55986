"""
                Hotel Orders Backend

Order tracking for a single-location hotel/restaurant billing desk:
order ingestion, completed-order totals, a nightly total SMS to the
operator and a scheduled reset of the day's completed orders.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
