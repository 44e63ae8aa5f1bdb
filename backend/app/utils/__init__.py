"""
Utility functions for KidLedger.

This package contains:
- datetime_utils: UTC timestamps and the month boundary used by the dashboard
- decimal_utils: Money parsing, rounding and formatting (NUMERIC(10, 2))
"""
