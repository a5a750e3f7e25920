"""
Net Worth Tracker - Source Package

A personal net worth dashboard that aggregates linked accounts and
manually entered assets into summary cards, trend charts and
category breakdowns.

DESIGN PRINCIPLES:
1. Totals are always recomputed from the data at hand
2. Unknown enumerations fail loudly
3. Synthetic history is reproducible for any date
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Net Worth Tracker Team"
