"""
PocketPal - Source Package

A personal expense tracker: record spending events, then see rolling
totals for today, this week and this month, per-category breakdowns
and history.

DESIGN PRINCIPLES:
1. One local ledger, one writer
2. Reports are recomputed from raw rows, never cached
3. Calendar boundaries follow the local wall clock
4. Storage is swappable behind an async interface
"""

__version__ = "1.0.0"
__author__ = "PocketPal Team"
