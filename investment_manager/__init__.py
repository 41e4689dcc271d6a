"""
Investment Manager - Source Package

A personal-finance dashboard core: budget tracking, account balances,
a simulated dividend portfolio and a high-yield security screener.

DESIGN PRINCIPLES:
1. The in-memory state is the source of truth
2. Saves are fire-and-forget and never break the UI
3. Bad input degrades to zero, it never crashes a view
4. Every change is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Investment Manager Team"
