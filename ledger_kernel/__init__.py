"""
Ledger Kernel - double-entry posting and balance engine

A back-office accounting core with:
- Balanced header + line postings per transaction kind
- Per-currency multiply/divide conversion to the base currency
- Kind-specific commission strategies
- Atomic replace-on-edit of ledger lines
- Cash-book, running-balance and trial-balance queries
"""

__version__ = "0.1.0"
