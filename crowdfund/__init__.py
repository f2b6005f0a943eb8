"""Client-side access layer for the on-ledger crowdfunding contract."""

__version__ = "0.1.0"
