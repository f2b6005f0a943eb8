"""Use-case layer for campaign reads, listings and ledger writes.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving MVVM + Hexagonal boundaries.
"""
