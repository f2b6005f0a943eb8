"""ViewModel package for UI state and command surfaces.

Call context:
    ``crowdfund/app/main.py`` and any rendering layer import concrete
    viewmodels from this package.

Dependencies:
    Modules in this package depend on domain types, use-case results and
    lightweight formatting helpers only. I/O adapters stay outside.

Responsibilities:
    - Hold per-screen state (current campaign, listing filter).
    - Transform typed domain snapshots into view-facing DTOs.
    - Drop stale responses after navigation.
"""
