"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (fullnode REST,
    suggestion proxy, and in-memory test doubles) used by use cases.

Dependencies:
    Network submodules depend on ``requests`` through ``http_client``.

Call context:
    Imported by ``crowdfund.app.main`` (runtime wiring) and by tests (doubles
    and transport-level behavior verification).
"""
