"""Application composition layer for the command-line client.

``main`` wires settings, adapters, use cases and view models into runnable
commands without placing business logic in the CLI handlers.
"""
