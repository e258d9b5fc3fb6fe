"""Business logic for the notification ledger.

Notifications are append-only: the workflow adds and resolves them,
readers only flip the ``read`` flag.
"""
