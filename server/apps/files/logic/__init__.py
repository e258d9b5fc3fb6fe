"""Business logic layer for files app.

This package contains all business logic for team files:
- ``lifecycle``: which action is valid from which status, and for whom
- ``workflow``: create/edit/delete, confirm, approve and reject
- ``queries``: read-only snapshots for the presentation layer

All business logic should be implemented here, separate from
models (data layer) and infrastructure (upload decoding helpers).
"""
