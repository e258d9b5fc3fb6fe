"""Infrastructure layer for files app.

Helpers standing in for the upload decoder: they turn a submitted name
and text content into the metadata the workflow stores.

Keep infrastructure concerns separate from business logic.
"""
