"""Overlay settings, one module per ``DJANGO_ENV`` value."""
