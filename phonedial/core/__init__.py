# file: phonedial/core/__init__.py
"""Parsing, resolution, formatting and local-time reporting."""
