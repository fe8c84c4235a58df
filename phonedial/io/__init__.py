# file: phonedial/io/__init__.py
"""Output helpers: exports and deep links."""
