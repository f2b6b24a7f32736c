"""Ingestion layer.

This package contains adapters that turn bulk-fetch responses and
push-channel messages into normalized events for the reconciler.
"""

__all__: list[str] = []
