"""State/store layer.

This package is the single source of truth for how incoming data from
bulk fetches and push-channel events is merged into one consistent token
collection.
"""
