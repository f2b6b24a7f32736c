"""Deterministic snapshot acceptance policy.

This module intentionally contains *no* payload parsing.  It only decides
whether a bulk-fetch snapshot may still be applied.
"""

from __future__ import annotations


def should_accept_snapshot(*, last_applied_sequence: int | None, incoming_sequence: int | None) -> bool:
    """Decide whether a snapshot should replace the collection.

    Policy:
    - Snapshots without a sequence (push-channel ``initial_data``) always apply.
    - Otherwise accept only if the incoming fetch was issued after the last
      applied one.  An older response that arrives late is stale.
    """
    if incoming_sequence is None or last_applied_sequence is None:
        return True
    return incoming_sequence > last_applied_sequence
