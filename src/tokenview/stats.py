"""Summary metrics derived from a store snapshot."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from tokenview.models.token import TokenRecord


class TokenStats(BaseModel):
    """Header statistics for the token view.

    ``update_count`` is owned by the event driver and passed through
    unchanged.
    """

    model_config = ConfigDict(frozen=True)

    total_tokens: int = 0
    total_volume_sol: float = 0.0
    update_count: int = 0


def compute_stats(records: Sequence[TokenRecord], update_count: int = 0) -> TokenStats:
    return TokenStats(
        total_tokens=len(records),
        total_volume_sol=sum(record.volume_sol for record in records),
        update_count=update_count,
    )
