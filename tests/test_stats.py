from __future__ import annotations

from tokenview.models.token import TokenRecord
from tokenview.stats import TokenStats, compute_stats


def test_stats_sum_volume_and_pass_through_counter() -> None:
    records = (
        TokenRecord.model_validate({"token_address": "A", "volume_sol": "10.5"}),
        TokenRecord.model_validate({"token_address": "B", "volume_24h": 4}),
        TokenRecord.model_validate({"token_address": "C"}),
    )

    stats = compute_stats(records, update_count=7)

    assert stats == TokenStats(total_tokens=3, total_volume_sol=14.5, update_count=7)


def test_stats_for_empty_collection() -> None:
    stats = compute_stats(())

    assert stats.total_tokens == 0
    assert stats.total_volume_sol == 0
    assert stats.update_count == 0
