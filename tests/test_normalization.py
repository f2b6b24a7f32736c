from __future__ import annotations

import math

import pytest

from tokenview.ingestion.normalize import (
    as_item_list,
    non_negative_or_zero,
    safe_float,
    safe_str,
    unwrap_token_list,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1.5", 1.5), (2, 2.0), ("", None), ("--", None), (None, None), ("abc", None), (True, None), (math.inf, None)],
)
def test_safe_float(value: object, expected: float | None) -> None:
    assert safe_float(value) == expected


def test_safe_float_rejects_nan() -> None:
    assert safe_float(float("nan")) is None


def test_safe_str_strips_and_drops_empty() -> None:
    assert safe_str("  abc ") == "abc"
    assert safe_str("   ") is None
    assert safe_str(None) is None
    assert safe_str(12) == "12"


def test_non_negative_or_zero() -> None:
    assert non_negative_or_zero("-2") == 0.0
    assert non_negative_or_zero("3") == 3.0
    assert non_negative_or_zero("x") is None


def test_as_item_list() -> None:
    assert as_item_list(None) == []
    assert as_item_list({"a": 1}) == [{"a": 1}]
    assert as_item_list([{"a": 1}, {"b": 2}]) == [{"a": 1}, {"b": 2}]
    assert as_item_list(("x",)) == ["x"]


def test_unwrap_bare_list() -> None:
    assert unwrap_token_list([{"token_address": "A"}]) == [{"token_address": "A"}]


def test_unwrap_flat_envelope() -> None:
    body = {"success": True, "data": [{"token_address": "A"}]}

    assert unwrap_token_list(body) == [{"token_address": "A"}]


def test_unwrap_nested_envelope() -> None:
    body = {
        "success": True,
        "data": {"data": [{"token_address": "A"}, {"token_address": "B"}], "pagination": {"page": 1}},
    }

    assert unwrap_token_list(body) == [{"token_address": "A"}, {"token_address": "B"}]


def test_unwrap_first_array_valued_field() -> None:
    body = {"ok": True, "result": {"meta": {"n": 1}, "tokens": [{"token_address": "A"}]}}

    assert unwrap_token_list(body) == [{"token_address": "A"}]


def test_unwrap_empty_list_is_a_valid_result() -> None:
    assert unwrap_token_list({"data": {"data": []}}) == []


@pytest.mark.parametrize("body", [None, "text", 5, {"data": None}, {"data": {"data": {"deep": [1]}}}])
def test_unwrap_returns_none_without_array(body: object) -> None:
    assert unwrap_token_list(body) is None
