from __future__ import annotations

import pytest

from schemas.pick_ledger import Ledger, LedgerIndex, Pick


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"symbol": "A", "price": 40, "metrics": {"price": 50}}, 50),
        ({"symbol": "A", "price": 40, "metrics": {"price": None}}, 40),
        ({"symbol": "A", "price": 40, "metrics": {"price": 0}}, 40),
        ({"symbol": "A", "price": 40, "metrics": {}}, 40),
        ({"symbol": "A", "price": 40}, 40),
        ({"symbol": "A"}, None),
        ({"symbol": "A", "price": 0, "metrics": {"price": 0}}, None),
    ],
)
def test_entry_price_resolution_order(payload, expected) -> None:
    assert Pick.model_validate(payload).entry_price() == expected


def test_unknown_pick_fields_round_trip() -> None:
    payload = {
        "symbol": "NVDA",
        "algorithm": "Alpha Predator",
        "timeframe": "7d",
        "price": 120.5,
        "score": 88,
        "pickHash": "abc123",
        "metrics": {"price": 120.5, "rsi": 61.2},
    }

    pick = Pick.model_validate(payload)

    assert pick.model_dump(by_alias=True, exclude_unset=True) == payload


def test_ledger_and_index_parse() -> None:
    ledger = Ledger.model_validate({"date": "2026-03-10", "picks": [{"symbol": "ABC"}]})
    index = LedgerIndex.model_validate([{"date": "2026-03-10", "picks": 1}])

    assert [pick.symbol for pick in ledger.picks] == ["ABC"]
    assert index.root[0].date == "2026-03-10"
