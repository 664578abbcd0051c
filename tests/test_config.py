"""
test_config.py - State serialization and fund label loading
"""

import json
from decimal import Decimal

from config import (
    DEFAULT_LABELS,
    dict_to_state,
    dumps_state,
    get_default_state,
    get_fund_labels,
    loads_state,
    state_to_dict,
)
from models import EntryKind


class TestSerialization:

    def test_round_trip_preserves_state(self, funded_engine):
        funded_engine.record_transaction({"fund1": Decimal("300")}, {"fund1": Decimal("0.5")}, "工资")
        funded_engine.record_transaction({}, {"fund2": Decimal("-45.50")})
        restored = loads_state(dumps_state(funded_engine.state))
        assert restored == funded_engine.state

    def test_decimals_stored_as_strings(self, funded_engine):
        funded_engine.record_transaction({"fund1": Decimal("0.1")}, {"fund1": Decimal("1")})
        d = state_to_dict(funded_engine.state)
        assert d["balance"]["fund1"] == "1000.1"
        assert d["history"][0]["delta"]["fund1"] == "0.1"
        assert d["history"][0]["kind"] == "income"
        assert "version" not in d

    def test_missing_fields_use_defaults(self):
        state = dict_to_state({"balance": {"fund1": "12.5"}, "extra": 1})
        assert state.funds == ["fund1", "fund2"]
        assert state.is_first_run
        assert state.balance == {"fund1": Decimal("12.5"), "fund2": Decimal("0")}
        assert state.initial_amount == {"fund1": Decimal("0"), "fund2": Decimal("0")}
        assert state.history == []

    def test_entry_without_created_at(self):
        state = dict_to_state({
            "is_first_run": False,
            "history": [{"timestamp": "2025/1/2 10:00:00", "delta": {"fund1": "-3"}, "kind": "expense"}],
        })
        e = state.history[0]
        assert e.created_at == ""
        assert e.kind is EntryKind.EXPENSE
        assert e.delta == {"fund1": Decimal("-3"), "fund2": Decimal("0")}

    def test_default_state(self):
        state = get_default_state()
        assert state.is_first_run
        assert state.balance == {"fund1": Decimal("0"), "fund2": Decimal("0")}


class TestFundLabels:

    def test_defaults_without_file(self, isolated_home):
        assert get_fund_labels() == DEFAULT_LABELS

    def test_file_overrides(self, isolated_home):
        isolated_home.mkdir(parents=True, exist_ok=True)
        (isolated_home / "funds.json").write_text(json.dumps({"funds": {"fund1": "Alipay"}}), encoding="utf-8")
        labels = get_fund_labels()
        assert labels["fund1"] == "Alipay"
        assert labels["fund2"] == DEFAULT_LABELS["fund2"]

    def test_broken_file_falls_back(self, isolated_home):
        isolated_home.mkdir(parents=True, exist_ok=True)
        (isolated_home / "funds.json").write_text("{not json", encoding="utf-8")
        assert get_fund_labels() == DEFAULT_LABELS
