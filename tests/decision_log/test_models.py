"""
Tests for decision log data models.
"""

import pytest
from datetime import datetime, timezone

from decision_log import (
    AccountState,
    Action,
    DecisionRecord,
    ParseError,
    StatusFilter,
)
from tests.decision_log.factories import wire_record


class TestStatusFilter:
    """Tests for StatusFilter.parse."""

    @pytest.mark.parametrize("raw,expected", [
        ("all", StatusFilter.ALL),
        ("SUCCESS", StatusFilter.SUCCESS),
        (" failed ", StatusFilter.FAILED),
        (StatusFilter.FAILED, StatusFilter.FAILED),
    ])
    def test_parse(self, raw, expected):
        assert StatusFilter.parse(raw) is expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError, match="Allowed"):
            StatusFilter.parse("pending")


class TestAction:
    """Tests for Action."""

    def test_from_dict(self):
        action = Action.from_dict({
            "symbol": "BTCUSDT",
            "action": "open_short",
            "leverage": 10,
            "price": 42000.5,
            "success": True,
        })
        assert action.symbol == "BTCUSDT"
        assert action.leverage == 10.0
        assert action.error is None
        assert action.is_opening is True

    def test_close_is_not_opening(self):
        assert Action(symbol="ETHUSDT", action="close_long").is_opening is False

    def test_negative_price_rejected(self):
        with pytest.raises(ParseError) as exc_info:
            Action.from_dict({"symbol": "BTCUSDT", "action": "hold", "price": -1})
        assert exc_info.value.field_name == "price"

    def test_non_object_rejected(self):
        with pytest.raises(ParseError):
            Action.from_dict(["BTCUSDT"])


class TestAccountState:
    """Tests for AccountState."""

    def test_from_dict(self):
        state = AccountState.from_dict({
            "total_balance": 1000,
            "available_balance": 250.5,
            "margin_used_pct": 74.95,
            "position_count": 3,
        })
        assert state.available_balance == 250.5
        assert state.position_count == 3

    def test_margin_above_hundred_rejected(self):
        with pytest.raises(ParseError):
            AccountState.from_dict({"margin_used_pct": 100.1})

    def test_fractional_position_count_rejected(self):
        with pytest.raises(ParseError):
            AccountState.from_dict({"position_count": 1.5})


class TestDecisionRecord:
    """Tests for DecisionRecord parsing."""

    def test_from_dict_maps_wire_names(self):
        record = DecisionRecord.from_dict(
            wire_record(7, symbols=["BTCUSDT", "ETHUSDT"], cot_trace="Trend is up")
        )

        assert record.cycle_number == 7
        assert record.reasoning_trace == "Trend is up"
        assert record.action_count == 2
        assert record.symbols == ("BTCUSDT", "ETHUSDT")
        assert record.occurred_at == datetime(2026, 1, 1, 0, 7, tzinfo=timezone.utc)
        assert record.account_state.position_count == 2

    def test_optional_fields_default(self):
        record = DecisionRecord.from_dict({
            "cycle_number": 1,
            "timestamp": "2026-01-01T00:00:00Z",
            "success": False,
        })
        assert record.actions == ()
        assert record.account_state is None
        assert record.execution_log == ()
        assert record.reasoning_trace is None

    def test_empty_error_message_is_none(self):
        record = DecisionRecord.from_dict(wire_record(1, error_message=""))
        assert record.error_message is None

    def test_float_cycle_number_accepted_when_integral(self):
        record = DecisionRecord.from_dict(wire_record(1, cycle_number=3.0))
        assert record.cycle_number == 3

    def test_missing_cycle_number_rejected(self):
        data = wire_record(1)
        del data["cycle_number"]
        with pytest.raises(ParseError) as exc_info:
            DecisionRecord.from_dict(data)
        assert exc_info.value.field_name == "cycle_number"

    def test_unparsable_timestamp_rejected_with_cycle(self):
        with pytest.raises(ParseError) as exc_info:
            DecisionRecord.from_dict(wire_record(9, timestamp="last tuesday"))
        assert exc_info.value.field_name == "timestamp"
        assert exc_info.value.cycle_number == 9

    def test_invalid_nested_action_carries_cycle(self):
        data = wire_record(4)
        data["decisions"] = [{"symbol": "BTCUSDT", "action": "open_long", "leverage": "high"}]
        with pytest.raises(ParseError) as exc_info:
            DecisionRecord.from_dict(data)
        assert exc_info.value.cycle_number == 4
        assert exc_info.value.field_name == "leverage"

    def test_search_fields_are_lower_cased(self):
        record = DecisionRecord.from_dict(
            wire_record(12, symbols=["BTCUSDT"], cot_trace="Funding FLIPPED negative")
        )
        assert "12" in record.search_fields
        assert "btcusdt" in record.search_fields
        assert "funding flipped negative" in record.search_fields

    def test_to_dict_uses_wire_names(self):
        data = wire_record(5, symbols=["SOLUSDT"])
        record = DecisionRecord.from_dict(data)
        out = record.to_dict()

        assert out["cot_trace"] == data["cot_trace"]
        assert out["decisions"][0]["symbol"] == "SOLUSDT"
        assert out["timestamp"] == data["timestamp"]

    def test_records_are_immutable(self):
        record = DecisionRecord.from_dict(wire_record(1))
        with pytest.raises(AttributeError):
            record.success = False
