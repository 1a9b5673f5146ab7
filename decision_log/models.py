"""
Decision Log - Data Models.

============================================================
PURPOSE
============================================================
Typed, immutable representations of decision cycles as
served by the trading backend.

- DecisionRecord: one decision-making cycle
- Action: one action taken within a cycle
- AccountState: account snapshot after the cycle
- StatusFilter / LoadStatus / EmptyReason enums

============================================================
WIRE FORMAT
============================================================
Records arrive as JSON objects with snake_case keys:

    cycle_number, timestamp, success, input_prompt,
    cot_trace, decisions, account_state, execution_log,
    error_message

The reasoning trace travels as "cot_trace" and the action
list as "decisions". Both names are kept on the wire and
mapped to reasoning_trace / actions here.

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable once fetched (frozen dataclasses, tuples)
- Validation happens once, at construction from the wire
- Search fields are lower-cased once, not per keystroke

============================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.clock import from_iso8601

from .exceptions import ParseError


# =============================================================
# ENUMS
# =============================================================

class StatusFilter(str, Enum):
    """Success/failure selector applied to decision cycles."""
    ALL = "all"
    SUCCESS = "success"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: "StatusFilter | str") -> "StatusFilter":
        """Accept an enum member or its (case-insensitive) value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown status filter '{value}'. Allowed: {allowed}")


class LoadStatus(str, Enum):
    """Load status of a subject's record set."""
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class EmptyReason(str, Enum):
    """Why a page has nothing to show."""
    NO_DECISIONS = "no_decisions"  # Subject has no records at all
    NO_MATCHES = "no_matches"      # Active filters excluded everything


# =============================================================
# FIELD HELPERS
# =============================================================

def _number(data: Dict[str, Any], key: str, default: float = 0.0) -> float:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"Field '{key}' must be a number", field_name=key)
    return float(value)


def _non_negative(data: Dict[str, Any], key: str) -> float:
    value = _number(data, key)
    if value < 0:
        raise ParseError(f"Field '{key}' must be >= 0, got {value}", field_name=key)
    return value


def _boolean(data: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ParseError(f"Field '{key}' must be a boolean", field_name=key)
    return value


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(f"Field '{key}' must be a string", field_name=key)
    return value


def _optional_list(data: Dict[str, Any], key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"Field '{key}' must be a list", field_name=key)
    return value


def _require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ParseError(f"{what} must be an object, got {type(value).__name__}")
    return value


# =============================================================
# ACTION
# =============================================================

@dataclass(frozen=True)
class Action:
    """One action taken during a decision cycle."""
    symbol: str
    action: str
    leverage: float = 0.0
    price: float = 0.0
    success: bool = False
    error: Optional[str] = None

    @property
    def is_opening(self) -> bool:
        """True for position-opening actions (open_long, open_short, ...)."""
        return "open" in self.action.lower()

    @classmethod
    def from_dict(cls, data: Any) -> "Action":
        data = _require_mapping(data, "Action")
        return cls(
            symbol=_optional_str(data, "symbol") or "",
            action=_optional_str(data, "action") or "",
            leverage=_non_negative(data, "leverage"),
            price=_non_negative(data, "price"),
            success=_boolean(data, "success"),
            error=_optional_str(data, "error") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "action": self.action,
            "leverage": self.leverage,
            "price": self.price,
            "success": self.success,
            "error": self.error,
        }


# =============================================================
# ACCOUNT STATE
# =============================================================

@dataclass(frozen=True)
class AccountState:
    """Account snapshot recorded at the end of a cycle."""
    total_balance: float = 0.0
    available_balance: float = 0.0
    margin_used_pct: float = 0.0
    position_count: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "AccountState":
        data = _require_mapping(data, "Account state")

        margin = _number(data, "margin_used_pct")
        if not 0 <= margin <= 100:
            raise ParseError(
                f"Field 'margin_used_pct' must be within [0, 100], got {margin}",
                field_name="margin_used_pct",
            )

        positions = _non_negative(data, "position_count")
        if not float(positions).is_integer():
            raise ParseError(
                "Field 'position_count' must be an integer",
                field_name="position_count",
            )

        return cls(
            total_balance=_number(data, "total_balance"),
            available_balance=_number(data, "available_balance"),
            margin_used_pct=margin,
            position_count=int(positions),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_balance": self.total_balance,
            "available_balance": self.available_balance,
            "margin_used_pct": self.margin_used_pct,
            "position_count": self.position_count,
        }


# =============================================================
# DECISION RECORD
# =============================================================

@dataclass(frozen=True)
class DecisionRecord:
    """
    One decision-making cycle of the automated trader.

    cycle_number is the identity key: unique within one
    subject's record set and never reused across refreshes.
    """
    cycle_number: int
    timestamp: str
    occurred_at: datetime
    success: bool
    input_prompt: Optional[str] = None
    reasoning_trace: Optional[str] = None
    actions: Tuple[Action, ...] = ()
    account_state: Optional[AccountState] = None
    execution_log: Tuple[str, ...] = ()
    error_message: Optional[str] = None

    # Lower-cased searchable fields, computed once
    search_fields: Tuple[str, ...] = field(
        init=False, repr=False, compare=False, default=()
    )

    def __post_init__(self) -> None:
        fields = [str(self.cycle_number), self.timestamp.lower()]
        fields.extend(a.symbol.lower() for a in self.actions if a.symbol)
        if self.reasoning_trace:
            fields.append(self.reasoning_trace.lower())
        if self.input_prompt:
            fields.append(self.input_prompt.lower())
        object.__setattr__(self, "search_fields", tuple(fields))

    @property
    def action_count(self) -> int:
        return len(self.actions)

    @property
    def symbols(self) -> Tuple[str, ...]:
        """Distinct action symbols in first-appearance order."""
        seen = []
        for action in self.actions:
            if action.symbol and action.symbol not in seen:
                seen.append(action.symbol)
        return tuple(seen)

    @classmethod
    def from_dict(cls, data: Any) -> "DecisionRecord":
        """
        Build a record from its wire representation.

        Args:
            data: Decoded JSON object

        Returns:
            Validated DecisionRecord

        Raises:
            ParseError: On missing/invalid fields or an unparsable timestamp
        """
        data = _require_mapping(data, "Decision record")

        cycle_number = data.get("cycle_number")
        if isinstance(cycle_number, float) and cycle_number.is_integer():
            cycle_number = int(cycle_number)
        if isinstance(cycle_number, bool) or not isinstance(cycle_number, int):
            raise ParseError(
                "Field 'cycle_number' must be an integer",
                field_name="cycle_number",
            )

        try:
            timestamp = data.get("timestamp")
            if not isinstance(timestamp, str):
                raise ParseError("Field 'timestamp' must be a string", field_name="timestamp")
            try:
                occurred_at = from_iso8601(timestamp)
            except ValueError as e:
                raise ParseError(
                    f"Invalid timestamp '{timestamp}': {e}",
                    field_name="timestamp",
                )

            actions = tuple(
                Action.from_dict(item) for item in _optional_list(data, "decisions")
            )

            account_state = None
            if data.get("account_state") is not None:
                account_state = AccountState.from_dict(data["account_state"])

            execution_log = []
            for line in _optional_list(data, "execution_log"):
                if not isinstance(line, str):
                    raise ParseError(
                        "Entries of 'execution_log' must be strings",
                        field_name="execution_log",
                    )
                execution_log.append(line)

            return cls(
                cycle_number=cycle_number,
                timestamp=timestamp,
                occurred_at=occurred_at,
                success=_boolean(data, "success"),
                input_prompt=_optional_str(data, "input_prompt"),
                reasoning_trace=_optional_str(data, "cot_trace"),
                actions=actions,
                account_state=account_state,
                execution_log=tuple(execution_log),
                error_message=_optional_str(data, "error_message") or None,
            )
        except ParseError as e:
            raise ParseError(
                e.message,
                field_name=e.field_name,
                cycle_number=cycle_number,
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the wire representation."""
        return {
            "cycle_number": self.cycle_number,
            "timestamp": self.timestamp,
            "success": self.success,
            "input_prompt": self.input_prompt,
            "cot_trace": self.reasoning_trace,
            "decisions": [a.to_dict() for a in self.actions],
            "account_state": self.account_state.to_dict() if self.account_state else None,
            "execution_log": list(self.execution_log),
            "error_message": self.error_message,
        }
