"""
Data models for FundLedger application
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

FundId = str

DEFAULT_FUNDS: Tuple[FundId, ...] = ("fund1", "fund2")


class EntryKind(str, Enum):
    """Classification of an entry by the sign of its summed deltas"""
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Ratio:
    """Fraction of the gross amount that moves for a fund"""
    value: Decimal

    def delta(self, gross: Decimal) -> Decimal:
        return gross * self.value


@dataclass(frozen=True)
class Absolute:
    """Literal amount that moves for a fund, gross is ignored"""
    value: Decimal

    def delta(self, gross: Decimal) -> Decimal:
        return self.value


@dataclass(frozen=True)
class LedgerEntry:
    """Single recorded transaction; never mutated after creation"""
    timestamp: str  # display string, e.g. "2026/10/19 14:03:22"
    created_at: str  # ISO-8601 UTC instant, sortable
    gross: Mapping[FundId, Decimal]
    allocation: Mapping[FundId, Decimal]  # raw input, ratio or absolute
    delta: Mapping[FundId, Decimal]
    resulting_balance: Mapping[FundId, Decimal]
    kind: EntryKind
    note: str = ""

    def __post_init__(self):
        # read-only copies; undo subtracts delta, so it must not change
        for name in ("gross", "allocation", "delta", "resulting_balance"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))


@dataclass
class LedgerState:
    """Complete persisted ledger"""
    funds: List[FundId] = field(default_factory=lambda: list(DEFAULT_FUNDS))
    is_first_run: bool = True
    initial_amount: Dict[FundId, Decimal] = field(default_factory=dict)
    balance: Dict[FundId, Decimal] = field(default_factory=dict)
    history: List[LedgerEntry] = field(default_factory=list)  # newest first

    def __post_init__(self):
        for f in self.funds:
            self.initial_amount.setdefault(f, Decimal("0"))
            self.balance.setdefault(f, Decimal("0"))


class RecordStatus(Enum):
    RECORDED = "recorded"
    NOTHING_RECORDED = "nothing_recorded"


class UndoStatus(Enum):
    UNDONE = "undone"
    NOTHING_TO_UNDO = "nothing_to_undo"


@dataclass(frozen=True)
class RecordResult:
    status: RecordStatus
    entry: Optional[LedgerEntry] = None

    @property
    def recorded(self) -> bool:
        return self.status is RecordStatus.RECORDED


@dataclass(frozen=True)
class UndoResult:
    status: UndoStatus
    entry: Optional[LedgerEntry] = None

    @property
    def undone(self) -> bool:
        return self.status is UndoStatus.UNDONE
