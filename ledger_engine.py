"""
Ledger engine: owns balances and history and applies every mutation
"""
from __future__ import annotations
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Mapping, Optional

from models import (
    FundId,
    LedgerEntry,
    LedgerState,
    RecordResult,
    RecordStatus,
    UndoResult,
    UndoStatus,
)
from computations import (
    AllocationInput,
    classify_kind,
    compute_deltas,
    expected_balances,
    is_all_zero,
    raw_allocation,
)
from exporters import render_ledger_text
from utils import exact_arithmetic, now_stamps, to_decimal

logger = logging.getLogger(__name__)

Listener = Callable[["LedgerEngine"], None]


class LedgerEngine:
    """
    Single owner of a LedgerState.

    Balances always equal initial amount plus the sum of the deltas in history.
    Every operation is synchronous; listeners are notified after each change
    (the persistence layer subscribes one to mirror state to storage).
    """

    def __init__(self, state: Optional[LedgerState] = None, clock: Optional[Callable[[], datetime]] = None):
        self.state = state if state is not None else LedgerState()
        self._clock = clock
        self._listeners: List[Listener] = []

    # ---------- Queries ----------
    @property
    def funds(self) -> List[FundId]:
        return list(self.state.funds)

    @property
    def is_first_run(self) -> bool:
        return self.state.is_first_run

    @property
    def balance(self) -> Dict[FundId, Decimal]:
        return dict(self.state.balance)

    @property
    def initial_amount(self) -> Dict[FundId, Decimal]:
        return dict(self.state.initial_amount)

    @property
    def history(self) -> List[LedgerEntry]:
        return list(self.state.history)

    def is_consistent(self) -> bool:
        """Check balance == initial amount + sum of history deltas for every fund"""
        expected = expected_balances(self.state.initial_amount, self.state.history)
        return all(self.state.balance[f] == expected.get(f, Decimal("0")) for f in self.state.funds)

    # ---------- Listeners ----------
    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _changed(self) -> None:
        for listener in self._listeners:
            listener(self)

    # ---------- Mutations ----------
    def set_initial_amounts(self, new_initial: Mapping[FundId, object]) -> None:
        """
        Replace the starting balance of each given fund.
        The running balance shifts by exactly the change, so already applied
        deltas keep their meaning. Funds not in the map are left alone.
        """
        with exact_arithmetic():
            for f in self.state.funds:
                if f not in new_initial:
                    continue
                new = to_decimal(new_initial[f])
                diff = new - self.state.initial_amount[f]
                self.state.initial_amount[f] = new
                self.state.balance[f] += diff
        logger.debug("initial amounts set: %s", self.state.initial_amount)
        self._changed()

    def complete_setup(self, new_initial: Mapping[FundId, object]) -> None:
        """Confirm initial amounts and leave setup mode"""
        self.state.is_first_run = False
        self.set_initial_amounts(new_initial)

    def reset_to_setup(self) -> None:
        """
        Return to setup mode.
        Initial amounts, balances and history are kept; this only gates what
        the form shows.
        """
        self.state.is_first_run = True
        logger.debug("ledger returned to setup mode")
        self._changed()

    def record_transaction(
        self,
        gross: Mapping[FundId, object],
        allocation: Mapping[FundId, AllocationInput],
        note: str = "",
    ) -> RecordResult:
        """
        Apply one transaction.
        Per fund, an allocation with magnitude <= 1 takes that fraction of the
        gross amount, a larger one moves that literal amount. If every delta is
        zero nothing is stored and NOTHING_RECORDED is returned.
        """
        funds = self.state.funds
        deltas = compute_deltas(funds, gross, allocation)
        if is_all_zero(deltas):
            logger.debug("record skipped, all deltas zero")
            return RecordResult(RecordStatus.NOTHING_RECORDED)

        with exact_arithmetic():
            for f in funds:
                self.state.balance[f] += deltas[f]

        display, instant = now_stamps(self._clock() if self._clock else None)
        entry = LedgerEntry(
            timestamp=display,
            created_at=instant,
            gross={f: to_decimal(gross.get(f, 0)) for f in funds},
            allocation={f: raw_allocation(allocation.get(f, 0)) for f in funds},
            delta=deltas,
            resulting_balance=dict(self.state.balance),
            kind=classify_kind(deltas),
            note=note or "",
        )
        self.state.history.insert(0, entry)
        logger.debug("recorded %s entry: %s", entry.kind.value, deltas)
        self._changed()
        return RecordResult(RecordStatus.RECORDED, entry)

    def undo_last(self) -> UndoResult:
        """Remove the newest entry and subtract its deltas"""
        if not self.state.history:
            return UndoResult(UndoStatus.NOTHING_TO_UNDO)
        entry = self.state.history.pop(0)
        with exact_arithmetic():
            for f, d in entry.delta.items():
                if f in self.state.balance:
                    self.state.balance[f] -= d
        logger.debug("undid entry from %s", entry.timestamp)
        self._changed()
        return UndoResult(UndoStatus.UNDONE, entry)

    # ---------- Export ----------
    def export_ledger(self, labels: Optional[Mapping[FundId, str]] = None) -> str:
        return render_ledger_text(self.state, labels)
