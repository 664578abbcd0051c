"""
Business logic and computations for FundLedger
"""
from __future__ import annotations
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Union

from models import Absolute, EntryKind, FundId, LedgerEntry, Ratio
from utils import exact_arithmetic, to_decimal

RATIO_THRESHOLD = Decimal("1")

AllocationInput = Union[Ratio, Absolute, Decimal, int, float, str]


def interpret_allocation(raw) -> Union[Ratio, Absolute]:
    """
    Translate a legacy allocation number into a tagged allocation.
    Magnitude <= 1 is a ratio of the gross amount (so 1.0 means 100%, never "move 1");
    anything larger is a literal amount whose sign carries directly.
    """
    if isinstance(raw, (Ratio, Absolute)):
        return raw
    value = to_decimal(raw)
    if value.copy_abs() <= RATIO_THRESHOLD:
        return Ratio(value)
    return Absolute(value)


def raw_allocation(alloc: AllocationInput) -> Decimal:
    """Numeric value stored in an entry for an allocation"""
    if isinstance(alloc, (Ratio, Absolute)):
        return alloc.value
    return to_decimal(alloc)


def compute_delta(gross, alloc: AllocationInput) -> Decimal:
    """Signed amount applied to one fund's balance"""
    with exact_arithmetic():
        return interpret_allocation(alloc).delta(to_decimal(gross))


def compute_deltas(
    funds: Iterable[FundId],
    gross: Mapping[FundId, object],
    allocation: Mapping[FundId, AllocationInput],
) -> Dict[FundId, Decimal]:
    """Compute the delta for every fund; missing inputs count as zero"""
    return {
        f: compute_delta(gross.get(f, 0), allocation.get(f, 0))
        for f in funds
    }


def classify_kind(deltas: Mapping[FundId, Decimal]) -> EntryKind:
    """Income when the summed deltas are >= 0, else expense"""
    with exact_arithmetic():
        total = sum(deltas.values(), Decimal("0"))
    return EntryKind.INCOME if total >= 0 else EntryKind.EXPENSE


def is_all_zero(deltas: Mapping[FundId, Decimal]) -> bool:
    return all(d == 0 for d in deltas.values())


def is_meaningful_record(
    gross: Mapping[FundId, object],
    allocation: Mapping[FundId, AllocationInput],
) -> bool:
    """
    Caller-side admission policy for the record form.
    Submit only when some fund has an allocation magnitude > 1, or a nonzero
    gross amount paired with an allocation magnitude <= 1.
    Uses absolute values; older form revisions compared signed values.
    Tagged allocations are judged by their tag: a fixed amount counts when
    nonzero, a ratio needs a nonzero gross amount.
    """
    for f in set(gross) | set(allocation):
        alloc = interpret_allocation(allocation.get(f, 0))
        if isinstance(alloc, Absolute):
            if alloc.value != 0:
                return True
        elif to_decimal(gross.get(f, 0)) != 0:
            return True
    return False


def expected_balances(
    initial_amount: Mapping[FundId, Decimal],
    history: List[LedgerEntry],
) -> Dict[FundId, Decimal]:
    """Balances implied by initial amounts plus every applied delta"""
    out = {f: Decimal(v) for f, v in initial_amount.items()}
    with exact_arithmetic():
        for e in history:
            for f, d in e.delta.items():
                out[f] = out.get(f, Decimal("0")) + d
    return out


def fund_totals(history: List[LedgerEntry], funds: Iterable[FundId]) -> Dict[FundId, dict]:
    """
    Summarize history per fund.
    Returns dict mapping fund -> {income, expense, net, entries}
    """
    summary = {f: {"income": Decimal("0"), "expense": Decimal("0"), "net": Decimal("0"), "entries": 0}
               for f in funds}
    with exact_arithmetic():
        for e in history:
            for f, d in e.delta.items():
                if f not in summary or d == 0:
                    continue
                s = summary[f]
                if d > 0:
                    s["income"] += d
                else:
                    s["expense"] += -d
                s["net"] += d
                s["entries"] += 1
    return summary
