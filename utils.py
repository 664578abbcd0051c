"""
Utility functions for FundLedger application
"""
from __future__ import annotations
import os
from datetime import datetime, timezone
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    localcontext,
)
from typing import Optional, Tuple

DISPLAY_FORMAT = "%Y/%m/%d %H:%M:%S"

# sums and products of finite decimals fit, so nothing is ever rounded
EXACT_CONTEXT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
)


def exact_arithmetic():
    """Decimal context for ledger arithmetic; raises Inexact instead of rounding"""
    return localcontext(EXACT_CONTEXT)


def now_stamps(now: Optional[datetime] = None) -> Tuple[str, str]:
    """
    Return (display, instant) for an entry creation time.
    display is local wall-clock text; instant is ISO-8601 UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.astimezone()
    display = now.astimezone().strftime(DISPLAY_FORMAT)
    instant = now.astimezone(timezone.utc).isoformat()
    return display, instant


def safe_decimal(x, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """Convert user input to Decimal safely, returning default on error or non-finite values"""
    if isinstance(x, Decimal):
        d = x
    else:
        try:
            d = Decimal(str(x).strip())
        except (InvalidOperation, ValueError, TypeError):
            return default
    if not d.is_finite():
        return default
    return d


def to_decimal(x) -> Decimal:
    """Coerce a trusted numeric value (int, float, str, Decimal) to Decimal"""
    if isinstance(x, Decimal):
        return x
    if isinstance(x, float):
        # go through repr so 0.1 stays 0.1
        return Decimal(repr(x))
    return Decimal(x)


def format_amount(d: Decimal, signed: bool = False) -> str:
    """Format an amount with two decimals, optionally with an explicit + sign"""
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        q = d.quantize(Decimal("0.01"))
        if q == 0:
            q = abs(q)  # no "-0.00"
    if signed and q >= 0:
        return f"+{q}"
    return str(q)


def export_stamp(now: Optional[datetime] = None) -> str:
    """Compact local date/time used in generated export filenames"""
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def app_dir() -> str:
    """
    Get application data directory.
    FUND_LEDGER_HOME overrides the default ~/.fund_ledger.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("FUND_LEDGER_HOME") or os.path.join(os.path.expanduser("~"), ".fund_ledger")
    os.makedirs(path, exist_ok=True)
    return path
