"""
Configuration and state serialization for FundLedger
"""
from __future__ import annotations
import json
import logging
import os
from decimal import Decimal
from typing import Dict, List

from models import DEFAULT_FUNDS, EntryKind, FundId, LedgerEntry, LedgerState
from utils import app_dir, safe_decimal

logger = logging.getLogger(__name__)

# storage identifiers
STORAGE_KEY = "accounting-storage"
DB_FILENAME = "AccountingDB.sqlite3"
DB_TABLE = "accounting"

DEFAULT_LABELS: Dict[FundId, str] = {"fund1": "Wallet", "fund2": "Bank card"}


def load_fund_labels(path: str) -> Dict[FundId, str]:
    """Load fund display names from JSON file: {"funds": {"fund1": "Alipay", ...}}"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as ex:
        logger.warning("could not read fund labels from %s: %s", path, ex)
        return {}
    funds = data.get("funds", {}) if isinstance(data, dict) else {}
    return {str(k): str(v) for k, v in funds.items()}


def get_fund_labels() -> Dict[FundId, str]:
    """Display names for the default funds, overridden by funds.json in the app directory"""
    labels = dict(DEFAULT_LABELS)
    labels.update(load_fund_labels(os.path.join(app_dir(), "funds.json")))
    return labels


def get_default_state() -> LedgerState:
    """Fresh ledger: zero amounts, empty history, setup mode"""
    return LedgerState(funds=list(DEFAULT_FUNDS))


def _amounts_to_dict(amounts: Dict[FundId, Decimal]) -> Dict[FundId, str]:
    return {f: str(v) for f, v in amounts.items()}


def _amounts_from_dict(d, funds: List[FundId]) -> Dict[FundId, Decimal]:
    d = d or {}
    return {f: safe_decimal(d.get(f, "0")) for f in funds}


def entry_to_dict(e: LedgerEntry) -> dict:
    return {
        "timestamp": e.timestamp,
        "created_at": e.created_at,
        "gross": _amounts_to_dict(e.gross),
        "allocation": _amounts_to_dict(e.allocation),
        "delta": _amounts_to_dict(e.delta),
        "resulting_balance": _amounts_to_dict(e.resulting_balance),
        "kind": e.kind.value,
        "note": e.note,
    }


def dict_to_entry(d: dict, funds: List[FundId]) -> LedgerEntry:
    return LedgerEntry(
        timestamp=str(d.get("timestamp", "")),
        created_at=str(d.get("created_at", "")),
        gross=_amounts_from_dict(d.get("gross"), funds),
        allocation=_amounts_from_dict(d.get("allocation"), funds),
        delta=_amounts_from_dict(d.get("delta"), funds),
        resulting_balance=_amounts_from_dict(d.get("resulting_balance"), funds),
        kind=EntryKind(d.get("kind", EntryKind.INCOME.value)),
        note=str(d.get("note") or ""),
    )


def state_to_dict(state: LedgerState) -> dict:
    """Convert LedgerState to a JSON-ready dictionary; decimals become strings"""
    return {
        "funds": list(state.funds),
        "is_first_run": state.is_first_run,
        "initial_amount": _amounts_to_dict(state.initial_amount),
        "balance": _amounts_to_dict(state.balance),
        "history": [entry_to_dict(e) for e in state.history],
    }


def dict_to_state(d: dict) -> LedgerState:
    """Convert dictionary from JSON to LedgerState; unknown fields are ignored"""
    funds = [str(f) for f in d.get("funds", DEFAULT_FUNDS)]
    return LedgerState(
        funds=funds,
        is_first_run=bool(d.get("is_first_run", True)),
        initial_amount=_amounts_from_dict(d.get("initial_amount"), funds),
        balance=_amounts_from_dict(d.get("balance"), funds),
        history=[dict_to_entry(e, funds) for e in d.get("history", [])],
    )


def dumps_state(state: LedgerState) -> str:
    return json.dumps(state_to_dict(state), ensure_ascii=False, indent=2)


def loads_state(text: str) -> LedgerState:
    return dict_to_state(json.loads(text))
