"""
conftest.py - Shared pytest fixtures for FundLedger tests
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from ledger_engine import LedgerEngine
from models import LedgerState


FIXED_NOW = datetime(2026, 10, 19, 6, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """Fresh engine in setup mode with a fixed clock."""
    return LedgerEngine(LedgerState(), clock=lambda: FIXED_NOW)


@pytest.fixture
def funded_engine(engine):
    """Engine set up with fund1=1000, fund2=500."""
    engine.complete_setup({"fund1": Decimal("1000"), "fund2": Decimal("500")})
    return engine


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Keep app data out of the real home directory."""
    monkeypatch.setenv("FUND_LEDGER_HOME", str(tmp_path / "home"))
    return tmp_path / "home"
