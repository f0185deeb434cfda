"""Tests for the account registry."""
import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.accounts import AccountManager
from core.models import Position, Security


@pytest.fixture
def manager():
    return AccountManager()


class TestAccountManager:

    def test_create_and_get(self, manager):
        account = manager.create_account("ACC001", "Demo Account")
        assert manager.get_account("ACC001") is account
        assert manager.account_exists("ACC001")
        assert account.name == "Demo Account"

    def test_unknown_account(self, manager):
        assert manager.get_account("NOPE") is None
        assert manager.get_account_portfolio("NOPE") is None
        assert not manager.account_exists("NOPE")

    def test_get_all_accounts(self, manager):
        manager.create_account("A", "First")
        manager.create_account("B", "Second")
        assert {a.account_id for a in manager.get_all_accounts()} == {"A", "B"}

    def test_remove_account(self, manager):
        manager.create_account("A", "First")
        manager.remove_account("A")
        manager.remove_account("A")
        assert not manager.account_exists("A")

    def test_add_position_merges_into_portfolio(self, manager):
        manager.create_account("A", "First")
        manager.add_position_to_account("A", Position(Security.stock("AAPL"), Decimal("10")))
        manager.add_position_to_account("A", Position(Security.stock("AAPL"), Decimal("5")))

        portfolio = manager.get_account_portfolio("A")
        assert len(portfolio) == 1
        assert portfolio.get_position(Security.stock("AAPL")).quantity == Decimal("15")

    def test_add_position_to_missing_account(self, manager):
        with pytest.raises(KeyError):
            manager.add_position_to_account("NOPE", Position(Security.stock("AAPL"), Decimal("1")))
