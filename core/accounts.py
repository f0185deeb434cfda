"""In-memory account registry."""
import threading
from typing import Dict, List, Optional

from core.models import Account, Portfolio, Position
from utils.logging import get_logger


class AccountManager:
    """Thread-safe registry of accounts keyed by account id."""

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()
        self.logger = get_logger()

    def create_account(self, account_id: str, account_name: str) -> Account:
        account = Account(account_id=account_id, name=account_name)
        with self._lock:
            if account_id in self._accounts:
                self.logger.warning(f"Replacing existing account {account_id}")
            self._accounts[account_id] = account
        self.logger.debug(f"Created account {account_name} ({account_id})")
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(account_id)

    def get_all_accounts(self) -> List[Account]:
        with self._lock:
            return list(self._accounts.values())

    def remove_account(self, account_id: str) -> None:
        with self._lock:
            self._accounts.pop(account_id, None)

    def account_exists(self, account_id: str) -> bool:
        with self._lock:
            return account_id in self._accounts

    def add_position_to_account(self, account_id: str, position: Position) -> Position:
        account = self.get_account(account_id)
        if account is None:
            raise KeyError(f"Account not found: {account_id}")
        return account.portfolio.add_position(position)

    def get_account_portfolio(self, account_id: str) -> Optional[Portfolio]:
        account = self.get_account(account_id)
        return account.portfolio if account is not None else None
