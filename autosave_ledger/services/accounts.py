"""Account service - read access and snapshot import"""

import logging
from typing import Iterable, List

from autosave_ledger.domain.exceptions import AccountNotFoundError
from autosave_ledger.domain.models import Account, Transaction
from autosave_ledger.domain.repositories import LedgerStore


class AccountService:
    def __init__(self, store: LedgerStore):
        self.store = store

    def list_accounts(self) -> List[Account]:
        return self.store.accounts.list()

    def get_account(self, account_id: int) -> Account:
        account = self.store.accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def get_account_transactions(self, account_id: int) -> List[Transaction]:
        """Transactions of one account, newest first"""
        self.get_account(account_id)
        return self.store.accounts.list_transactions(account_id)

    def import_accounts(self, accounts: Iterable[Account]) -> List[Account]:
        """
        Register account snapshots from the bank connection.

        Accounts already known by id are left untouched: once imported, an
        account's balance only moves through ledger operations.
        """
        imported = []
        with self.store.unit_of_work():
            for account in accounts:
                if account.id and self.store.accounts.get(account.id) is not None:
                    continue
                imported.append(self.store.accounts.add(account))

        logging.info(
            "Accounts imported",
            extra={"step": "accounts_imported", "count": len(imported)},
        )
        return imported
