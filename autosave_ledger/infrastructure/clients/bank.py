"""Bank API HTTP client for fetching account snapshots"""

import httpx
from datetime import date
from typing import List, Optional
from autosave_ledger.domain.models import Account, Transaction
from autosave_ledger.domain.exceptions import BankAPIError
from autosave_ledger.config import settings
from autosave_ledger.infrastructure.observability.metrics import bank_fetch_failures_counter


class BankClient:
    """Client for the bank-connection snapshot API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.bank_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_accounts(self, bank_id: str) -> List[Account]:
        """
        Fetch accounts held at one bank, each with its recent transactions.

        Raises:
            BankAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/bank/accounts",
                    params={"bank_id": bank_id},
                )
                response.raise_for_status()
                data = response.json()

                return [
                    Account(
                        id=acc["id"],
                        bank_id=acc.get("bank_id", bank_id),
                        number=acc["number"],
                        balance_cents=acc["balance_cents"],
                        transactions=[
                            Transaction(
                                id=txn["id"],
                                date=date.fromisoformat(txn["date"]),
                                description=txn["description"],
                                amount_cents=txn["amount_cents"],
                                type=txn["type"],
                                category=txn.get("category"),
                                sender=txn.get("sender"),
                            )
                            for txn in acc.get("transactions", [])
                        ],
                    )
                    for acc in data.get("accounts", [])
                ]

            except httpx.TimeoutException as e:
                bank_fetch_failures_counter.inc()
                raise BankAPIError(f"Bank API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                bank_fetch_failures_counter.inc()
                raise BankAPIError(f"Bank API error: {e.response.status_code}") from e
            except (KeyError, ValueError, TypeError) as e:
                bank_fetch_failures_counter.inc()
                raise BankAPIError(f"Invalid account data from bank: {e}") from e
