from typing import Dict, Iterator, Optional

from amount import Amount
from errors import DuplicateTransactionId
from models import ClientAccount, DisputeStatus, HistoryEntry, TransactionType


class TransactionHistory:
    """
    Every accepted deposit and withdrawal, keyed by transaction id.
    Entries are never removed so a dispute can refer back to any earlier transaction.
    """

    def __init__(self):
        self._entries: Dict[int, HistoryEntry] = {}

    def record(self, transaction_id: int, client_id: int, amount: Amount, transaction_type: TransactionType) -> HistoryEntry:
        if transaction_id in self._entries:
            raise DuplicateTransactionId(transaction_id)
        entry = HistoryEntry(client_id=client_id, amount=amount, transaction_type=transaction_type)
        self._entries[transaction_id] = entry
        return entry

    def get(self, transaction_id: int) -> Optional[HistoryEntry]:
        """Retrieve stored transaction by ID."""
        return self._entries.get(transaction_id)

    def set_status(self, transaction_id: int, status: DisputeStatus) -> None:
        """Caller has already validated the transition."""
        self._entries[transaction_id].status = status

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class Ledger:
    """Client accounts, created lazily on first deposit or withdrawal."""

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def __iter__(self) -> Iterator[ClientAccount]:
        return iter(self._accounts.values())

    def __len__(self) -> int:
        return len(self._accounts)


class StateManager:
    """
    Owns the transaction history and the ledger for a single run.
    Only the transaction processor mutates either of them.
    """

    def __init__(self):
        self.history = TransactionHistory()
        self.ledger = Ledger()
