import csv
import logging
from typing import Dict, Iterable, Optional

from models import Transaction, TransactionType, ClientAccount, ProcessingResult, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

AMOUNT_TRANSACTION_TYPES = {TransactionType.DEPOSIT, TransactionType.WITHDRAWAL}


class PaymentsEngine:
    """
    Replays a stream of transactions, strictly in order, into final account states.
    Rows that cannot be parsed and transactions the processor rejects are logged and skipped.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def apply(self, transaction: Transaction) -> ProcessingResult:
        result = self._processor.process_transaction(transaction)
        self._stats.record_result(result)
        return result

    def apply_all(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self.apply(transaction)

    def snapshot(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return self._state.ledger.get_all_accounts()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """
        Process CSV file and return final account states.
        OSError, csv.Error and UnicodeDecodeError are not caught: an unreadable input aborts the run.
        """
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                transaction = self._parse_csv_row(row)
                if transaction is None:
                    self._stats.record_parse_error()
                    continue
                self.apply(transaction)

        logger.info(f"Finished {filepath}: {self._stats.summary()}")
        return self.snapshot()

    def _parse_csv_row(self, row: Dict[str, str]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

            transaction_type = TransactionType(normalized["type"].lower())
            client_id = self._parse_id(normalized["client"], MAX_CLIENT_ID)
            transaction_id = self._parse_id(normalized["tx"], MAX_TRANSACTION_ID)

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str and transaction_type in AMOUNT_TRANSACTION_TYPES:
                amount = amount_str

            return Transaction(
                transaction_type=transaction_type,
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Failed to parse row {row}: {e}")
            return None

    @staticmethod
    def _parse_id(text: str, maximum: int) -> int:
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"id {text!r} is not an unsigned integer")
        value = int(text)
        if not 0 <= value <= maximum:
            raise ValueError(f"id {value} out of range 0..{maximum}")
        return value
