from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from amount import Amount
from errors import AmountOverflow


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeStatus(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class RejectionReason(Enum):
    INVALID_AMOUNT = "invalid_amount"
    DUPLICATE_TRANSACTION_ID = "duplicate_transaction_id"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    LOCKED_ACCOUNT = "locked_account"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    ILLEGAL_DISPUTE_STATE = "illegal_dispute_state"
    OVERFLOW = "overflow"


@dataclass
class Transaction:
    """One input record. The amount is kept as raw text and validated by the processor."""

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[str] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class HistoryEntry:
    client_id: int
    amount: Amount
    transaction_type: TransactionType
    status: DisputeStatus = DisputeStatus.NORMAL


@dataclass(frozen=True)
class ProcessingResult:
    transaction: Transaction
    rejection: Optional[RejectionReason] = None

    @property
    def success(self) -> bool:
        return self.rejection is None


@dataclass
class ClientAccount:
    """
    Balance state for one client.
    Mutators return a RejectionReason when the operation is not allowed and leave
    the account untouched; they return None on success.
    """

    client_id: int
    available: Amount = field(default_factory=Amount.zero)
    held: Amount = field(default_factory=Amount.zero)
    locked: bool = False

    @property
    def total(self) -> Amount:
        return self.available + self.held

    def credit_available(self, amount: Amount) -> Optional[RejectionReason]:
        # Checked on the total so that available + held stays in range.
        try:
            self.total + amount
        except AmountOverflow:
            return RejectionReason.OVERFLOW
        self.available = self.available + amount
        return None

    def debit_available(self, amount: Amount) -> Optional[RejectionReason]:
        if amount > self.available:
            return RejectionReason.INSUFFICIENT_FUNDS
        self.available = self.available - amount
        return None

    def hold(self, amount: Amount) -> Optional[RejectionReason]:
        if amount > self.available:
            return RejectionReason.INSUFFICIENT_FUNDS
        self.available = self.available - amount
        self.held = self.held + amount
        return None

    def release(self, amount: Amount) -> None:
        # Raises NegativeResult if more is released than is held.
        self.held = self.held - amount
        self.available = self.available + amount

    def chargeback(self, amount: Amount) -> None:
        self.held = self.held - amount
        self.locked = True


class ProcessingStats:
    """Counters for the end-of-run report."""

    def __init__(self):
        self.processed = 0
        self.parse_errors = 0
        self.rejections: Counter = Counter()

    @property
    def rejected(self) -> int:
        return sum(self.rejections.values())

    def record_result(self, result: ProcessingResult) -> None:
        if result.success:
            self.processed += 1
        else:
            self.rejections[result.rejection] += 1

    def record_parse_error(self) -> None:
        self.parse_errors += 1

    def summary(self) -> str:
        return f"Processed: {self.processed}, Rejected: {self.rejected}, Parse errors: {self.parse_errors}"
