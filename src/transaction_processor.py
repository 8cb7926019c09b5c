import logging
from typing import Optional

from amount import Amount
from errors import InvalidAmount
from models import (
    DisputeStatus,
    ProcessingResult,
    RejectionReason,
    Transaction,
    TransactionType,
)
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to state, one at a time and in input order.
    Each call makes at most one mutation attempt; a rejected transaction leaves
    history and ledger exactly as they were.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns a ProcessingResult whose rejection is None on success, or the
        RejectionReason that caused the transaction to be ignored.
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                rejection = self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                rejection = self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                rejection = self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                rejection = self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                rejection = self._handle_chargeback(transaction)
            case _:
                raise ValueError(f"Unsupported transaction type {transaction.transaction_type}")

        if rejection is None:
            logger.debug(f"Applied {transaction}")
        else:
            logger.warning(f"Ignored {transaction}: {rejection.value}")
        return ProcessingResult(transaction=transaction, rejection=rejection)

    def _parse_amount(self, transaction: Transaction) -> Optional[Amount]:
        if transaction.amount is None:
            logger.info(f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id}: missing amount")
            return None
        try:
            return Amount.parse(transaction.amount)
        except InvalidAmount as e:
            logger.info(f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id}: {e}")
            return None

    def _handle_deposit(self, transaction: Transaction) -> Optional[RejectionReason]:
        amount = self._parse_amount(transaction)
        if amount is None:
            return RejectionReason.INVALID_AMOUNT

        if transaction.transaction_id in self._state.history:
            return RejectionReason.DUPLICATE_TRANSACTION_ID

        account = self._state.ledger.get_or_create_account(transaction.client_id)
        rejection = account.credit_available(amount)
        if rejection is not None:
            return rejection

        self._state.history.record(transaction.transaction_id, transaction.client_id, amount, TransactionType.DEPOSIT)
        return None

    def _handle_withdrawal(self, transaction: Transaction) -> Optional[RejectionReason]:
        amount = self._parse_amount(transaction)
        if amount is None:
            return RejectionReason.INVALID_AMOUNT

        if transaction.transaction_id in self._state.history:
            return RejectionReason.DUPLICATE_TRANSACTION_ID

        account = self._state.ledger.get_account(transaction.client_id)
        if account is None:
            # Only an applied withdrawal opens an account; a zero amount is the one that can apply.
            if not amount.is_zero():
                return RejectionReason.INSUFFICIENT_FUNDS
            account = self._state.ledger.get_or_create_account(transaction.client_id)
        if account.locked:
            return RejectionReason.LOCKED_ACCOUNT

        rejection = account.debit_available(amount)
        if rejection is not None:
            return rejection

        self._state.history.record(transaction.transaction_id, transaction.client_id, amount, TransactionType.WITHDRAWAL)
        return None

    def _find_referenced(self, transaction: Transaction, expected_status: DisputeStatus):
        """
        Look up the deposit or withdrawal a dispute, resolve or chargeback refers to.
        Returns (entry, account, None) when the transition is allowed, otherwise (None, None, reason).
        """
        original = self._state.history.get(transaction.transaction_id)

        if original is None:
            return None, None, RejectionReason.UNKNOWN_TRANSACTION

        if original.client_id != transaction.client_id:
            logger.info(f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: client mismatch (expected {original.client_id}, got {transaction.client_id})")
            return None, None, RejectionReason.CLIENT_MISMATCH

        if original.status != expected_status:
            logger.info(f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: transaction is {original.status.value}, expected {expected_status.value}")
            return None, None, RejectionReason.ILLEGAL_DISPUTE_STATE

        # History entries are only recorded after their account exists.
        account = self._state.ledger.get_account(original.client_id)
        return original, account, None

    def _handle_dispute(self, transaction: Transaction) -> Optional[RejectionReason]:
        original, account, rejection = self._find_referenced(transaction, DisputeStatus.NORMAL)
        if rejection is not None:
            return rejection

        if account.locked:
            return RejectionReason.LOCKED_ACCOUNT

        rejection = account.hold(original.amount)
        if rejection is not None:
            return rejection

        self._state.history.set_status(transaction.transaction_id, DisputeStatus.DISPUTED)
        return None

    def _handle_resolve(self, transaction: Transaction) -> Optional[RejectionReason]:
        original, account, rejection = self._find_referenced(transaction, DisputeStatus.DISPUTED)
        if rejection is not None:
            return rejection

        account.release(original.amount)
        self._state.history.set_status(transaction.transaction_id, DisputeStatus.RESOLVED)
        return None

    def _handle_chargeback(self, transaction: Transaction) -> Optional[RejectionReason]:
        original, account, rejection = self._find_referenced(transaction, DisputeStatus.DISPUTED)
        if rejection is not None:
            return rejection

        # Completes even on an already locked account: the dispute was opened before the lock.
        account.chargeback(original.amount)
        self._state.history.set_status(transaction.transaction_id, DisputeStatus.CHARGED_BACK)
        return None
