import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from amount import Amount
from errors import NegativeResult
from models import (
    Transaction,
    TransactionType,
    ClientAccount,
    ProcessingResult,
    ProcessingStats,
    RejectionReason,
)


NEAR_MAX = Decimal("7922816251426433759354394.0335")


def amount(text):
    return Amount.parse(text)


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount="100.0",
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == "100.0"

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Amount.zero()
        assert account.held == Amount.zero()
        assert account.locked is False

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=amount("100"),
            held=amount("50"),
        )
        assert account.total.value == Decimal("150")

    def test_credit_available(self):
        account = ClientAccount(client_id=1)
        assert account.credit_available(amount("1.5")) is None
        assert account.available.value == Decimal("1.5")

    def test_credit_overflow_leaves_account_unchanged(self):
        account = ClientAccount(client_id=1, available=Amount(NEAR_MAX), held=amount("1"))
        assert account.credit_available(amount("0.0001")) == RejectionReason.OVERFLOW
        assert account.available == Amount(NEAR_MAX)
        assert account.held == amount("1")

    def test_debit_insufficient_funds(self):
        account = ClientAccount(client_id=1, available=amount("1"))
        assert account.debit_available(amount("1.0001")) == RejectionReason.INSUFFICIENT_FUNDS
        assert account.available == amount("1")

    def test_debit_exact_balance(self):
        account = ClientAccount(client_id=1, available=amount("1"))
        assert account.debit_available(amount("1")) is None
        assert account.available.is_zero()

    def test_hold_and_release(self):
        account = ClientAccount(client_id=1, available=amount("10"))
        assert account.hold(amount("4")) is None
        assert account.available == amount("6")
        assert account.held == amount("4")
        assert account.total == amount("10")

        account.release(amount("4"))
        assert account.available == amount("10")
        assert account.held.is_zero()

    def test_hold_insufficient_funds(self):
        account = ClientAccount(client_id=1, available=amount("3"))
        assert account.hold(amount("4")) == RejectionReason.INSUFFICIENT_FUNDS
        assert account.available == amount("3")
        assert account.held.is_zero()

    def test_chargeback_locks(self):
        account = ClientAccount(client_id=1, held=amount("5"))
        account.chargeback(amount("5"))
        assert account.held.is_zero()
        assert account.total.is_zero()
        assert account.locked is True

    def test_release_more_than_held_raises(self):
        account = ClientAccount(client_id=1, held=amount("1"))
        with pytest.raises(NegativeResult):
            account.release(amount("2"))


class TestProcessingStats:
    def test_counts(self):
        stats = ProcessingStats()
        deposit = Transaction(TransactionType.DEPOSIT, client_id=1, transaction_id=1, amount="1")
        stats.record_result(ProcessingResult(deposit))
        stats.record_result(ProcessingResult(deposit, RejectionReason.DUPLICATE_TRANSACTION_ID))
        stats.record_result(ProcessingResult(deposit, RejectionReason.DUPLICATE_TRANSACTION_ID))
        stats.record_parse_error()

        assert stats.processed == 1
        assert stats.rejected == 2
        assert stats.rejections[RejectionReason.DUPLICATE_TRANSACTION_ID] == 2
        assert stats.summary() == "Processed: 1, Rejected: 2, Parse errors: 1"

    def test_result_success(self):
        deposit = Transaction(TransactionType.DEPOSIT, client_id=1, transaction_id=1, amount="1")
        assert ProcessingResult(deposit).success is True
        assert ProcessingResult(deposit, RejectionReason.INVALID_AMOUNT).success is False
