class PaymentsError(Exception):
    """Base error for the payments engine."""


class InvalidAmount(PaymentsError, ValueError):
    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"`{text}` is not a valid amount: {reason}")


class AmountOverflow(PaymentsError, ArithmeticError):
    def __init__(self, left, right):
        super().__init__(f"{left} + {right} exceeds the representable amount range")


class NegativeResult(PaymentsError, ArithmeticError):
    def __init__(self, left, right):
        super().__init__(f"{left} - {right} would be negative")


class DuplicateTransactionId(PaymentsError):
    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} already recorded")
