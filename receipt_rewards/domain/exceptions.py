"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InsufficientFundsError(DomainException):
    """Debit would take the wallet balance below zero"""

    def __init__(self, balance_cents: int, requested_cents: int):
        self.balance_cents = balance_cents
        self.requested_cents = requested_cents
        super().__init__(
            f"Insufficient balance: {balance_cents} cents available, {requested_cents} requested"
        )


class NoSpinsAvailableError(DomainException):
    """Spin requested with an empty token pool"""

    pass


class SpinInProgressError(DomainException):
    """A spin is already in flight for this wheel"""

    pass


class InvalidConfigurationError(DomainException):
    """Reward tables are malformed (empty wheel, bad weights, no base tier)"""

    pass


class CouponNotFoundError(DomainException):
    """Coupon id is not in the catalog"""

    pass


class CouponAlreadyRedeemedError(DomainException):
    """Coupon is already in the user's owned set"""

    pass


class CouponExpiredError(DomainException):
    """Coupon can no longer be redeemed"""

    pass


class ReceiptOutOfPeriodError(DomainException):
    """Receipt is dated before the current reward month or in the future"""

    pass
