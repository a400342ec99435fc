"""Wallet ledger - cash balance held in cents"""

from receipt_rewards.domain.exceptions import InsufficientFundsError
from receipt_rewards.domain.money import MAX_CENTS, cents_to_euros, format_euros, saturating_add


class WalletLedger:
    """
    Non-negative balance in minor currency units.

    Requirements:
    - credit always succeeds and saturates at MAX_CENTS instead of wrapping
    - debit larger than the balance raises InsufficientFundsError, balance untouched
    """

    def __init__(self, balance_cents: int = 0):
        if balance_cents < 0:
            raise ValueError("Wallet balance cannot be negative")
        self._balance_cents = min(balance_cents, MAX_CENTS)

    @property
    def balance_cents(self) -> int:
        return self._balance_cents

    @property
    def balance_euros(self) -> float:
        return cents_to_euros(self._balance_cents)

    @property
    def formatted(self) -> str:
        return format_euros(self._balance_cents)

    def can_afford(self, amount_cents: int) -> bool:
        return 0 <= amount_cents <= self._balance_cents

    def credit(self, amount_cents: int) -> int:
        """Add funds and return the new balance"""
        if amount_cents < 0:
            raise ValueError("Credit amount must be non-negative")
        self._balance_cents = saturating_add(self._balance_cents, amount_cents)
        return self._balance_cents

    def debit(self, amount_cents: int) -> int:
        """Remove funds and return the new balance"""
        if amount_cents < 0:
            raise ValueError("Debit amount must be non-negative")
        if amount_cents > self._balance_cents:
            raise InsufficientFundsError(self._balance_cents, amount_cents)
        self._balance_cents -= amount_cents
        return self._balance_cents

    def set_balance(self, balance_cents: int) -> None:
        """Overwrite the balance (used by the backend synchroniser)"""
        if balance_cents < 0:
            raise ValueError("Wallet balance cannot be negative")
        self._balance_cents = min(balance_cents, MAX_CENTS)

    def __repr__(self) -> str:
        return f"WalletLedger(balance_cents={self._balance_cents})"
