"""Euro/cent conversions used by the reward tables"""

from decimal import Decimal, ROUND_HALF_UP

# Saturation ceiling for balances (signed 64-bit)
MAX_CENTS = 2**63 - 1


def euros_to_cents(euros: float) -> int:
    """Convert a euro amount to whole cents, rounding half away from zero"""
    return int((Decimal(str(euros)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cents_to_euros(cents: int) -> float:
    return cents / 100.0


def apply_multiplier(cents: int, multiplier: float) -> int:
    """
    Scale a cent amount by a tier multiplier.

    Decimal arithmetic keeps 50 x 1.1 at exactly 55 cents.
    """
    scaled = Decimal(cents) * Decimal(str(multiplier))
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def saturating_add(a: int, b: int) -> int:
    return min(a + b, MAX_CENTS)


def format_euros(cents: int) -> str:
    """Wallet display format, e.g. 1050 -> '€10.50'"""
    return f"€{cents / 100:.2f}"
