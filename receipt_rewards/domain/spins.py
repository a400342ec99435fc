"""Spin token pool"""

from receipt_rewards.domain.exceptions import NoSpinsAvailableError


class SpinTokenPool:
    """Count of free spins available to the user; never negative"""

    def __init__(self, count: int = 0):
        if count < 0:
            raise ValueError("Spin count cannot be negative")
        self._count = count

    @property
    def count(self) -> int:
        return self._count

    def grant(self, n: int) -> int:
        if n < 0:
            raise ValueError("Cannot grant a negative number of spins")
        self._count += n
        return self._count

    def consume_one(self) -> int:
        if self._count == 0:
            raise NoSpinsAvailableError("No spins available")
        self._count -= 1
        return self._count

    def set_count(self, count: int) -> None:
        if count < 0:
            raise ValueError("Spin count cannot be negative")
        self._count = count

    def __repr__(self) -> str:
        return f"SpinTokenPool(count={self._count})"
