"""Reward wheel - weighted prize resolution and landing geometry"""

from datetime import datetime, timedelta
from enum import Enum
from random import Random
from typing import Optional, Sequence

from receipt_rewards.domain.exceptions import (
    InvalidConfigurationError,
    NoSpinsAvailableError,
    SpinInProgressError,
)
from receipt_rewards.domain.models import SpinResult, SpinSegment
from receipt_rewards.domain.money import euros_to_cents
from receipt_rewards.domain.spins import SpinTokenPool
from receipt_rewards.domain.wallet import WalletLedger


def validate_segments(segments: Sequence[SpinSegment]) -> None:
    """
    Requirements:
    - at least one segment
    - ids are 0..n-1 in list order (id doubles as angular position)
    - every weight > 0, every prize >= 0
    """
    if not segments:
        raise InvalidConfigurationError("Spin wheel has no segments")
    for position, segment in enumerate(segments):
        if segment.id != position:
            raise InvalidConfigurationError(
                f"Segment ids must be 0..{len(segments) - 1} in order, got {segment.id} at {position}"
            )
        if segment.weight <= 0:
            raise InvalidConfigurationError(f"Segment {segment.id} has non-positive weight")
        if segment.value_euros < 0:
            raise InvalidConfigurationError(f"Segment {segment.id} has a negative prize")


def resolve(segments: Sequence[SpinSegment], rng: Random) -> SpinResult:
    """
    Weighted categorical draw over the wheel.

    r is drawn from [0, total_weight); the first segment (in id order) whose
    cumulative weight exceeds r wins. Jackpots carry small weights, so they
    occupy little of the probability mass.
    """
    validate_segments(segments)

    total_weight = sum(s.weight for s in segments)
    r = rng.uniform(0, total_weight)

    winner = segments[-1]  # uniform() may return the upper bound
    cumulative = 0.0
    for segment in segments:
        cumulative += segment.weight
        if cumulative > r:
            winner = segment
            break

    return SpinResult(
        segment_index=winner.id,
        is_jackpot=winner.is_jackpot,
        value_euros=winner.value_euros,
    )


def rotation_angle_to_land(
    segment_index: int,
    segment_count: int,
    current_rotation_degrees: float,
    min_full_rotations: int,
    max_full_rotations: int,
    rng: Random,
) -> float:
    """
    Absolute wheel rotation that stops the pointer on the segment's centre.

    Segment k spans [k * angle, (k + 1) * angle) clockwise from the 12 o'clock
    pointer, so the wheel must rest at 360 - (k + 0.5) * angle (mod 360). The
    extra turn beyond the current position is kept in [0, 360) so the wheel
    only moves forward, then a random number of whole turns is added.
    """
    if segment_count <= 0 or not 0 <= segment_index < segment_count:
        raise ValueError(f"Segment {segment_index} out of range for {segment_count} segments")
    if min_full_rotations > max_full_rotations:
        raise ValueError("min_full_rotations exceeds max_full_rotations")

    segment_angle = 360.0 / segment_count
    target_stop = 360.0 - (segment_index + 0.5) * segment_angle

    current_normalized = current_rotation_degrees % 360.0
    extra_degrees = target_stop - current_normalized
    if extra_degrees < 0:
        extra_degrees += 360.0

    full_rotations = rng.randint(min_full_rotations, max_full_rotations)
    return current_rotation_degrees + full_rotations * 360.0 + extra_degrees


class WheelState(str, Enum):
    IDLE = "idle"
    SPINNING = "spinning"
    RESOLVED = "resolved"


class SpinWheel:
    """
    Per-user wheel: Idle -> Spinning -> Resolved -> Idle.

    spin() consumes a token, resolves the prize and credits the wallet
    immediately; the wheel then stays Spinning until the presentation layer
    calls reveal() after its animation. A second spin() while Spinning raises
    SpinInProgressError. Starting a spin from Resolved dismisses the previous
    result first.

    A client that never reports the reveal is recovered by release_if_stale,
    which returns a wheel stuck in Spinning to Idle once the timeout passes.
    """

    def __init__(self, rotation_degrees: float = 0.0):
        self.state = WheelState.IDLE
        self.rotation_degrees = rotation_degrees
        self.last_result: Optional[SpinResult] = None

    def spin(
        self,
        segments: Sequence[SpinSegment],
        pool: SpinTokenPool,
        wallet: WalletLedger,
        rng: Random,
        min_full_rotations: int = 5,
        max_full_rotations: int = 8,
        now: Optional[datetime] = None,
    ) -> SpinResult:
        if self.state == WheelState.SPINNING:
            raise SpinInProgressError("A spin is already in progress")

        if pool.count == 0:
            raise NoSpinsAvailableError("No spins available")

        drawn = resolve(segments, rng)
        result = SpinResult(
            segment_index=drawn.segment_index,
            is_jackpot=drawn.is_jackpot,
            value_euros=drawn.value_euros,
            timestamp=now,
        )
        rotation = rotation_angle_to_land(
            result.segment_index,
            len(segments),
            self.rotation_degrees,
            min_full_rotations,
            max_full_rotations,
            rng,
        )

        # Nothing below can fail
        pool.consume_one()
        wallet.credit(euros_to_cents(result.value_euros))
        self.rotation_degrees = rotation
        self.last_result = result
        self.state = WheelState.SPINNING
        return result

    def release_if_stale(self, now: datetime, timeout: timedelta) -> bool:
        """Return to Idle when the last spin has gone unrevealed for `timeout`"""
        if self.state != WheelState.SPINNING or self.last_result is None:
            return False
        started = self.last_result.timestamp
        if started is None or now - started < timeout:
            return False
        self.state = WheelState.IDLE
        return True

    def reveal(self) -> Optional[SpinResult]:
        """Animation finished; the result is now shown"""
        if self.state == WheelState.SPINNING:
            self.state = WheelState.RESOLVED
        return self.last_result

    def dismiss(self) -> None:
        """Result acknowledged; the wheel accepts the next spin"""
        if self.state == WheelState.RESOLVED:
            self.state = WheelState.IDLE
