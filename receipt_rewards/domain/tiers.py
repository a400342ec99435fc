"""Tier progression - maps monthly receipt count to a reward tier"""

from dataclasses import replace
from typing import Optional, Sequence, Tuple

from receipt_rewards.domain.exceptions import InvalidConfigurationError
from receipt_rewards.domain.models import TierPerks, TierProgress, UserTier


def validate_tier_table(table: Sequence[UserTier]) -> None:
    """
    Reject tables tier_for cannot be total over.

    Requirements:
    - exactly one base tier with threshold 0
    - thresholds strictly increasing in table order
    - multipliers >= 1.0, spins per receipt > 0
    """
    if not table:
        raise InvalidConfigurationError("Tier table is empty")
    if table[0].min_receipts != 0:
        raise InvalidConfigurationError("Tier table must start with a base tier at 0 receipts")

    for lower, upper in zip(table, table[1:]):
        if upper.min_receipts <= lower.min_receipts:
            raise InvalidConfigurationError(
                f"Tier thresholds must increase: {lower.name}={lower.min_receipts}, "
                f"{upper.name}={upper.min_receipts}"
            )

    for tier in table:
        if tier.cash_multiplier < 1.0:
            raise InvalidConfigurationError(f"Tier {tier.name} multiplier below 1.0")
        if tier.spins_per_receipt <= 0:
            raise InvalidConfigurationError(f"Tier {tier.name} must grant at least one spin")
        if tier.crossing_bonus_cents < 0:
            raise InvalidConfigurationError(f"Tier {tier.name} crossing bonus is negative")


def tier_for(receipts_this_month: int, table: Sequence[UserTier]) -> UserTier:
    """Highest tier whose threshold is met (table in ascending order)"""
    current = table[0]
    for tier in table:
        if tier.min_receipts <= receipts_this_month:
            current = tier
        else:
            break
    return current


def tier_rank(tier: UserTier, table: Sequence[UserTier]) -> int:
    return [t.name for t in table].index(tier.name)


def next_tier(tier: UserTier, table: Sequence[UserTier]) -> Optional[UserTier]:
    rank = tier_rank(tier, table)
    return table[rank + 1] if rank + 1 < len(table) else None


def receipts_needed_for_next_tier(progress: TierProgress, table: Sequence[UserTier]) -> int:
    upcoming = next_tier(progress.current_tier, table)
    if upcoming is None:
        return 0
    return max(0, upcoming.min_receipts - progress.receipts_this_month)


def progress_to_next(progress: TierProgress, table: Sequence[UserTier]) -> float:
    """Fraction (0.0-1.0) of the way from the current tier to the next"""
    upcoming = next_tier(progress.current_tier, table)
    if upcoming is None:
        return 1.0
    span = upcoming.min_receipts - progress.current_tier.min_receipts
    done = progress.receipts_this_month - progress.current_tier.min_receipts
    if span <= 0:
        return 1.0
    return max(0.0, min(1.0, done / span))


def initial_progress(table: Sequence[UserTier], month: Optional[str] = None) -> TierProgress:
    return TierProgress(current_tier=table[0], receipts_this_month=0, month=month)


def record_receipt_scanned(
    progress: TierProgress, table: Sequence[UserTier]
) -> Tuple[TierProgress, TierPerks]:
    """
    Count one receipt towards this month and recompute the tier.

    Returns the new progress and the perks that apply to this receipt. When the
    scan crosses into a higher tier the new tier's crossing bonus is included.
    """
    count = progress.receipts_this_month + 1
    tier = tier_for(count, table)
    changed = tier_rank(tier, table) > tier_rank(progress.current_tier, table)

    perks = TierPerks(
        cash_multiplier=tier.cash_multiplier,
        spins_per_receipt=tier.spins_per_receipt,
        crossing_bonus_cents=tier.crossing_bonus_cents if changed else 0,
        tier_changed=changed,
        previous_tier=progress.current_tier if changed else None,
    )
    return replace(progress, current_tier=tier, receipts_this_month=count), perks


def reset_for_new_month(
    progress: TierProgress, table: Sequence[UserTier], month: Optional[str] = None
) -> TierProgress:
    """Zero the monthly count; tier drops back to whatever 0 receipts earns"""
    return TierProgress(current_tier=tier_for(0, table), receipts_this_month=0, month=month)
