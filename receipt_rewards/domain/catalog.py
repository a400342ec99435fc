"""Reward economy tables - tiers, streak ladder, wheel, mystery bonus, coupons"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence, Tuple

from receipt_rewards.domain.exceptions import InvalidConfigurationError
from receipt_rewards.domain.models import (
    Coupon,
    MysteryBonusKind,
    MysteryBonusOption,
    SpinSegment,
    UserTier,
    WeeklyRewardTable,
)
from receipt_rewards.domain.spin_wheel import validate_segments
from receipt_rewards.domain.streaks import validate_weekly_rewards
from receipt_rewards.domain.tiers import validate_tier_table

DEFAULT_TIERS: Tuple[UserTier, ...] = (
    UserTier("Bronze", 0, 1.0, 1, "1x", ("1 spin/receipt", "Base earnings")),
    UserTier("Silver", 5, 1.1, 2, "1.1x", ("2 spins/receipt", "+10% bonus")),
    UserTier("Gold", 8, 1.25, 3, "1.25x", ("3 spins/receipt", "+25% bonus")),
    UserTier("Diamond", 12, 1.5, 5, "1.5x", ("5 spins/receipt", "+50% bonus")),
)

# Cash every 4th week: €0.50 rising to €75, then flat
DEFAULT_WEEKLY_REWARDS = WeeklyRewardTable(
    cycle_length=4,
    cash_ladder_cents=(50, 100, 150, 200, 300, 500, 750, 1000, 1500, 2000, 3000, 5000, 7500),
    base_spins=1,
    spins_step_weeks=4,
)

# Jackpot is 1% of the 100 weight units
DEFAULT_SEGMENTS: Tuple[SpinSegment, ...] = (
    SpinSegment(0, "€0.20", 0.20, False, 35),
    SpinSegment(1, "€0.50", 0.50, False, 25),
    SpinSegment(2, "€1", 1.00, False, 18),
    SpinSegment(3, "€2", 2.00, False, 10),
    SpinSegment(4, "€5", 5.00, False, 6),
    SpinSegment(5, "€10", 10.00, False, 3),
    SpinSegment(6, "€50", 50.00, False, 2),
    SpinSegment(7, "€1000", 1000.00, True, 1),
)

# 25% cash, 10% spin, 65% nothing
DEFAULT_MYSTERY_BONUS_TABLE: Tuple[MysteryBonusOption, ...] = (
    MysteryBonusOption(MysteryBonusKind.CASH_BONUS, 25, (10, 20)),
    MysteryBonusOption(MysteryBonusKind.SPIN_TOKEN, 10),
    MysteryBonusOption(MysteryBonusKind.NOTHING, 65),
)


def default_coupons(now: Optional[datetime] = None) -> Tuple[Coupon, ...]:
    """Launch coupon catalog, expiries relative to now"""
    now = now or datetime.now(timezone.utc)
    rows = [
        ("c1", "Lidl", "10% off Fresh Produce", "Valid on all fresh produce at Lidl", "10% off", 150, 14, "LIDL-FRESH-10PCT"),
        ("c2", "Colruyt", "€2 Off Your Next Shop", "Min. spend €20 at Colruyt", "€2 off", 100, 30, "COL-2EUR-OFF"),
        ("c3", "Delhaize", "Free Yoghurt", "Free Alpro yoghurt with any purchase", "Free item", 200, 7, "DEL-YOGHURT-FREE"),
        ("c4", "Aldi", "€1 Off Bakery Items", "Valid on all bakery items at Aldi", "€1 off", 50, 21, "ALDI-BAKERY-1EUR"),
        ("c5", "Carrefour", "15% off Wine & Beer", "Valid on selected wines and beers", "15% off", 300, 10, "CAR-WINE-15PCT"),
        ("c6", "Albert Heijn", "Bonus Points x2", "Double bonus points this weekend", "2x points", 75, 3, "AH-DOUBLE-BONUS"),
    ]
    return tuple(
        Coupon(
            id=coupon_id,
            store_name=store,
            title=title,
            description=description,
            discount_text=discount,
            price_cents=price,
            expires_at=now + timedelta(days=days),
            qr_payload=payload,
        )
        for coupon_id, store, title, description, discount, price, days, payload in rows
    )


@dataclass(frozen=True)
class RewardConfig:
    """Everything the engine needs to price rewards"""

    tiers: Tuple[UserTier, ...] = DEFAULT_TIERS
    weekly_rewards: WeeklyRewardTable = DEFAULT_WEEKLY_REWARDS
    segments: Tuple[SpinSegment, ...] = DEFAULT_SEGMENTS
    mystery_bonus_table: Tuple[MysteryBonusOption, ...] = DEFAULT_MYSTERY_BONUS_TABLE
    coupons: Tuple[Coupon, ...] = field(default_factory=default_coupons)
    base_receipt_cash_cents: int = 50
    min_full_rotations: int = 5
    max_full_rotations: int = 8
    at_risk_threshold: timedelta = timedelta(hours=24)
    spin_reveal_timeout: timedelta = timedelta(seconds=30)  # unrevealed spins are released after this

    def coupon(self, coupon_id: str) -> Optional[Coupon]:
        return next((c for c in self.coupons if c.id == coupon_id), None)


def validate_mystery_bonus_table(table: Sequence[MysteryBonusOption]) -> None:
    if not table:
        raise InvalidConfigurationError("Mystery bonus table is empty")
    if any(option.weight < 0 for option in table):
        raise InvalidConfigurationError("Mystery bonus weights must be non-negative")
    if sum(option.weight for option in table) <= 0:
        raise InvalidConfigurationError("Mystery bonus weights sum to zero")
    for option in table:
        if option.kind == MysteryBonusKind.CASH_BONUS:
            if not option.amounts_cents or any(a < 0 for a in option.amounts_cents):
                raise InvalidConfigurationError("Cash bonus rows need non-negative amounts")


def validate_reward_config(config: RewardConfig) -> RewardConfig:
    """Raise InvalidConfigurationError for any table the engine cannot use"""
    validate_tier_table(config.tiers)
    validate_weekly_rewards(config.weekly_rewards)
    validate_segments(config.segments)
    validate_mystery_bonus_table(config.mystery_bonus_table)

    if config.base_receipt_cash_cents < 0:
        raise InvalidConfigurationError("Base receipt cash must be non-negative")
    if not 0 <= config.min_full_rotations <= config.max_full_rotations:
        raise InvalidConfigurationError("Full rotation range is invalid")
    if config.at_risk_threshold < timedelta(0):
        raise InvalidConfigurationError("At-risk threshold must be non-negative")
    if config.spin_reveal_timeout < timedelta(0):
        raise InvalidConfigurationError("Spin reveal timeout must be non-negative")

    coupon_ids = [c.id for c in config.coupons]
    if len(coupon_ids) != len(set(coupon_ids)):
        raise InvalidConfigurationError("Duplicate coupon ids")
    if any(c.price_cents < 0 for c in config.coupons):
        raise InvalidConfigurationError("Coupon prices must be non-negative")
    if any(c.expires_at.tzinfo is None for c in config.coupons):
        raise InvalidConfigurationError("Coupon expiries need a timezone")

    return config
