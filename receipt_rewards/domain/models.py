"""Domain models - pure Python dataclasses representing reward entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

from receipt_rewards.domain.money import cents_to_euros


@dataclass(frozen=True)
class UserTier:
    """Reward bracket reached by monthly receipt count"""

    name: str
    min_receipts: int
    cash_multiplier: float
    spins_per_receipt: int
    bonus_label: str
    perks: Tuple[str, ...] = ()
    crossing_bonus_cents: int = 0  # one-time credit when the tier is reached


@dataclass
class TierProgress:
    """Current tier and the receipts counted towards it this month"""

    current_tier: UserTier
    receipts_this_month: int = 0
    month: Optional[str] = None  # YYYY-MM the count belongs to


@dataclass(frozen=True)
class TierPerks:
    """Per-receipt perks of the tier in effect after a scan"""

    cash_multiplier: float
    spins_per_receipt: int
    crossing_bonus_cents: int
    tier_changed: bool
    previous_tier: Optional[UserTier] = None


@dataclass(frozen=True)
class WeeklyRewardTable:
    """Streak reward ladder: cash every `cycle_length` weeks, spins otherwise"""

    cycle_length: int
    cash_ladder_cents: Tuple[int, ...]
    base_spins: int = 1
    spins_step_weeks: int = 4  # +1 spin per this many streak weeks


@dataclass(frozen=True)
class WeeklyReward:
    week: int
    label: str
    is_cash: bool
    cash_cents: int = 0
    spins: int = 0


@dataclass(frozen=True)
class CycleEntry:
    """One week of the active streak cycle"""

    week: int  # position in the cycle, 1..cycle_length
    streak_week: int  # absolute streak week number
    label: str
    is_cash: bool
    completed: bool


@dataclass
class StreakData:
    """Weekly scan streak state"""

    week_count: int = 0
    has_shield: bool = False
    is_at_risk: bool = False
    last_qualifying_scan_at: Optional[datetime] = None
    # Monday of the latest week whose outcome (scan, shield, reset) is settled
    last_settled_week: Optional[date] = None


@dataclass(frozen=True)
class StreakSignal:
    """Reward owed for completing a streak week"""

    week: int
    label: str
    cash_cents: int = 0
    spins: int = 0


@dataclass(frozen=True)
class SpinSegment:
    """One wedge of the reward wheel"""

    id: int
    label: str
    value_euros: float
    is_jackpot: bool
    weight: float


@dataclass(frozen=True)
class SpinResult:
    """Outcome of a single resolved spin"""

    segment_index: int
    is_jackpot: bool
    value_euros: float
    timestamp: Optional[datetime] = None


class MysteryBonusKind(str, Enum):
    CASH_BONUS = "cash_bonus"
    SPIN_TOKEN = "spin_token"
    NOTHING = "nothing"


@dataclass(frozen=True)
class MysteryBonus:
    """Result of the mystery bonus roll"""

    kind: MysteryBonusKind
    amount_cents: int = 0

    @classmethod
    def cash_bonus(cls, amount_cents: int) -> "MysteryBonus":
        return cls(MysteryBonusKind.CASH_BONUS, amount_cents)

    @classmethod
    def spin_token(cls) -> "MysteryBonus":
        return cls(MysteryBonusKind.SPIN_TOKEN)

    @classmethod
    def nothing(cls) -> "MysteryBonus":
        return cls(MysteryBonusKind.NOTHING)

    @property
    def amount_euros(self) -> float:
        return cents_to_euros(self.amount_cents)


@dataclass(frozen=True)
class MysteryBonusOption:
    """Row of the mystery bonus probability table"""

    kind: MysteryBonusKind
    weight: float
    amounts_cents: Tuple[int, ...] = ()  # cash rows pick one uniformly


@dataclass(frozen=True)
class Receipt:
    """Scanned receipt as far as the reward engine cares"""

    scanned_at: datetime
    store_name: Optional[str] = None
    amount_cents: Optional[int] = None


@dataclass(frozen=True)
class RewardEvent:
    """Reward bundle for one scanned receipt"""

    coins_awarded_cents: int
    spins_awarded: int
    mystery_bonus: MysteryBonus
    base_cash_cents: int = 0
    streak_signal: Optional[StreakSignal] = None
    tier: Optional[UserTier] = None
    tier_changed: bool = False
    store_name: Optional[str] = None
    receipt_amount_cents: Optional[int] = None

    @property
    def coins_awarded(self) -> float:
        return cents_to_euros(self.coins_awarded_cents)


@dataclass(frozen=True)
class Coupon:
    """Store coupon purchasable with wallet balance"""

    id: str
    store_name: str
    title: str
    description: str
    discount_text: str
    price_cents: int
    expires_at: datetime
    qr_payload: str


@dataclass(frozen=True)
class OwnedCoupon:
    coupon_id: str
    redeemed_at: datetime
    qr_payload: str


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str


@dataclass(frozen=True)
class BadgeUnlock:
    badge_id: str
    unlocked_at: datetime


@dataclass
class ActivityStats:
    """Counters the badge predicates read"""

    receipts_scanned: int = 0
    stores_seen: List[str] = field(default_factory=list)
    best_spin_cents: int = 0
    jackpots_won: int = 0
    coupons_redeemed: int = 0
    max_streak_weeks: int = 0
    tiers_reached: List[str] = field(default_factory=list)
    largest_receipt_cents: int = 0
    night_scans: int = 0
