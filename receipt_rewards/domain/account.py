"""Per-user reward state"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from receipt_rewards.domain.catalog import RewardConfig
from receipt_rewards.domain.models import (
    ActivityStats,
    BadgeUnlock,
    OwnedCoupon,
    StreakData,
    TierProgress,
)
from receipt_rewards.domain.spin_wheel import SpinWheel
from receipt_rewards.domain.spins import SpinTokenPool
from receipt_rewards.domain.tiers import initial_progress
from receipt_rewards.domain.wallet import WalletLedger


@dataclass
class RewardAccount:
    """All aggregates the engine mutates for one user"""

    user_id: str
    tier_progress: TierProgress
    wallet: WalletLedger = field(default_factory=WalletLedger)
    spin_pool: SpinTokenPool = field(default_factory=SpinTokenPool)
    streak: StreakData = field(default_factory=StreakData)
    wheel: SpinWheel = field(default_factory=SpinWheel)
    owned_coupons: Dict[str, OwnedCoupon] = field(default_factory=dict)
    badges: Dict[str, BadgeUnlock] = field(default_factory=dict)
    stats: ActivityStats = field(default_factory=ActivityStats)


def new_account(user_id: str, config: RewardConfig, month: Optional[str] = None) -> RewardAccount:
    """Fresh account: zero balance, no spins, base tier"""
    return RewardAccount(user_id=user_id, tier_progress=initial_progress(config.tiers, month))
