"""
Reward engine - single entry point the presentation layer talks to.

The engine owns no user state; every call takes the RewardAccount to act on.
Callers serialise calls per account. Outcomes are published to subscribed
listeners instead of framework-bound observable properties.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from random import Random
from typing import Any, Callable, List, Optional

from receipt_rewards.domain import badges, coupons, rewards, streaks, tiers
from receipt_rewards.domain.account import RewardAccount, new_account
from receipt_rewards.domain.catalog import RewardConfig, validate_reward_config
from receipt_rewards.domain.exceptions import ReceiptOutOfPeriodError
from receipt_rewards.domain.models import Badge, OwnedCoupon, Receipt, RewardEvent, SpinResult
from receipt_rewards.utils.date_utils import month_key

# Client clocks run slightly ahead of ours
FUTURE_SCAN_TOLERANCE = timedelta(minutes=5)


class EventType(str, Enum):
    REWARD_EARNED = "gamification.rewardEarned"
    SPIN_COMPLETED = "gamification.spinCompleted"
    BADGE_UNLOCKED = "gamification.badgeUnlocked"
    TIER_CHANGED = "gamification.tierChanged"
    COUPON_REDEEMED = "gamification.couponRedeemed"


@dataclass(frozen=True)
class EngineEvent:
    type: EventType
    user_id: str
    payload: Any


Listener = Callable[[EngineEvent], None]


@dataclass(frozen=True)
class ScanOutcome:
    reward: RewardEvent
    badges_unlocked: List[Badge]


@dataclass(frozen=True)
class SpinOutcome:
    result: SpinResult
    rotation_degrees: float  # absolute wheel rotation to animate to
    badges_unlocked: List[Badge]


@dataclass(frozen=True)
class RedemptionOutcome:
    coupon: OwnedCoupon
    badges_unlocked: List[Badge]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RewardEngine:
    """Applies receipts, spins and redemptions to accounts"""

    def __init__(
        self,
        config: Optional[RewardConfig] = None,
        rng: Optional[Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = validate_reward_config(config or RewardConfig())
        self.rng = rng or Random()
        self.clock = clock or _utcnow
        self._listeners: List[Listener] = []

    # Observers

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _publish(self, event_type: EventType, account: RewardAccount, payload: Any) -> None:
        event = EngineEvent(type=event_type, user_id=account.user_id, payload=payload)
        for listener in list(self._listeners):
            listener(event)

    def _publish_badges(self, account: RewardAccount, unlocked: List[Badge]) -> None:
        for badge in unlocked:
            self._publish(EventType.BADGE_UNLOCKED, account, badge)

    # Accounts

    def open_account(self, user_id: str) -> RewardAccount:
        return new_account(user_id, self.config, month=month_key(self.clock()))

    def ensure_current_month(self, account: RewardAccount, now: Optional[datetime] = None) -> None:
        """Start a new monthly count when `now` falls in a later month; earlier months never roll back"""
        current = month_key(now or self.clock())
        if account.tier_progress.month is None:
            account.tier_progress = replace(account.tier_progress, month=current)
        elif current > account.tier_progress.month:
            self.reset_for_new_month(account, now)

    def reset_for_new_month(self, account: RewardAccount, now: Optional[datetime] = None) -> None:
        current = month_key(now or self.clock())
        previous_tier = account.tier_progress.current_tier
        account.tier_progress = tiers.reset_for_new_month(account.tier_progress, self.config.tiers, current)
        if account.tier_progress.current_tier != previous_tier:
            self._publish(EventType.TIER_CHANGED, account, account.tier_progress.current_tier)

    def refresh_streak(self, account: RewardAccount, now: Optional[datetime] = None) -> None:
        """Settle missed weeks and recompute the at-risk flag"""
        now = now or self.clock()
        settled = streaks.settle_missed_weeks(account.streak, now)
        account.streak = streaks.refresh_risk(settled, now, self.config.at_risk_threshold)

    # Actions

    def scan_receipt(
        self,
        account: RewardAccount,
        store_name: Optional[str] = None,
        amount_cents: Optional[int] = None,
        scanned_at: Optional[datetime] = None,
    ) -> ScanOutcome:
        """
        Reward one receipt.

        scanned_at defaults to the engine clock. Receipts dated more than
        FUTURE_SCAN_TOLERANCE ahead of the clock, or in a month before the
        account's current reward month, raise ReceiptOutOfPeriodError.
        """
        now = self.clock()
        scanned_at = scanned_at or now
        if scanned_at - now > FUTURE_SCAN_TOLERANCE:
            raise ReceiptOutOfPeriodError(f"Receipt dated in the future: {scanned_at.isoformat()}")
        self.ensure_current_month(account, max(now, scanned_at))
        if month_key(scanned_at) < account.tier_progress.month:
            raise ReceiptOutOfPeriodError(
                f"Receipt from {month_key(scanned_at)} is outside reward month {account.tier_progress.month}"
            )

        receipt = Receipt(
            scanned_at=scanned_at,
            store_name=store_name,
            amount_cents=amount_cents,
        )

        reward = rewards.on_receipt_scanned(account, receipt, self.config, self.rng)

        badges.record_receipt_activity(account, receipt)
        unlocked = badges.evaluate_badges(account, receipt.scanned_at)

        self._publish(EventType.REWARD_EARNED, account, reward)
        if reward.tier_changed:
            self._publish(EventType.TIER_CHANGED, account, reward.tier)
        self._publish_badges(account, unlocked)
        return ScanOutcome(reward=reward, badges_unlocked=unlocked)

    def spin(self, account: RewardAccount, now: Optional[datetime] = None) -> SpinOutcome:
        now = now or self.clock()
        account.wheel.release_if_stale(now, self.config.spin_reveal_timeout)
        result = account.wheel.spin(
            self.config.segments,
            account.spin_pool,
            account.wallet,
            self.rng,
            min_full_rotations=self.config.min_full_rotations,
            max_full_rotations=self.config.max_full_rotations,
            now=now,
        )

        badges.record_spin_activity(account, result)
        unlocked = badges.evaluate_badges(account, now)

        self._publish(EventType.SPIN_COMPLETED, account, result)
        self._publish_badges(account, unlocked)
        return SpinOutcome(
            result=result,
            rotation_degrees=account.wheel.rotation_degrees,
            badges_unlocked=unlocked,
        )

    def complete_spin(self, account: RewardAccount) -> Optional[SpinResult]:
        """Presentation finished animating; return the wheel to Idle"""
        result = account.wheel.reveal()
        account.wheel.dismiss()
        return result

    def redeem_coupon(
        self, account: RewardAccount, coupon_id: str, now: Optional[datetime] = None
    ) -> RedemptionOutcome:
        now = now or self.clock()
        owned = coupons.redeem_coupon(account, coupon_id, self.config, now)

        badges.record_coupon_activity(account)
        unlocked = badges.evaluate_badges(account, now)

        self._publish(EventType.COUPON_REDEEMED, account, owned)
        self._publish_badges(account, unlocked)
        return RedemptionOutcome(coupon=owned, badges_unlocked=unlocked)

    # Synchronisation setters

    def sync_state(
        self,
        account: RewardAccount,
        balance_cents: Optional[int] = None,
        spins_available: Optional[int] = None,
        receipts_this_month: Optional[int] = None,
        streak_weeks: Optional[int] = None,
        has_shield: Optional[bool] = None,
    ) -> None:
        """Overwrite aggregates with values from the backend of record"""
        for name, value in (
            ("balance_cents", balance_cents),
            ("spins_available", spins_available),
            ("receipts_this_month", receipts_this_month),
            ("streak_weeks", streak_weeks),
        ):
            if value is not None and value < 0:
                raise ValueError(f"{name} cannot be negative")

        if balance_cents is not None:
            account.wallet.set_balance(balance_cents)
        if spins_available is not None:
            account.spin_pool.set_count(spins_available)
        if receipts_this_month is not None:
            account.tier_progress = replace(
                account.tier_progress,
                receipts_this_month=receipts_this_month,
                current_tier=tiers.tier_for(receipts_this_month, self.config.tiers),
            )
        if streak_weeks is not None:
            account.streak = replace(account.streak, week_count=streak_weeks)
        if has_shield is not None:
            account.streak = replace(account.streak, has_shield=has_shield)
