"""Rewards state, receipt scans and backend sync endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from receipt_rewards.api.dependencies import get_engine, get_repository, get_request_id
from receipt_rewards.api.v1.schemas import (
    BadgeSchema,
    CycleEntrySchema,
    MysteryBonusSchema,
    OwnedCouponSchema,
    ReceiptRewardResponse,
    ReceiptScanRequest,
    RewardsStateResponse,
    StreakSchema,
    SyncRequest,
    TierProgressSchema,
    TierSchema,
    WalletSchema,
)
from receipt_rewards.domain import streaks, tiers
from receipt_rewards.domain.account import RewardAccount
from receipt_rewards.domain.badges import ALL_BADGES
from receipt_rewards.domain.engine import RewardEngine
from receipt_rewards.domain.exceptions import InvalidConfigurationError, ReceiptOutOfPeriodError
from receipt_rewards.domain.models import Badge, UserTier
from receipt_rewards.infrastructure.repositories import AccountRepository

router = APIRouter()


def badge_schemas(badges: List[Badge], account: RewardAccount) -> List[BadgeSchema]:
    return [
        BadgeSchema(
            id=b.id,
            name=b.name,
            description=b.description,
            unlocked_at=account.badges[b.id].unlocked_at if b.id in account.badges else None,
        )
        for b in badges
    ]


def _tier_schema(tier: UserTier) -> TierSchema:
    return TierSchema(
        name=tier.name,
        bonus_label=tier.bonus_label,
        cash_multiplier=tier.cash_multiplier,
        spins_per_receipt=tier.spins_per_receipt,
        perks=list(tier.perks),
    )


def build_state(account: RewardAccount, engine: RewardEngine) -> RewardsStateResponse:
    table = engine.config.tiers
    weekly = engine.config.weekly_rewards
    progress = account.tier_progress
    upcoming = tiers.next_tier(progress.current_tier, table)
    streak = account.streak

    return RewardsStateResponse(
        user_id=account.user_id,
        wallet=WalletSchema(balance_cents=account.wallet.balance_cents, formatted=account.wallet.formatted),
        spins_available=account.spin_pool.count,
        tier_progress=TierProgressSchema(
            current_tier=_tier_schema(progress.current_tier),
            receipts_this_month=progress.receipts_this_month,
            receipts_needed_for_next_tier=tiers.receipts_needed_for_next_tier(progress, table),
            progress_to_next=tiers.progress_to_next(progress, table),
            next_tier=upcoming.name if upcoming else None,
        ),
        streak=StreakSchema(
            week_count=streak.week_count,
            has_shield=streak.has_shield,
            is_at_risk=streak.is_at_risk,
            current_cycle=[
                CycleEntrySchema(
                    week=e.week,
                    streak_week=e.streak_week,
                    label=e.label,
                    is_cash=e.is_cash,
                    completed=e.completed,
                )
                for e in streaks.current_cycle(streak, weekly)
            ],
            next_cash_week=streaks.next_cash_week(streak, weekly),
            weeks_until_cash=streaks.weeks_until_cash(streak, weekly),
            next_week_reward=streaks.next_week_reward(streak, weekly).label,
        ),
        coupons=[
            OwnedCouponSchema(coupon_id=c.coupon_id, redeemed_at=c.redeemed_at, qr_payload=c.qr_payload)
            for c in account.owned_coupons.values()
        ],
        badges=badge_schemas([b for b in ALL_BADGES if b.id in account.badges], account),
    )


@router.get("/users/{user_id}/rewards", response_model=RewardsStateResponse)
def get_rewards(
    user_id: str,
    engine: RewardEngine = Depends(get_engine),
    accounts: AccountRepository = Depends(get_repository),
):
    """
    Current wallet, spins, tier progress, streak, coupons and badges.

    Missed streak weeks are settled and the at-risk flag refreshed first.
    """
    with accounts.session(user_id) as account:
        engine.ensure_current_month(account)
        engine.refresh_streak(account)
        return build_state(account, engine)


@router.post("/users/{user_id}/receipts", response_model=ReceiptRewardResponse)
def scan_receipt(
    user_id: str,
    request_body: ReceiptScanRequest,
    request: Request,
    engine: RewardEngine = Depends(get_engine),
    accounts: AccountRepository = Depends(get_repository),
):
    """
    Reward a scanned receipt.

    Flow:
    1. Roll the month over if needed
    2. Advance tier and streak, price the receipt, roll the mystery bonus
    3. Credit wallet and grant spins
    4. Unlock any badges the scan earned

    Errors:
    - 422 scanned_at in the future or before the current reward month
    """
    request_id = get_request_id(request)

    with accounts.session(user_id) as account:
        try:
            outcome = engine.scan_receipt(
                account,
                store_name=request_body.store_name,
                amount_cents=request_body.amount_cents,
                scanned_at=request_body.scanned_at,
            )
        except ReceiptOutOfPeriodError as e:
            logging.warning(f"Receipt rejected: {e}", extra={"request_id": request_id, "user_id": user_id})
            raise HTTPException(status_code=422, detail=str(e))
        except InvalidConfigurationError as e:
            logging.error(f"Reward tables unusable: {e}", extra={"request_id": request_id})
            raise HTTPException(status_code=500, detail="Reward configuration error")

        reward = outcome.reward
        return ReceiptRewardResponse(
            coins_awarded_cents=reward.coins_awarded_cents,
            coins_awarded=reward.coins_awarded,
            spins_awarded=reward.spins_awarded,
            base_cash_cents=reward.base_cash_cents,
            mystery_bonus=MysteryBonusSchema(
                kind=reward.mystery_bonus.kind.value,
                amount_cents=reward.mystery_bonus.amount_cents,
            ),
            streak_week=reward.streak_signal.week if reward.streak_signal else None,
            streak_reward=reward.streak_signal.label if reward.streak_signal else None,
            tier=reward.tier.name if reward.tier else account.tier_progress.current_tier.name,
            tier_changed=reward.tier_changed,
            badges_unlocked=badge_schemas(outcome.badges_unlocked, account),
            balance_cents=account.wallet.balance_cents,
            spins_available=account.spin_pool.count,
        )


@router.put("/users/{user_id}/sync", response_model=RewardsStateResponse)
def sync_state(
    user_id: str,
    request_body: SyncRequest,
    engine: RewardEngine = Depends(get_engine),
    accounts: AccountRepository = Depends(get_repository),
):
    """Apply authoritative values from the backend synchroniser"""
    with accounts.session(user_id) as account:
        engine.sync_state(account, **request_body.model_dump())
        return build_state(account, engine)
