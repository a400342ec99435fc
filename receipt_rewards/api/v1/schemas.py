"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import List, Optional

from pydantic import AwareDatetime, BaseModel, Field


class ReceiptScanRequest(BaseModel):
    """Request body for POST /v1/users/{user_id}/receipts"""

    store_name: Optional[str] = Field(None, min_length=1, description="Store on the receipt")
    amount_cents: Optional[int] = Field(None, ge=0, description="Receipt total in cents")
    scanned_at: Optional[AwareDatetime] = Field(None, description="Scan time with UTC offset; defaults to now")


class SyncRequest(BaseModel):
    """Request body for PUT /v1/users/{user_id}/sync"""

    balance_cents: Optional[int] = Field(None, ge=0)
    spins_available: Optional[int] = Field(None, ge=0)
    receipts_this_month: Optional[int] = Field(None, ge=0)
    streak_weeks: Optional[int] = Field(None, ge=0)
    has_shield: Optional[bool] = None


class BadgeSchema(BaseModel):
    id: str
    name: str
    description: str
    unlocked_at: Optional[datetime] = None


class WalletSchema(BaseModel):
    balance_cents: int
    formatted: str


class TierSchema(BaseModel):
    name: str
    bonus_label: str
    cash_multiplier: float
    spins_per_receipt: int
    perks: List[str]


class TierProgressSchema(BaseModel):
    current_tier: TierSchema
    receipts_this_month: int
    receipts_needed_for_next_tier: int
    progress_to_next: float
    next_tier: Optional[str] = None


class CycleEntrySchema(BaseModel):
    week: int
    streak_week: int
    label: str
    is_cash: bool
    completed: bool


class StreakSchema(BaseModel):
    week_count: int
    has_shield: bool
    is_at_risk: bool
    current_cycle: List[CycleEntrySchema]
    next_cash_week: int
    weeks_until_cash: int
    next_week_reward: str


class OwnedCouponSchema(BaseModel):
    coupon_id: str
    redeemed_at: datetime
    qr_payload: str


class RewardsStateResponse(BaseModel):
    """Response for GET /v1/users/{user_id}/rewards"""

    user_id: str
    wallet: WalletSchema
    spins_available: int
    tier_progress: TierProgressSchema
    streak: StreakSchema
    coupons: List[OwnedCouponSchema]
    badges: List[BadgeSchema]


class MysteryBonusSchema(BaseModel):
    kind: str
    amount_cents: int = 0


class ReceiptRewardResponse(BaseModel):
    """Response for POST /v1/users/{user_id}/receipts"""

    coins_awarded_cents: int
    coins_awarded: float
    spins_awarded: int
    base_cash_cents: int
    mystery_bonus: MysteryBonusSchema
    streak_week: Optional[int] = None
    streak_reward: Optional[str] = None
    tier: str
    tier_changed: bool
    badges_unlocked: List[BadgeSchema]
    balance_cents: int
    spins_available: int


class SpinResponse(BaseModel):
    """Response for POST /v1/users/{user_id}/spins"""

    segment_index: int
    label: str
    value_euros: float
    is_jackpot: bool
    rotation_degrees: float
    spins_available: int
    balance_cents: int
    badges_unlocked: List[BadgeSchema]


class SpinCompleteResponse(BaseModel):
    segment_index: Optional[int] = None
    state: str


class CouponSchema(BaseModel):
    id: str
    store_name: str
    title: str
    description: str
    discount_text: str
    price_cents: int
    price_formatted: str
    expires_at: datetime


class RedeemResponse(BaseModel):
    """Response for POST /v1/users/{user_id}/coupons/{coupon_id}/redeem"""

    coupon_id: str
    qr_payload: str
    redeemed_at: datetime
    balance_cents: int
    badges_unlocked: List[BadgeSchema]
