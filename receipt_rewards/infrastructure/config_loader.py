"""Load reward tables from JSON into domain configuration"""

import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AwareDatetime, BaseModel, Field, ValidationError

from receipt_rewards.config import Settings
from receipt_rewards.domain.catalog import RewardConfig, validate_reward_config
from receipt_rewards.domain.exceptions import InvalidConfigurationError
from receipt_rewards.domain.models import (
    Coupon,
    MysteryBonusKind,
    MysteryBonusOption,
    SpinSegment,
    UserTier,
    WeeklyRewardTable,
)

logger = logging.getLogger(__name__)


class TierSchema(BaseModel):
    name: str = Field(..., min_length=1)
    min_receipts: int = Field(..., ge=0)
    cash_multiplier: float
    spins_per_receipt: int
    bonus_label: str = ""
    perks: List[str] = []
    crossing_bonus_cents: int = 0


class WeeklyRewardsSchema(BaseModel):
    cycle_length: int = 4
    cash_ladder_cents: List[int]
    base_spins: int = 1
    spins_step_weeks: int = 4


class SegmentSchema(BaseModel):
    id: int
    label: str
    value_euros: float
    is_jackpot: bool = False
    weight: float


class MysteryBonusSchema(BaseModel):
    kind: MysteryBonusKind
    weight: float
    amounts_cents: List[int] = []


class CouponSchema(BaseModel):
    id: str
    store_name: str
    title: str
    description: str = ""
    discount_text: str
    price_cents: int
    expires_at: AwareDatetime  # compared against the engine's UTC clock
    qr_payload: str


class RewardConfigDocument(BaseModel):
    """Top-level JSON document; every section is optional"""

    tiers: Optional[List[TierSchema]] = None
    weekly_rewards: Optional[WeeklyRewardsSchema] = None
    segments: Optional[List[SegmentSchema]] = None
    mystery_bonus: Optional[List[MysteryBonusSchema]] = None
    coupons: Optional[List[CouponSchema]] = None


def build_reward_config(settings: Settings, document: Optional[Dict[str, Any]] = None) -> RewardConfig:
    """Merge a parsed JSON document and settings over the built-in tables"""
    try:
        doc = RewardConfigDocument.model_validate(document or {})
    except ValidationError as e:
        raise InvalidConfigurationError(f"Reward configuration is malformed: {e}") from e

    overrides: Dict[str, Any] = {
        "base_receipt_cash_cents": settings.base_receipt_cash_cents,
        "min_full_rotations": settings.min_full_rotations,
        "max_full_rotations": settings.max_full_rotations,
        "at_risk_threshold": timedelta(hours=settings.at_risk_threshold_hours),
        "spin_reveal_timeout": timedelta(seconds=settings.spin_reveal_timeout_seconds),
    }

    if doc.tiers is not None:
        overrides["tiers"] = tuple(
            UserTier(
                name=t.name,
                min_receipts=t.min_receipts,
                cash_multiplier=t.cash_multiplier,
                spins_per_receipt=t.spins_per_receipt,
                bonus_label=t.bonus_label or f"{t.cash_multiplier:g}x",
                perks=tuple(t.perks),
                crossing_bonus_cents=t.crossing_bonus_cents,
            )
            for t in sorted(doc.tiers, key=lambda t: t.min_receipts)
        )
    if doc.weekly_rewards is not None:
        overrides["weekly_rewards"] = WeeklyRewardTable(
            cycle_length=doc.weekly_rewards.cycle_length,
            cash_ladder_cents=tuple(doc.weekly_rewards.cash_ladder_cents),
            base_spins=doc.weekly_rewards.base_spins,
            spins_step_weeks=doc.weekly_rewards.spins_step_weeks,
        )
    if doc.segments is not None:
        overrides["segments"] = tuple(
            SpinSegment(s.id, s.label, s.value_euros, s.is_jackpot, s.weight)
            for s in sorted(doc.segments, key=lambda s: s.id)
        )
    if doc.mystery_bonus is not None:
        overrides["mystery_bonus_table"] = tuple(
            MysteryBonusOption(m.kind, m.weight, tuple(m.amounts_cents)) for m in doc.mystery_bonus
        )
    if doc.coupons is not None:
        overrides["coupons"] = tuple(Coupon(**c.model_dump()) for c in doc.coupons)

    return validate_reward_config(RewardConfig(**overrides))


def load_reward_config(settings: Settings) -> RewardConfig:
    """
    Build the engine configuration at startup.

    Reads settings.reward_config_path when set; any problem with the file is
    fatal and surfaces as InvalidConfigurationError.
    """
    if not settings.reward_config_path:
        return build_reward_config(settings)

    path = Path(settings.reward_config_path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidConfigurationError(f"Cannot read reward configuration {path}: {e}") from e

    config = build_reward_config(settings, document)
    logger.info(
        "Reward configuration loaded",
        extra={
            "path": str(path),
            "tiers": len(config.tiers),
            "segments": len(config.segments),
            "coupons": len(config.coupons),
        },
    )
    return config
