"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from receipt_rewards.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_reward_event(
    user_id: str,
    coins_awarded_cents: int,
    spins_awarded: int,
    mystery_bonus: str,
    tier: str,
    streak_week: int | None,
) -> None:
    """Log the reward bundle issued for a scanned receipt"""
    logging.info(
        "Receipt rewarded",
        extra={
            "user_id": user_id,
            "step": "receipt_rewarded",
            "coins_awarded_cents": coins_awarded_cents,
            "spins_awarded": spins_awarded,
            "mystery_bonus": mystery_bonus,
            "tier": tier,
            "streak_week": streak_week,
        },
    )


def log_spin(user_id: str, segment_index: int, value_cents: int, is_jackpot: bool) -> None:
    """Log a resolved wheel spin"""
    logging.info(
        "Spin resolved",
        extra={
            "user_id": user_id,
            "step": "spin_resolved",
            "segment_index": segment_index,
            "value_cents": value_cents,
            "is_jackpot": is_jackpot,
        },
    )


def log_coupon_redemption(user_id: str, coupon_id: str) -> None:
    logging.info(
        "Coupon redeemed",
        extra={"user_id": user_id, "step": "coupon_redeemed", "coupon_id": coupon_id},
    )


def log_tier_change(user_id: str, tier: str) -> None:
    logging.info(
        "Tier changed",
        extra={"user_id": user_id, "step": "tier_changed", "tier": tier},
    )


def log_badge_unlock(user_id: str, badge_id: str) -> None:
    logging.info(
        "Badge unlocked",
        extra={"user_id": user_id, "step": "badge_unlocked", "badge_id": badge_id},
    )
