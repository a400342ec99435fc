"""Engine listener that turns domain events into logs and metrics"""

from receipt_rewards.domain.engine import EngineEvent, EventType
from receipt_rewards.domain.money import euros_to_cents
from receipt_rewards.infrastructure.observability import logging as log
from receipt_rewards.infrastructure.observability import metrics


def observe_engine_event(event: EngineEvent) -> None:
    """Subscribe with RewardEngine.subscribe(observe_engine_event)"""
    payload = event.payload

    if event.type == EventType.REWARD_EARNED:
        metrics.record_receipt_reward(
            payload.coins_awarded_cents,
            payload.spins_awarded,
            payload.mystery_bonus.kind.value,
        )
        log.log_reward_event(
            event.user_id,
            payload.coins_awarded_cents,
            payload.spins_awarded,
            payload.mystery_bonus.kind.value,
            payload.tier.name if payload.tier else "",
            payload.streak_signal.week if payload.streak_signal else None,
        )

    elif event.type == EventType.SPIN_COMPLETED:
        value_cents = euros_to_cents(payload.value_euros)
        metrics.record_spin(payload.segment_index, value_cents, payload.is_jackpot)
        log.log_spin(event.user_id, payload.segment_index, value_cents, payload.is_jackpot)

    elif event.type == EventType.TIER_CHANGED:
        metrics.tier_change_counter.labels(tier=payload.name).inc()
        log.log_tier_change(event.user_id, payload.name)

    elif event.type == EventType.BADGE_UNLOCKED:
        metrics.badge_unlock_counter.labels(badge=payload.id).inc()
        log.log_badge_unlock(event.user_id, payload.id)

    elif event.type == EventType.COUPON_REDEEMED:
        metrics.coupon_redemption_counter.labels(outcome="redeemed").inc()
        log.log_coupon_redemption(event.user_id, payload.coupon_id)
