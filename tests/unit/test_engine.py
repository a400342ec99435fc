"""Unit tests for the reward engine facade and its event stream"""

import pytest
from datetime import datetime, timedelta, timezone
from receipt_rewards.domain.catalog import RewardConfig
from receipt_rewards.domain.engine import EventType, RewardEngine
from receipt_rewards.domain.exceptions import (
    InvalidConfigurationError,
    NoSpinsAvailableError,
    ReceiptOutOfPeriodError,
    SpinInProgressError,
)
from receipt_rewards.domain.models import StreakData, TierProgress
from receipt_rewards.domain.spin_wheel import WheelState

from conftest import NOTHING_ROLL, NOW

APRIL = datetime(2026, 4, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def events(engine):
    received = []
    engine.subscribe(received.append)
    return received


def test_open_account_uses_clock_month(engine):
    account = engine.open_account("user_2")

    assert account.tier_progress.month == "2026-03"
    assert account.wallet.balance_cents == 0
    assert account.spin_pool.count == 0


def test_scan_publishes_reward_then_badges(engine, account, events):
    outcome = engine.scan_receipt(account, store_name="Lidl", amount_cents=2300)

    # lowest draws: €0.10 mystery cash on top of the €0.50 base
    assert outcome.reward.coins_awarded_cents == 60
    assert outcome.reward.spins_awarded == 2
    assert [b.id for b in outcome.badges_unlocked] == ["first_scan"]
    assert [e.type for e in events] == [EventType.REWARD_EARNED, EventType.BADGE_UNLOCKED]
    assert events[0].user_id == "user_1"
    assert events[0].payload is outcome.reward


def test_fifth_receipt_publishes_tier_change(engine, account, events, stub_rng):
    stub_rng.uniforms.extend([NOTHING_ROLL] * 5)
    for _ in range(5):
        engine.scan_receipt(account)

    tier_events = [e for e in events if e.type == EventType.TIER_CHANGED]
    assert len(tier_events) == 1
    assert tier_events[0].payload.name == "Silver"
    assert account.tier_progress.receipts_this_month == 5


def test_scan_in_new_month_resets_tier(engine, account, config, events, stub_rng, clock):
    account.tier_progress = TierProgress(config.tiers[1], 6, "2026-03")
    stub_rng.uniforms.append(NOTHING_ROLL)
    clock.now = APRIL

    outcome = engine.scan_receipt(account)

    assert account.tier_progress.month == "2026-04"
    assert account.tier_progress.receipts_this_month == 1
    assert outcome.reward.tier.name == "Bronze"
    assert outcome.reward.base_cash_cents == 50
    assert events[0].type == EventType.TIER_CHANGED
    assert events[0].payload.name == "Bronze"


def test_backdated_receipt_rejected_and_month_kept(engine, account, config, events):
    account.tier_progress = TierProgress(config.tiers[1], 6, "2026-03")
    february = datetime(2026, 2, 27, 18, 0, tzinfo=timezone.utc)

    with pytest.raises(ReceiptOutOfPeriodError):
        engine.scan_receipt(account, scanned_at=february)
    engine.ensure_current_month(account)

    assert account.tier_progress == TierProgress(config.tiers[1], 6, "2026-03")
    assert account.wallet.balance_cents == 0
    assert events == []


def test_earlier_receipt_in_current_month_counts(engine, account, config, stub_rng):
    account.tier_progress = TierProgress(config.tiers[1], 6, "2026-03")
    stub_rng.uniforms.append(NOTHING_ROLL)

    engine.scan_receipt(account, scanned_at=datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc))

    assert account.tier_progress.month == "2026-03"
    assert account.tier_progress.receipts_this_month == 7
    assert account.tier_progress.current_tier.name == "Silver"


def test_future_receipt_rejected(engine, account):
    with pytest.raises(ReceiptOutOfPeriodError):
        engine.scan_receipt(account, scanned_at=APRIL)

    assert account.tier_progress.month == "2026-03"
    assert account.tier_progress.receipts_this_month == 0
    assert account.streak.week_count == 0


def test_receipt_slightly_ahead_of_clock_accepted(engine, account):
    engine.scan_receipt(account, scanned_at=NOW + timedelta(minutes=2))

    assert account.tier_progress.receipts_this_month == 1


def test_ensure_current_month_never_rolls_back(engine, account, config):
    account.tier_progress = TierProgress(config.tiers[1], 6, "2026-03")

    engine.ensure_current_month(account, datetime(2026, 2, 1, tzinfo=timezone.utc))

    assert account.tier_progress == TierProgress(config.tiers[1], 6, "2026-03")


def test_ensure_current_month_stamps_unset_month(engine, config):
    account = engine.open_account("user_3")
    account.tier_progress = TierProgress(config.tiers[0], 2)

    engine.ensure_current_month(account)

    assert account.tier_progress.month == "2026-03"
    assert account.tier_progress.receipts_this_month == 2


def test_refresh_streak_settles_missed_weeks(engine, account, clock):
    account.streak = StreakData(week_count=3, last_qualifying_scan_at=NOW - timedelta(days=14))

    engine.refresh_streak(account)

    assert account.streak.week_count == 0
    assert account.streak.is_at_risk is False


def test_refresh_streak_flags_risk_near_week_end(engine, account, clock):
    account.streak = StreakData(week_count=2, last_qualifying_scan_at=NOW - timedelta(days=7))
    clock.now = datetime(2026, 3, 15, 8, 0, tzinfo=timezone.utc)

    engine.refresh_streak(account)

    assert account.streak.week_count == 2
    assert account.streak.is_at_risk is True


def test_spin_flow(engine, account, events):
    account.spin_pool.grant(2)

    outcome = engine.spin(account)

    assert outcome.result.segment_index == 0
    assert outcome.rotation_degrees == pytest.approx(5 * 360 + 337.5)
    assert account.wallet.balance_cents == 20
    assert account.spin_pool.count == 1
    assert account.wheel.state == WheelState.SPINNING
    assert events[0].type == EventType.SPIN_COMPLETED

    with pytest.raises(SpinInProgressError):
        engine.spin(account)
    assert account.spin_pool.count == 1

    assert engine.complete_spin(account) == outcome.result
    assert account.wheel.state == WheelState.IDLE


def test_unrevealed_spin_blocks_until_timeout(engine, account, clock):
    account.spin_pool.grant(2)
    engine.spin(account)

    clock.advance(seconds=10)
    with pytest.raises(SpinInProgressError):
        engine.spin(account)

    clock.advance(seconds=25)
    engine.spin(account)

    assert account.spin_pool.count == 0
    assert account.wheel.state == WheelState.SPINNING


def test_spin_without_tokens_publishes_nothing(engine, account, events):
    with pytest.raises(NoSpinsAvailableError):
        engine.spin(account)

    assert events == []


def test_redeem_publishes_coupon_and_badge(engine, account, events):
    account.wallet.credit(500)

    outcome = engine.redeem_coupon(account, "c2")

    assert account.wallet.balance_cents == 400
    assert outcome.coupon.coupon_id == "c2"
    assert [b.id for b in outcome.badges_unlocked] == ["coupon_buyer"]
    assert [e.type for e in events] == [EventType.COUPON_REDEEMED, EventType.BADGE_UNLOCKED]


def test_unsubscribe_stops_delivery(engine, account):
    received = []
    engine.subscribe(received.append)
    engine.unsubscribe(received.append)

    engine.scan_receipt(account)

    assert received == []


def test_sync_state_overwrites_aggregates(engine, account):
    engine.sync_state(
        account,
        balance_cents=2500,
        spins_available=4,
        receipts_this_month=8,
        streak_weeks=6,
        has_shield=True,
    )

    assert account.wallet.balance_cents == 2500
    assert account.spin_pool.count == 4
    assert account.tier_progress.current_tier.name == "Gold"
    assert account.streak.week_count == 6
    assert account.streak.has_shield is True


def test_sync_state_rejects_negative_without_partial_update(engine, account):
    with pytest.raises(ValueError):
        engine.sync_state(account, balance_cents=300, spins_available=-1)

    assert account.wallet.balance_cents == 0
    assert account.spin_pool.count == 0


def test_engine_rejects_invalid_config():
    with pytest.raises(InvalidConfigurationError):
        RewardEngine(config=RewardConfig(segments=()))
