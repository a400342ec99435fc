"""Prometheus metrics for monitoring reward issuance, spins, and redemptions"""

from prometheus_client import Counter, Histogram

# Receipt rewards
receipts_rewarded_counter = Counter(
    "rewards_receipts_total",
    "Receipts that produced a reward bundle",
)

cash_issued_counter = Counter(
    "rewards_cash_issued_cents_total",
    "Cash credited to wallets in cents",
    ["source"],  # receipt | spin
)

spins_granted_counter = Counter(
    "rewards_spins_granted_total",
    "Spin tokens granted",
)

mystery_bonus_counter = Counter(
    "rewards_mystery_bonus_total",
    "Mystery bonus outcomes",
    ["kind"],  # cash_bonus | spin_token | nothing
)

# Wheel
spin_outcome_counter = Counter(
    "rewards_spin_outcomes_total",
    "Resolved spins by segment",
    ["segment", "jackpot"],
)

spin_rejections_counter = Counter(
    "rewards_spin_rejections_total",
    "Spin requests rejected",
    ["reason"],  # no_spins | in_progress
)

# Progression
tier_change_counter = Counter(
    "rewards_tier_changes_total",
    "Tier transitions",
    ["tier"],
)

badge_unlock_counter = Counter(
    "rewards_badges_unlocked_total",
    "Badges unlocked",
    ["badge"],
)

# Coupons
coupon_redemption_counter = Counter(
    "rewards_coupon_redemptions_total",
    "Coupon redemption attempts",
    ["outcome"],  # redeemed | insufficient_funds | already_redeemed | expired | not_found
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_receipt_reward(coins_awarded_cents: int, spins_awarded: int, mystery_kind: str) -> None:
    """Record the reward bundle issued for one receipt"""
    receipts_rewarded_counter.inc()
    cash_issued_counter.labels(source="receipt").inc(coins_awarded_cents)
    spins_granted_counter.inc(spins_awarded)
    mystery_bonus_counter.labels(kind=mystery_kind).inc()


def record_spin(segment_index: int, value_cents: int, is_jackpot: bool) -> None:
    spin_outcome_counter.labels(segment=str(segment_index), jackpot=str(is_jackpot).lower()).inc()
    cash_issued_counter.labels(source="spin").inc(value_cents)
