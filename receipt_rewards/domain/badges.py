"""Achievement badges and the activity counters that unlock them"""

from datetime import datetime
from typing import Callable, List, Tuple

from receipt_rewards.domain.account import RewardAccount
from receipt_rewards.domain.models import (
    ActivityStats,
    Badge,
    BadgeUnlock,
    Receipt,
    SpinResult,
)
from receipt_rewards.domain.money import euros_to_cents

BIG_SPENDER_CENTS = 10_000  # €100 receipt
LUCKY_SPIN_CENTS = 1_000  # €10 win
NIGHT_OWL_HOUR = 22
COLLECTOR_STORES = 5

BadgeRule = Tuple[Badge, Callable[[ActivityStats], bool]]

BADGE_RULES: Tuple[BadgeRule, ...] = (
    (Badge("first_scan", "First Scan", "Upload your first receipt"),
     lambda s: s.receipts_scanned >= 1),
    (Badge("streak_2", "Getting Started", "Reach a 2-week streak"),
     lambda s: s.max_streak_weeks >= 2),
    (Badge("streak_4", "Consistent", "Reach a 4-week streak"),
     lambda s: s.max_streak_weeks >= 4),
    (Badge("silver_tier", "Silver Member", "Reach Silver tier"),
     lambda s: "Silver" in s.tiers_reached),
    (Badge("big_spender", "Big Spender", "Scan a receipt over €100"),
     lambda s: s.largest_receipt_cents > BIG_SPENDER_CENTS),
    (Badge("lucky_spin", "Lucky Spin", "Win €10 or more on the wheel"),
     lambda s: s.best_spin_cents >= LUCKY_SPIN_CENTS),
    (Badge("streak_8", "Dedicated", "Reach an 8-week streak"),
     lambda s: s.max_streak_weeks >= 8),
    (Badge("gold_tier", "Gold Member", "Reach Gold tier"),
     lambda s: "Gold" in s.tiers_reached),
    (Badge("coupon_buyer", "Deal Hunter", "Redeem your first coupon"),
     lambda s: s.coupons_redeemed >= 1),
    (Badge("jackpot", "Jackpot!", "Hit the €1000 jackpot"),
     lambda s: s.jackpots_won >= 1),
    (Badge("night_scanner", "Night Owl", "Upload a receipt after 10 PM"),
     lambda s: s.night_scans >= 1),
    (Badge("collector", "Collector", "Scan receipts from 5 different stores"),
     lambda s: len(s.stores_seen) >= COLLECTOR_STORES),
)

ALL_BADGES: Tuple[Badge, ...] = tuple(badge for badge, _ in BADGE_RULES)


def record_receipt_activity(account: RewardAccount, receipt: Receipt) -> None:
    stats = account.stats
    stats.receipts_scanned += 1
    if receipt.store_name and receipt.store_name not in stats.stores_seen:
        stats.stores_seen.append(receipt.store_name)
    if receipt.amount_cents is not None:
        stats.largest_receipt_cents = max(stats.largest_receipt_cents, receipt.amount_cents)
    if receipt.scanned_at.hour >= NIGHT_OWL_HOUR:
        stats.night_scans += 1
    stats.max_streak_weeks = max(stats.max_streak_weeks, account.streak.week_count)
    tier_name = account.tier_progress.current_tier.name
    if tier_name not in stats.tiers_reached:
        stats.tiers_reached.append(tier_name)


def record_spin_activity(account: RewardAccount, result: SpinResult) -> None:
    stats = account.stats
    stats.best_spin_cents = max(stats.best_spin_cents, euros_to_cents(result.value_euros))
    if result.is_jackpot:
        stats.jackpots_won += 1


def record_coupon_activity(account: RewardAccount) -> None:
    account.stats.coupons_redeemed += 1


def evaluate_badges(account: RewardAccount, now: datetime) -> List[Badge]:
    """Unlock every badge whose rule now holds; returns only the new ones"""
    unlocked = []
    for badge, rule in BADGE_RULES:
        if badge.id in account.badges:
            continue
        if rule(account.stats):
            account.badges[badge.id] = BadgeUnlock(badge_id=badge.id, unlocked_at=now)
            unlocked.append(badge)
    return unlocked
