"""Receipt reward calculation - core business logic for scan rewards"""

from random import Random
from typing import Sequence

from receipt_rewards.domain.account import RewardAccount
from receipt_rewards.domain.catalog import RewardConfig, validate_mystery_bonus_table
from receipt_rewards.domain.models import (
    MysteryBonus,
    MysteryBonusKind,
    MysteryBonusOption,
    Receipt,
    RewardEvent,
)
from receipt_rewards.domain.money import apply_multiplier, saturating_add
from receipt_rewards.domain.streaks import record_qualifying_scan
from receipt_rewards.domain.tiers import record_receipt_scanned


def roll_mystery_bonus(table: Sequence[MysteryBonusOption], rng: Random) -> MysteryBonus:
    """
    Draw the secondary reward for a receipt.

    Same weighted walk as the wheel; cash rows then pick one of their amounts
    uniformly. "Nothing" is an ordinary outcome.
    """
    validate_mystery_bonus_table(table)

    positive = [option for option in table if option.weight > 0]
    total_weight = sum(option.weight for option in positive)
    r = rng.uniform(0, total_weight)

    chosen = positive[-1]
    cumulative = 0.0
    for option in positive:
        cumulative += option.weight
        if cumulative > r:
            chosen = option
            break

    if chosen.kind == MysteryBonusKind.CASH_BONUS:
        return MysteryBonus.cash_bonus(rng.choice(chosen.amounts_cents))
    if chosen.kind == MysteryBonusKind.SPIN_TOKEN:
        return MysteryBonus.spin_token()
    return MysteryBonus.nothing()


def on_receipt_scanned(
    account: RewardAccount,
    receipt: Receipt,
    config: RewardConfig,
    rng: Random,
) -> RewardEvent:
    """
    Main entry point: price a scanned receipt and apply it to the account.

    Flow:
    1. Advance tier progress and the weekly streak
    2. Base cash = base_receipt_cash_cents x tier multiplier
    3. Spins = tier spins_per_receipt + streak spin reward
    4. Roll the mystery bonus
    5. Credit wallet (base + crossing bonus + streak cash + mystery cash),
       grant spins (+1 for a mystery spin token)

    Every step that can fail runs before the account is touched, so the
    account either reflects the whole bundle or nothing.
    """
    # 1. Advance tier and streak (pure, nothing assigned yet)
    progress, perks = record_receipt_scanned(account.tier_progress, config.tiers)
    streak, signal = record_qualifying_scan(account.streak, receipt.scanned_at, config.weekly_rewards)

    # 2. Base cash
    base_cash = apply_multiplier(config.base_receipt_cash_cents, perks.cash_multiplier)

    # 3. Spins
    spins = perks.spins_per_receipt + (signal.spins if signal else 0)

    # 4. Mystery bonus
    mystery = roll_mystery_bonus(config.mystery_bonus_table, rng)

    cash_total = base_cash + perks.crossing_bonus_cents
    if signal:
        cash_total = saturating_add(cash_total, signal.cash_cents)
    if mystery.kind == MysteryBonusKind.CASH_BONUS:
        cash_total = saturating_add(cash_total, mystery.amount_cents)
    if mystery.kind == MysteryBonusKind.SPIN_TOKEN:
        spins += 1

    # 5. Commit
    account.tier_progress = progress
    account.streak = streak
    account.wallet.credit(cash_total)
    account.spin_pool.grant(spins)

    return RewardEvent(
        coins_awarded_cents=cash_total,
        spins_awarded=spins,
        mystery_bonus=mystery,
        base_cash_cents=base_cash,
        streak_signal=signal,
        tier=progress.current_tier,
        tier_changed=perks.tier_changed,
        store_name=receipt.store_name,
        receipt_amount_cents=receipt.amount_cents,
    )
