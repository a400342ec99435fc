"""
Weekly scan streak tracking.

A streak counts consecutive calendar weeks (Monday to Sunday) with at least one
qualifying receipt scan. Weeks are grouped into cycles of `cycle_length`; the
last week of each cycle pays cash, the others pay spins. Missing a week resets
the streak unless a shield absorbs the miss.
"""

from dataclasses import replace
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from receipt_rewards.domain.exceptions import InvalidConfigurationError
from receipt_rewards.domain.models import (
    CycleEntry,
    StreakData,
    StreakSignal,
    WeeklyReward,
    WeeklyRewardTable,
)
from receipt_rewards.utils.date_utils import week_end, week_start, weeks_between


def validate_weekly_rewards(table: WeeklyRewardTable) -> None:
    if table.cycle_length <= 0:
        raise InvalidConfigurationError("Streak cycle length must be positive")
    if not table.cash_ladder_cents:
        raise InvalidConfigurationError("Streak cash ladder is empty")
    if any(amount < 0 for amount in table.cash_ladder_cents):
        raise InvalidConfigurationError("Streak cash rewards must be non-negative")
    if table.base_spins < 0 or table.spins_step_weeks <= 0:
        raise InvalidConfigurationError("Streak spin rewards are misconfigured")


def _cash_label(cents: int) -> str:
    if cents % 100 == 0:
        return f"€{cents // 100}"
    return f"€{cents / 100:.2f}"


def weekly_reward(week: int, table: WeeklyRewardTable) -> WeeklyReward:
    """
    Reward paid for reaching streak week `week`.

    Every cycle_length-th week pays the next rung of the cash ladder (the last
    rung repeats once the ladder runs out). Other weeks pay
    base_spins + week // spins_step_weeks spins.
    """
    if week > 0 and week % table.cycle_length == 0:
        rung = min(week // table.cycle_length, len(table.cash_ladder_cents))
        cents = table.cash_ladder_cents[rung - 1]
        return WeeklyReward(week=week, label=_cash_label(cents), is_cash=True, cash_cents=cents)

    spins = table.base_spins + week // table.spins_step_weeks
    label = f"{spins} spin{'s' if spins != 1 else ''}"
    return WeeklyReward(week=week, label=label, is_cash=False, spins=spins)


def last_cash_week(streak: StreakData, table: WeeklyRewardTable) -> int:
    return (streak.week_count // table.cycle_length) * table.cycle_length


def current_week_index(streak: StreakData, table: WeeklyRewardTable) -> int:
    """Weeks completed in the active cycle (0 .. cycle_length - 1)"""
    return streak.week_count - last_cash_week(streak, table)


def current_cycle(streak: StreakData, table: WeeklyRewardTable) -> List[CycleEntry]:
    """The active cycle, e.g. week_count 10 -> streak weeks 9, 10, 11, 12"""
    start = last_cash_week(streak, table) + 1
    entries = []
    for position in range(table.cycle_length):
        week = start + position
        reward = weekly_reward(week, table)
        entries.append(
            CycleEntry(
                week=position + 1,
                streak_week=week,
                label=reward.label,
                is_cash=reward.is_cash,
                completed=week <= streak.week_count,
            )
        )
    return entries


def next_cash_week(streak: StreakData, table: WeeklyRewardTable) -> int:
    """Cycle position (1-based) of the next uncompleted cash week"""
    for entry in current_cycle(streak, table):
        if entry.is_cash and not entry.completed:
            return entry.week
    return table.cycle_length


def weeks_until_cash(streak: StreakData, table: WeeklyRewardTable) -> int:
    return max(0, next_cash_week(streak, table) - current_week_index(streak, table))


def next_week_reward(streak: StreakData, table: WeeklyRewardTable) -> WeeklyReward:
    return weekly_reward(streak.week_count + 1, table)


def is_at_risk(
    now: datetime,
    last_qualifying_scan_at: Optional[datetime],
    threshold: timedelta,
) -> bool:
    """True iff nothing was scanned this week and less than `threshold` of it remains"""
    if last_qualifying_scan_at is not None and week_start(last_qualifying_scan_at) >= week_start(now):
        return False
    return week_end(now) - now < threshold


def refresh_risk(streak: StreakData, now: datetime, threshold: timedelta) -> StreakData:
    """Recompute the at-risk flag; an empty streak has nothing to lose"""
    at_risk = streak.week_count > 0 and is_at_risk(now, streak.last_qualifying_scan_at, threshold)
    return replace(streak, is_at_risk=at_risk)


def settle_missed_weeks(streak: StreakData, now: datetime) -> StreakData:
    """
    Apply the outcome of weeks that ended without a qualifying scan.

    Requirements:
    - one missed week with a shield: shield consumed, week_count kept
    - any missed week without a shield: week_count reset to 0
    - two or more missed weeks: the shield covers only the first, streak resets
    - settling twice for the same week is a no-op
    """
    current = week_start(now)
    previous = current - timedelta(days=7)

    references = [d for d in (streak.last_settled_week,) if d is not None]
    if streak.last_qualifying_scan_at is not None:
        references.append(week_start(streak.last_qualifying_scan_at))
    if not references:
        return streak

    missed = weeks_between(max(references), current) - 1
    if missed <= 0:
        return streak

    if streak.week_count == 0:
        return replace(streak, last_settled_week=previous)

    if streak.has_shield and missed == 1:
        return replace(streak, has_shield=False, last_settled_week=previous)

    return replace(streak, week_count=0, has_shield=False, last_settled_week=previous)


def record_qualifying_scan(
    streak: StreakData, now: datetime, table: WeeklyRewardTable
) -> Tuple[StreakData, Optional[StreakSignal]]:
    """
    Register a receipt scan at `now`.

    The first scan of a week advances week_count and returns the reward signal
    for the reached week (cash on cash weeks, spins otherwise). Further scans
    in the same week return no signal.
    """
    settled = settle_missed_weeks(streak, now)

    last = settled.last_qualifying_scan_at
    if last is not None and week_start(last) >= week_start(now):
        return replace(settled, is_at_risk=False), None

    week = settled.week_count + 1
    reward = weekly_reward(week, table)
    signal = StreakSignal(
        week=week,
        label=reward.label,
        cash_cents=reward.cash_cents,
        spins=reward.spins,
    )
    advanced = replace(
        settled,
        week_count=week,
        last_qualifying_scan_at=now,
        last_settled_week=week_start(now),
        is_at_risk=False,
    )
    return advanced, signal
