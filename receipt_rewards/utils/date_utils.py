"""Date manipulation utilities"""

from datetime import date, datetime, time, timedelta


def week_start(moment: datetime) -> date:
    """Monday of the ISO week containing moment"""
    day = moment.date()
    return day - timedelta(days=day.weekday())


def week_end(moment: datetime) -> datetime:
    """Start of the following Monday, in moment's timezone"""
    next_monday = week_start(moment) + timedelta(days=7)
    return datetime.combine(next_monday, time.min, tzinfo=moment.tzinfo)


def weeks_between(earlier: date, later: date) -> int:
    """Whole weeks between two week-start dates"""
    return (later - earlier).days // 7


def month_key(moment: datetime) -> str:
    """YYYY-MM key used to bucket monthly receipt counts"""
    return moment.strftime("%Y-%m")
