#!/usr/bin/env python

"""
    Signup analytics for zerolist: windowed counts, period-over-period
    changes, zero-filled daily series, hourly and referral breakdowns.

    Every window is a range of whole UTC calendar days.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
from typing import Optional
from sqlalchemy import case, extract, and_
from sqlalchemy.sql import func
from zerolist.core.db import session as db
from zerolist.core.models import Waitlist, Signup, STATUSES, ACTIVE_STATUSES
from zerolist.core.utils import isoformat, round_half_up, utcnow
from zerolist.core.exceptions import ValidationError

DEFAULT_DAYS = 30
MAX_DAYS = 366 * 5
TOP_WAITLISTS = 5
TOP_SOURCES = 10
DIRECT = "direct"

ONE_DAY = datetime.timedelta(days=1)
ONE_MS = datetime.timedelta(milliseconds=1)

# SUM of signups that count as confirmed
confirmed_sum = func.sum(case((Signup.status.in_(ACTIVE_STATUSES), 1), else_=0))


def percent_change(current: int, previous: int) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)

def rate(part: int, total: int) -> int:
    """Whole-number percentage, 0 for an empty total."""
    return round_half_up(part / total * 100) if total else 0


class Period:
    """An inclusive range of UTC calendar days."""

    def __init__(self, first: datetime.date, last: datetime.date):
        if first > last:
            raise ValidationError("'from' must be on or before 'to'")
        if (last - first).days >= MAX_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_DAYS} days")
        if last == datetime.date.max:
            raise ValidationError("'to' is out of range")
        self.first = first
        self.last = last

    @classmethod
    def parse(cls, from_: Optional[str] = None, to: Optional[str] = None,
              today: Optional[datetime.date] = None) -> 'Period':
        """Builds a period from ISO dates, defaulting to the trailing 30 days."""
        try:
            last = datetime.date.fromisoformat(to) if to else (today or utcnow().date())
            first = (datetime.date.fromisoformat(from_) if from_
                     else last - datetime.timedelta(days=DEFAULT_DAYS))
        except (ValueError, OverflowError):
            raise ValidationError("Dates must be ISO calendar dates (YYYY-MM-DD)")
        return cls(first, last)

    @property
    def days(self) -> int:
        return (self.last - self.first).days + 1

    @property
    def start(self) -> datetime.datetime:
        return datetime.datetime.combine(self.first, datetime.time.min)

    @property
    def end(self) -> datetime.datetime:
        """Exclusive upper bound: midnight after the last day."""
        return datetime.datetime.combine(self.last + ONE_DAY, datetime.time.min)

    def previous(self) -> 'Period':
        """The period of equal length immediately before this one."""
        try:
            return Period(self.first - datetime.timedelta(days=self.days), self.first - ONE_DAY)
        except OverflowError:
            raise ValidationError("No earlier period to compare against")

    def dates(self):
        for offset in range(self.days):
            yield (self.first + datetime.timedelta(days=offset)).isoformat()

    def contains(self, column):
        return and_(column >= self.start, column < self.end)

    def to_dict(self) -> dict:
        return {"from": isoformat(self.start), "to": isoformat(self.end - ONE_MS)}


def local_midnight_utc(now: Optional[datetime.datetime] = None) -> datetime.datetime:
    """Start of the server's local day, as naive UTC."""
    local = (now or datetime.datetime.now().astimezone()).astimezone()
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def _scoped(query, waitlist_id=None):
    if waitlist_id is not None:
        query = query.filter(Signup.waitlist_id == waitlist_id)
    return query

def status_counts(waitlist_id=None, period: Optional[Period] = None) -> dict:
    counts = dict.fromkeys(("total",) + STATUSES, 0)
    query = _scoped(db.query(Signup.status, func.count(Signup.id)), waitlist_id)
    if period is not None:
        query = query.filter(period.contains(Signup.created_at))
    for status, count in query.group_by(Signup.status):
        counts[status] = count
        counts["total"] += count
    return counts

def totals(waitlist_id=None, period: Optional[Period] = None) -> dict:
    """`{total, confirmed}` where confirmed includes invited."""
    counts = status_counts(waitlist_id, period)
    return {
        "total": counts["total"],
        "confirmed": sum(counts[s] for s in ACTIVE_STATUSES),
    }

def daily_signups(period: Period, waitlist_id=None) -> list:
    """One `{date, count, confirmed}` entry per day of the period, gaps zero-filled."""
    day = func.date(Signup.created_at)
    query = _scoped(
        db.query(day, func.count(Signup.id), confirmed_sum)
        .filter(period.contains(Signup.created_at)),
        waitlist_id,
    ).group_by(day)
    # Postgres returns dates, SQLite returns strings
    found = {str(d): (count, confirmed or 0) for d, count, confirmed in query}
    series = []
    for date in period.dates():
        count, confirmed = found.get(date, (0, 0))
        series.append({"date": date, "count": count, "confirmed": confirmed})
    return series

def hourly_distribution(period: Period, waitlist_id=None) -> list:
    hour = extract("hour", Signup.created_at)
    query = _scoped(
        db.query(hour, func.count(Signup.id))
        .filter(period.contains(Signup.created_at)),
        waitlist_id,
    ).group_by(hour).order_by(hour)
    return [{"hour": int(h), "count": count} for h, count in query]

def sources(period: Period, waitlist_id=None, limit: Optional[int] = None) -> list:
    count = func.count(Signup.id)
    query = _scoped(
        db.query(Signup.referral_source, count, confirmed_sum)
        .filter(period.contains(Signup.created_at)),
        waitlist_id,
    ).group_by(Signup.referral_source).order_by(count.desc(), Signup.referral_source)
    if limit:
        query = query.limit(limit)
    return [{
        "source": source or DIRECT,
        "count": n,
        "confirmed": confirmed or 0,
        "rate": rate(confirmed or 0, n),
    } for source, n, confirmed in query]

def today_signups(waitlist_id=None, now: Optional[datetime.datetime] = None) -> int:
    query = _scoped(db.query(func.count(Signup.id)), waitlist_id)
    return query.filter(Signup.created_at >= local_midnight_utc(now)).scalar() or 0

def top_waitlists(period: Period, limit: int = TOP_WAITLISTS) -> list:
    count = func.count(Signup.id)
    query = db.query(
        Waitlist.id, Waitlist.name, Waitlist.slug, Waitlist.primary_color,
        count, confirmed_sum,
    ).outerjoin(Signup, and_(
        Signup.waitlist_id == Waitlist.id,
        period.contains(Signup.created_at),
    )).group_by(
        Waitlist.id, Waitlist.name, Waitlist.slug,
        Waitlist.primary_color, Waitlist.created_at,
    ).order_by(count.desc(), Waitlist.created_at).limit(limit)
    return [{
        "id": id,
        "name": name,
        "slug": slug,
        "primaryColor": color,
        "signups": n,
        "confirmed": confirmed or 0,
        "rate": rate(confirmed or 0, n),
    } for id, name, slug, color, n, confirmed in query]

def _confirmation_rate(current: dict, previous: dict) -> dict:
    now, before = rate(current["confirmed"], current["total"]), rate(previous["confirmed"], previous["total"])
    return {"current": now, "previous": before, "change": now - before}


def waitlist_stats(waitlist: Waitlist, period: Period, compare: bool = False) -> dict:
    current = status_counts(waitlist.id, period)
    previous = (status_counts(waitlist.id, period.previous()) if compare
                else dict.fromkeys(("total",) + STATUSES, 0))
    all_time = status_counts(waitlist.id)

    def confirmed(counts):
        return sum(counts[s] for s in ACTIVE_STATUSES)

    return {
        "period": period.to_dict(),
        "counts": {
            "current": current,
            "previous": previous,
            "allTime": all_time,
            "change": {
                "total": percent_change(current["total"], previous["total"]),
                "confirmed": percent_change(confirmed(current), confirmed(previous)),
            },
        },
        "todaySignups": today_signups(waitlist.id),
        "confirmationRate": _confirmation_rate(
            {"total": current["total"], "confirmed": confirmed(current)},
            {"total": previous["total"], "confirmed": confirmed(previous)},
        ),
        "dailySignups": daily_signups(period, waitlist.id),
        "hourlyDistribution": hourly_distribution(period, waitlist.id),
        "sources": sources(period, waitlist.id),
    }


def dashboard_stats(period: Period, compare: bool = False) -> dict:
    current = totals(period=period)
    previous = totals(period=period.previous()) if compare else {"total": 0, "confirmed": 0}
    all_time = totals()

    return {
        "period": period.to_dict(),
        "overview": {
            "waitlists": db.query(func.count(Waitlist.id)).scalar() or 0,
            "signups": {
                "current": current["total"],
                "previous": previous["total"],
                "allTime": all_time["total"],
                "change": percent_change(current["total"], previous["total"]),
            },
            "confirmed": {
                "current": current["confirmed"],
                "previous": previous["confirmed"],
                "allTime": all_time["confirmed"],
                "change": percent_change(current["confirmed"], previous["confirmed"]),
            },
            "confirmationRate": _confirmation_rate(current, previous),
        },
        "dailySignups": daily_signups(period),
        "topWaitlists": top_waitlists(period),
        "sources": sources(period, limit=TOP_SOURCES),
    }
