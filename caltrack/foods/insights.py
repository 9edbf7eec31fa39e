# -*- coding: utf-8 -*-
"""Foods — daily/weekly aggregation in the client's time zone.

Entries are bucketed by the calendar day of ``eaten_at`` in the requested
zone. Weeks run Monday through Sunday.
"""

from __future__ import annotations

from datetime import date, timedelta, tzinfo
from typing import Dict, Iterable, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import DailySummary, DayGroup, FoodEntry, WeekDayStats, WeeklySummary
from .storage import from_epoch_ms


def resolve_zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown time zone: {name}") from exc


def local_day(entry: FoodEntry, zone: tzinfo) -> date:
    return from_epoch_ms(entry.timestamp).astimezone(zone).date()


def day_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%a}, {day:%b} {day.day}"


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_label(start: date, end: date) -> str:
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"


def _percentage(calories: int, goal: int) -> float:
    if goal <= 0:
        return 0.0
    return round(calories / goal * 100, 1)


def _group(entries: Iterable[FoodEntry], zone: tzinfo) -> Dict[date, List[FoodEntry]]:
    by_day: Dict[date, List[FoodEntry]] = {}
    for entry in entries:
        by_day.setdefault(local_day(entry, zone), []).append(entry)
    return by_day


def daily_summary(entries: Iterable[FoodEntry], *, day: date, today: date, zone: tzinfo, goal: int) -> DailySummary:
    day_entries = _group(entries, zone).get(day, [])
    calories = sum(e.calories for e in day_entries)
    protein = sum(e.protein for e in day_entries)
    return DailySummary(
        date=day.isoformat(),
        label=day_label(day, today),
        calories=calories,
        protein=round(protein, 1),
        goal=goal,
        percentage=min(_percentage(calories, goal), 100.0),
        remaining=max(goal - calories, 0),
        within_goal=calories <= goal,
        entry_count=len(day_entries),
    )


def group_by_day(entries: Iterable[FoodEntry], *, today: date, zone: tzinfo, goal: int) -> List[DayGroup]:
    """Days that have entries, newest first; entries inside a day newest first."""
    groups: List[DayGroup] = []
    by_day = _group(entries, zone)
    for day in sorted(by_day, reverse=True):
        day_entries = sorted(by_day[day], key=lambda e: e.timestamp, reverse=True)
        calories = sum(e.calories for e in day_entries)
        groups.append(
            DayGroup(
                date=day.isoformat(),
                label=day_label(day, today),
                calories=calories,
                protein=round(sum(e.protein for e in day_entries), 1),
                percentage=_percentage(calories, goal),
                within_goal=calories <= goal,
                entries=day_entries,
            )
        )
    return groups


def weekly_summary(entries: Iterable[FoodEntry], *, day: date, today: date, zone: tzinfo, goal: int) -> WeeklySummary:
    start = week_start(day)
    end = start + timedelta(days=6)
    by_day = _group(entries, zone)

    days: List[WeekDayStats] = []
    for offset in range(7):
        d = start + timedelta(days=offset)
        day_entries = by_day.get(d, [])
        calories = sum(e.calories for e in day_entries)
        days.append(
            WeekDayStats(
                date=d.isoformat(),
                label=day_label(d, today),
                calories=calories,
                protein=round(sum(e.protein for e in day_entries), 1),
                over_goal=calories - goal,
                is_over_goal=calories > goal,
            )
        )

    weekly_calories = sum(d.calories for d in days)
    weekly_protein = sum(e.protein for d in by_day if start <= d <= end for e in by_day[d])

    highest = days[0]
    for stats in days[1:]:
        if stats.calories > highest.calories:
            highest = stats

    return WeeklySummary(
        week_start=start.isoformat(),
        week_end=end.isoformat(),
        label=week_label(start, end),
        is_current_week=start == week_start(today),
        calories=weekly_calories,
        protein=round(weekly_protein, 1),
        goal=goal,
        weekly_goal=goal * 7,
        average_daily_calories=round(weekly_calories / 7, 1),
        days_over_goal=sum(1 for d in days if d.is_over_goal),
        days_under_goal=sum(1 for d in days if not d.is_over_goal and d.calories > 0),
        highest_day=highest,
        days=days,
    )
