"""
Period-over-period performance measures for category, outlet and property reports.

Series are plain lists of daily values ordered oldest first, or dicts keyed by
date. Growth and margin percentages reuse the forecasting helpers so every
report rounds the same way.
"""

from __future__ import annotations

import statistics
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Sequence, Tuple

from .forecasting import mean

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
TREND_THRESHOLD_PCT = 5.0


@dataclass
class DayOfWeekPattern:
    averages: Dict[str, float] = field(default_factory=dict)
    has_pattern: bool = False
    peak_days: List[str] = field(default_factory=list)
    low_days: List[str] = field(default_factory=list)


def half_split_change_pct(values: Sequence[float]) -> float:
    """Change of the second half's mean over the first half's, in percent.

    The middle value of an odd-length series belongs to the second half.
    """
    if len(values) < 2:
        return 0.0
    middle = len(values) // 2
    first, second = mean(values[:middle]), mean(values[middle:])
    return (second - first) / first * 100 if first > 0 else 0.0


def trend_label(change_pct: float, threshold: float = TREND_THRESHOLD_PCT) -> str:
    if change_pct > threshold:
        return "Increasing"
    if change_pct < -threshold:
        return "Decreasing"
    return "Stable"


def cost_performance(growth: float, threshold: float = TREND_THRESHOLD_PCT) -> str:
    """Rising cost is a declining performance."""
    if growth > threshold:
        return "Declining"
    if growth < -threshold:
        return "Improving"
    return "Stable"


def volatility(values: Sequence[float]) -> float:
    return statistics.pstdev(values) if len(values) > 1 else 0.0


def extreme_days(totals: Dict[date, float]) -> Tuple[Tuple[date, float], Tuple[date, float]]:
    """``(highest, lowest)`` day of a non-empty series; ties go to the earliest day."""
    days = sorted(totals)
    highest = max(days, key=lambda d: totals[d])
    lowest = min(days, key=lambda d: totals[d])
    return (highest, totals[highest]), (lowest, totals[lowest])


def weekly_totals(totals: Dict[date, float]) -> List[Tuple[date, float]]:
    """Totals per ISO week, keyed by the week's Monday."""
    buckets: Dict[date, float] = defaultdict(float)
    for day, value in totals.items():
        buckets[day - timedelta(days=day.weekday())] += value
    return sorted(buckets.items())


def monthly_totals(totals: Dict[date, float]) -> List[Tuple[str, float]]:
    """Totals per calendar month, keyed ``YYYY-MM``."""
    buckets: Dict[str, float] = defaultdict(float)
    for day, value in totals.items():
        buckets[day.strftime("%Y-%m")] += value
    return sorted(buckets.items())


def day_of_week_pattern(totals: Dict[date, float]) -> DayOfWeekPattern:
    """Average value per weekday over the days that have data.

    A pattern exists when the weekday averages spread by more than 20% of
    their mean. Peak and low days lie more than 30% of that spread above or
    below the mean.
    """
    by_weekday: Dict[int, List[float]] = defaultdict(list)
    for day, value in totals.items():
        by_weekday[day.weekday()].append(value)
    if not by_weekday:
        return DayOfWeekPattern()

    averages = {WEEKDAYS[i]: mean(by_weekday[i]) for i in sorted(by_weekday)}
    overall = mean(list(averages.values()))
    spread = max(averages.values()) - min(averages.values())
    if overall <= 0 or spread <= overall * 0.2:
        return DayOfWeekPattern(averages=averages)
    return DayOfWeekPattern(
        averages=averages,
        has_pattern=True,
        peak_days=[name for name, value in averages.items() if value > overall + spread * 0.3],
        low_days=[name for name, value in averages.items() if value < overall - spread * 0.3],
    )


def revenue_cost_ratio(revenue: float, cost: float) -> float:
    return revenue / cost if cost > 0 else 0.0


def efficiency_rating(margin: float, ratio: float) -> str:
    """Rate an outlet or property by gross margin and revenue-to-cost ratio."""
    if margin >= 15 and ratio >= 4:
        return "Excellent"
    if margin >= 10 and ratio >= 3:
        return "Good"
    if margin >= 5 and ratio >= 2:
        return "Fair"
    return "Poor"


def efficiency_trend(ratio: float, previous_ratio: float) -> str:
    """Improving or Declining when the ratio moved more than 5% from the previous period."""
    if previous_ratio <= 0:
        return "Stable"
    if ratio > previous_ratio * 1.05:
        return "Improving"
    if ratio < previous_ratio * 0.95:
        return "Declining"
    return "Stable"


def previous_period(start: date, end: date) -> Tuple[date, date]:
    """The period of the same length that ends the day before ``start``."""
    length = (end - start).days + 1
    return start - timedelta(days=length), start - timedelta(days=1)


def share(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0
