"""
Trend and seasonality forecasting for daily cost and revenue series.

The model is deliberately simple: a least-squares line through the history
gives the trend, a day-of-week profile gives the seasonal multiplier, and the
sample standard deviation drives the confidence band. All functions are pure
and operate on plain lists of floats ordered oldest first.
"""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Sequence

SEASONAL_PERIOD = 7
Z_95 = 1.96


@dataclass
class Seasonality:
    """Seasonal profile of a series.

    ``pattern[i]`` is the mean of phase ``i`` relative to the mean of all
    phases. ``strength`` is the coefficient of variation of the phase means,
    capped at 100.
    """

    strength: float = 0.0
    pattern: List[float] = field(default_factory=list)


@dataclass
class ForecastPoint:
    date: date
    predicted: float
    confidence: float
    lower_bound: float
    upper_bound: float


@dataclass
class SeriesForecast:
    """Forecast of one series together with its descriptive summary."""

    historical_average: float
    historical_trend: str
    seasonality_pattern: str
    peak_periods: List[str]
    low_periods: List[str]
    forecast: List[ForecastPoint]
    accuracy: float
    volatility: float
    confidence_level: float
    risk_factors: List[str]
    opportunities: List[str]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: Sequence[float]) -> float:
    return statistics.fmean(values) if values else 0.0


def sample_std(values: Sequence[float]) -> float:
    """Sample standard deviation (n - 1 denominator), 0 for fewer than two values."""
    return statistics.stdev(values) if len(values) > 1 else 0.0


def trend_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index; 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return statistics.linear_regression(range(len(values)), values).slope


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """Trailing moving average; the result has ``len(values) - window + 1`` items."""
    if window <= 0:
        raise ValueError("window must be positive")
    return [statistics.fmean(values[i - window + 1 : i + 1]) for i in range(window - 1, len(values))]


def detect_seasonality(values: Sequence[float], period: int = SEASONAL_PERIOD) -> Seasonality:
    """Profile a series by phase of ``period``.

    Fewer than two full periods of data, or an all-zero series, yields no
    seasonality.
    """
    if len(values) < period * 2:
        return Seasonality()

    phase_means = [mean(values[i::period]) for i in range(period)]
    average = mean(phase_means)
    if average == 0:
        return Seasonality()

    strength = min(100.0, statistics.pstdev(phase_means) / average * 100)
    return Seasonality(strength=strength, pattern=[v / average for v in phase_means])


def trend_direction(slope: float, average: float) -> str:
    """Increasing or Decreasing when the slope exceeds 1% of the mean, else Stable."""
    if abs(slope) > average * 0.01:
        return "Increasing" if slope > 0 else "Decreasing"
    return "Stable"


def seasonality_label(strength: float) -> str:
    if strength > 20:
        return "Strong"
    if strength > 10:
        return "Moderate"
    if strength > 5:
        return "Weak"
    return "None"


def _relative_spread(std: float, average: float) -> float:
    if average > 0:
        return std / average
    return 0.0 if std == 0 else math.inf


def forecast_series(values: Sequence[float], start: date, days: int) -> List[ForecastPoint]:
    """Project ``values`` forward ``days`` days starting at ``start``.

    Args:
        values: Historical daily values, oldest first
        start: Date of the first forecast point
        days: Number of forecast points

    Returns:
        One ForecastPoint per day
    """
    average = mean(values)
    slope = trend_slope(values)
    pattern = detect_seasonality(values).pattern
    std = sample_std(values)
    confidence = _clamp(100 - _relative_spread(std, average) * 100, 20, 95)

    points: List[ForecastPoint] = []
    for index in range(days):
        trend = average + slope * (len(values) + index)
        multiplier = pattern[index % SEASONAL_PERIOD] if pattern else 1.0
        # A zero phase mean falls back to the plain trend
        predicted = max(0.0, trend * (multiplier or 1.0))
        margin = predicted * (1 - confidence / 100) * Z_95
        points.append(
            ForecastPoint(
                date=start + timedelta(days=index),
                predicted=predicted,
                confidence=confidence,
                lower_bound=max(0.0, predicted - margin),
                upper_bound=predicted + margin,
            )
        )
    return points


def summarize_series(values: Sequence[float], start: date, days: int) -> SeriesForecast:
    """Forecast a series and describe its trend, seasonality and risk."""
    average = mean(values)
    slope = trend_slope(values)
    trend = trend_direction(slope, average)
    seasonality = detect_seasonality(values)
    label = seasonality_label(seasonality.strength)
    forecast = forecast_series(values, start, days)

    accuracy = _clamp(100 - seasonality.strength * 0.5, 60, 95)
    volatility = _relative_spread(sample_std(values), average) * 100 if len(values) > 1 else 0.0
    if math.isinf(volatility):
        volatility = 0.0

    risk_factors: List[str] = []
    opportunities: List[str] = []
    if volatility > 30:
        risk_factors.append("High cost volatility detected")
    if trend == "Increasing":
        risk_factors.append("Upward cost trend may impact margins")
    if label == "Strong":
        opportunities.append("Strong seasonal patterns enable better planning")
    if accuracy > 80:
        opportunities.append("High forecast accuracy supports strategic decisions")

    return SeriesForecast(
        historical_average=average,
        historical_trend=trend,
        seasonality_pattern=label,
        peak_periods=[f"Day {i + 1}" for i, v in enumerate(seasonality.pattern) if v > 1.1],
        low_periods=[f"Day {i + 1}" for i, v in enumerate(seasonality.pattern) if v < 0.9],
        forecast=forecast,
        accuracy=accuracy,
        volatility=volatility,
        confidence_level=mean([p.confidence for p in forecast]),
        risk_factors=risk_factors,
        opportunities=opportunities,
    )


def margin_pct(revenue: float, cost: float) -> float:
    """Gross margin as a percentage of revenue, 0 when there is no revenue."""
    return (revenue - cost) / revenue * 100 if revenue > 0 else 0.0


def growth_pct(new: float, old: float) -> float:
    return (new - old) / old * 100 if old > 0 else 0.0


def outlet_risk_level(forecasted_margin: float) -> str:
    if forecasted_margin < 10:
        return "High"
    if forecasted_margin < 20:
        return "Medium"
    return "Low"
