from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any

import numpy as np
import pandas as pd

from route_profitability.performance_pipeline import resolve_rng

logger = logging.getLogger(__name__)

DEFAULT_FORECAST_HORIZON_DAYS = 90
FALLBACK_ROUTE_ID = "LON-PAR"
SUMMARY_HORIZONS = (30, 60, 90)

# Monthly baselines for the routes the forecast model has been calibrated on.
# ``declining`` selects the leisure decline profile; the rest grow as business routes.
FORECAST_BASELINES: dict[str, dict[str, Any]] = {
    "LON-PAR": {"passengers": 3500, "revenue": 210_000, "load_factor": 78, "declining": False},
    "LON-NYC": {"passengers": 3200, "revenue": 580_000, "load_factor": 82, "declining": False},
    "BRS-PRG": {"passengers": 1000, "revenue": 65_000, "load_factor": 45, "declining": True},
    "MIA-NYC": {"passengers": 2900, "revenue": 435_000, "load_factor": 75, "declining": False},
}

RISK_ASSESSMENTS: dict[str, dict[str, Any]] = {
    "LON-PAR": {
        "volatility": "Low",
        "competition_intensity": "High",
        "seasonal_impact": "Medium",
        "overall_risk": "Medium",
        "risk_score": 35,
    },
    "BRS-PRG": {
        "volatility": "High",
        "competition_intensity": "Low",
        "seasonal_impact": "High",
        "overall_risk": "High",
        "risk_score": 75,
    },
    "LON-NYC": {
        "volatility": "Medium",
        "competition_intensity": "High",
        "seasonal_impact": "Low",
        "overall_risk": "Medium",
        "risk_score": 45,
    },
}

FORECAST_COLUMNS = [
    "date",
    "day",
    "passengers",
    "revenue",
    "load_factor",
    "passengers_lower",
    "passengers_upper",
    "revenue_lower",
    "revenue_upper",
    "profit_probability",
]


def _lookup_with_fallback(table: dict[str, Any], route_id: str, label: str) -> dict[str, Any]:
    if route_id in table:
        return dict(table[route_id])
    # Unknown routes borrow every number of the fallback route, profile included.
    logger.warning(
        "No %s for route %s; using %s instead.",
        label,
        route_id,
        FALLBACK_ROUTE_ID,
        extra={"route_id": route_id},
    )
    return dict(table[FALLBACK_ROUTE_ID])


def get_forecast_baseline(route_id: str) -> dict[str, Any]:
    return _lookup_with_fallback(FORECAST_BASELINES, route_id, "forecast baseline")


def get_risk_assessment(route_id: str) -> dict[str, Any]:
    return _lookup_with_fallback(RISK_ASSESSMENTS, route_id, "risk assessment")


def generate_route_forecast(
    route_id: str,
    start_date: date | None = None,
    horizon_days: int = DEFAULT_FORECAST_HORIZON_DAYS,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> pd.DataFrame:
    """Project daily passengers, revenue and load factor for the days after ``start_date``.

    Routes whose baseline is marked ``declining`` follow a leisure profile
    (June-September peak, shrinking trend); every other route follows a growing
    business profile with a winter dip. A route without a baseline takes the
    whole LON-PAR entry, profile included. Confidence bands widen linearly with
    the horizon and cap at +/-30%.

    ``start_date`` defaults to today, so the ``date`` column of a seeded call
    depends on the clock unless a start date is passed.
    """
    if int(horizon_days) <= 0:
        raise ValueError("horizon_days must be a positive integer.")

    generator = resolve_rng(rng=rng, seed=seed)
    base = get_forecast_baseline(route_id)
    declining = bool(base["declining"])
    origin = start_date or date.today()

    days = np.arange(1, int(horizon_days) + 1)
    dates = pd.DatetimeIndex([origin + timedelta(days=int(day)) for day in days])
    months = dates.month.to_numpy()

    if declining:
        seasonal = np.where((months >= 6) & (months <= 9), 1.3, 0.7)
        trend = np.power(0.98, days / 90.0)
    else:
        seasonal = np.where((months == 12) | (months <= 2), 0.9, 1.1)
        trend = np.power(1.02, days / 90.0)
    noise = generator.uniform(0.85, 1.15, len(days))
    factor = seasonal * trend * noise

    passengers = np.rint(base["passengers"] * factor)
    revenue = np.rint(base["revenue"] * factor)
    load_factor = np.clip(np.rint(base["load_factor"] * factor), 30, 95)
    band = np.minimum(0.3, 0.1 + (days / 90.0) * 0.2)

    if declining:
        profit_probability = np.maximum(10.0, 80.0 - days)
    else:
        profit_probability = np.minimum(95.0, 85.0 + generator.uniform(0.0, 10.0, len(days)))

    forecast = pd.DataFrame(
        {
            "date": dates,
            "day": days,
            "passengers": passengers.astype(int),
            "revenue": revenue,
            "load_factor": load_factor.astype(int),
            "passengers_lower": np.rint(passengers * (1 - band)).astype(int),
            "passengers_upper": np.rint(passengers * (1 + band)).astype(int),
            "revenue_lower": np.rint(revenue * (1 - band)),
            "revenue_upper": np.rint(revenue * (1 + band)),
            "profit_probability": profit_probability,
        }
    )
    return forecast[FORECAST_COLUMNS]


def summarize_forecast(
    forecast: pd.DataFrame,
    horizons: tuple[int, ...] = SUMMARY_HORIZONS,
) -> pd.DataFrame:
    rows: list[dict[str, Any]] = []
    for horizon in horizons:
        window = forecast.head(int(horizon))
        rows.append(
            {
                "horizon_days": int(horizon),
                "passengers": int(window["passengers"].sum()),
                "revenue": float(window["revenue"].sum()),
                "avg_load_factor": float(window["load_factor"].mean()) if not window.empty else 0.0,
            }
        )
    return pd.DataFrame(rows, columns=["horizon_days", "passengers", "revenue", "avg_load_factor"])
