from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

import numpy as np
import pandas as pd

from route_profitability.catalog import (
    HIGH_PROFIT_ROUTE_IDS,
    LOSS_MAKING_ROUTE_IDS,
    ROUTE_CATALOG,
    RouteMaster,
    demand_pattern,
    route_tier,
)

logger = logging.getLogger(__name__)

DEFAULT_START_DATE = date(2022, 1, 1)
DEFAULT_END_DATE = date(2024, 12, 31)

BASE_LOAD_FACTOR = {"high_profit": 0.78, "loss_making": 0.42, "moderate": 0.65}
# Revenue per passenger-km.
BASE_YIELD = {"high_profit": 0.15, "loss_making": 0.08, "moderate": 0.12}
ON_TIME_PROBABILITY = {"high_profit": 0.85, "loss_making": 0.72, "moderate": 0.79}
SEATS_BY_MARKET_SIZE = {"Large": 180, "Medium": 150, "Small": 120}

MIN_LOAD_FACTOR = 0.25
MAX_LOAD_FACTOR = 0.95
ANCILLARY_SHARE = 0.08
CARGO_SHARE = 0.03
OTHER_REVENUE_SHARE = 0.02
CANCELLATION_PROBABILITY = 0.02
TURNAROUND_HOURS = 0.5

# Sunday through Saturday.
DAY_OF_WEEK_MULTIPLIERS = {
    "business": (1.0, 1.1, 0.9, 0.9, 1.1, 1.3, 0.7),
    "leisure": (1.2, 0.8, 0.8, 0.8, 1.0, 1.3, 1.4),
}

REVENUE_COMPONENT_COLUMNS = [
    "revenue_base_fare",
    "revenue_ancillary",
    "revenue_cargo",
    "revenue_other",
]
COST_COMPONENT_COLUMNS = [
    "cost_fuel",
    "cost_crew",
    "cost_airport",
    "cost_ground_handling",
    "cost_maintenance",
    "cost_catering",
    "cost_navigation",
    "cost_insurance",
    "cost_aircraft_ownership",
    "cost_marketing",
    "cost_overhead",
]
PERFORMANCE_COLUMNS = [
    "date",
    "route_id",
    "flight_number",
    "seats_available",
    "passengers_booked",
    "load_factor",
    *REVENUE_COMPONENT_COLUMNS,
    "revenue_total",
    *COST_COMPONENT_COLUMNS,
    "cost_total",
    "gross_profit",
    "operating_profit",
    "net_profit",
    "profit_margin",
    "on_time_departure",
    "delay_minutes",
    "cancelled",
    "aircraft_type",
    "block_hours",
]


def resolve_rng(
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> np.random.Generator:
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def build_date_range(start_date: date, end_date: date) -> pd.DatetimeIndex:
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date.")
    return pd.date_range(start=start_date, end=end_date, freq="D")


def seasonal_multiplier(months: np.ndarray | int, pattern: str) -> np.ndarray:
    """Business demand dips over June-August while leisure demand surges."""
    summer = (np.asarray(months) >= 6) & (np.asarray(months) <= 8)
    if pattern == "business":
        return np.where(summer, 0.9, 1.1)
    return np.where(summer, 1.4, 0.6)


def day_of_week_multiplier(weekdays: np.ndarray | int, pattern: str) -> np.ndarray:
    """Look up the multiplier for pandas weekdays (Monday=0)."""
    table = np.asarray(DAY_OF_WEEK_MULTIPLIERS[pattern])
    return table[(np.asarray(weekdays) + 1) % 7]


def aircraft_type_for_seats(seats: int) -> str:
    if seats >= 180:
        return "A321"
    if seats >= 150:
        return "A320"
    return "A319"


def _trend_factor(day_count: int, tier: str) -> np.ndarray:
    progress = np.arange(day_count) / float(day_count)
    if tier == "loss_making":
        return np.maximum(0.7, 1.0 - progress * 0.3)
    return 1.0 + progress * 0.1


def _synthesize_route(
    route: RouteMaster,
    dates: pd.DatetimeIndex,
    tier: str,
    rng: np.random.Generator,
) -> pd.DataFrame:
    day_count = len(dates)
    pattern = demand_pattern(route)
    seats = SEATS_BY_MARKET_SIZE[route.market_size]
    distance = float(route.distance_km)
    minutes = float(route.flight_time_mins)

    # Draw order is fixed so a seeded generator reproduces the same table.
    random_factor = rng.uniform(0.8, 1.2, day_count)
    fare_noise = rng.uniform(0.9, 1.1, day_count)
    on_time = rng.random(day_count) < ON_TIME_PROBABILITY[tier]
    late_minutes = rng.uniform(5.0, 50.0, day_count)
    cancelled = rng.random(day_count) < CANCELLATION_PROBABILITY
    flight_numbers = rng.integers(100, 1000, day_count)

    adjusted_load_factor = np.clip(
        BASE_LOAD_FACTOR[tier]
        * seasonal_multiplier(dates.month.to_numpy(), pattern)
        * day_of_week_multiplier(dates.dayofweek.to_numpy(), pattern)
        * random_factor
        * _trend_factor(day_count, tier),
        MIN_LOAD_FACTOR,
        MAX_LOAD_FACTOR,
    )
    passengers = np.rint(seats * adjusted_load_factor)

    base_revenue = passengers * distance * BASE_YIELD[tier] * fare_noise
    ancillary_revenue = base_revenue * ANCILLARY_SHARE
    cargo_revenue = base_revenue * CARGO_SHARE
    other_revenue = base_revenue * OTHER_REVENUE_SHARE
    total_revenue = base_revenue + ancillary_revenue + cargo_revenue + other_revenue

    costs = {
        "cost_fuel": distance * 0.45 * passengers * 0.7,
        "cost_crew": minutes * 15 + passengers * 2,
        "cost_airport": 2500 + passengers * 8,
        "cost_ground_handling": 1200 + passengers * 3,
        "cost_maintenance": distance * 0.12 + passengers * 1.5,
        "cost_catering": passengers * 4.5,
        "cost_navigation": np.full(day_count, distance * 0.08),
        "cost_insurance": total_revenue * 0.005,
        "cost_aircraft_ownership": np.full(day_count, distance * 0.35),
        "cost_marketing": total_revenue * 0.03,
        "cost_overhead": total_revenue * 0.08,
    }
    total_cost = sum(costs.values())

    gross_profit = total_revenue - (
        costs["cost_fuel"] + costs["cost_crew"] + costs["cost_catering"] + costs["cost_ground_handling"]
    )
    net_profit = total_revenue - total_cost
    operating_profit = net_profit + costs["cost_overhead"]
    profit_margin = np.divide(
        net_profit * 100.0,
        total_revenue,
        out=np.zeros(day_count),
        where=total_revenue != 0,
    )

    frame = pd.DataFrame(
        {
            "date": dates,
            "route_id": route.route_id,
            "flight_number": [f"AB{number}" for number in flight_numbers],
            "seats_available": seats,
            "passengers_booked": passengers.astype(int),
            "load_factor": np.rint(adjusted_load_factor * 100).astype(int),
            "revenue_base_fare": np.rint(base_revenue),
            "revenue_ancillary": np.rint(ancillary_revenue),
            "revenue_cargo": np.rint(cargo_revenue),
            "revenue_other": np.rint(other_revenue),
            "revenue_total": np.rint(total_revenue),
            **{column: np.rint(values) for column, values in costs.items()},
            "cost_total": np.rint(total_cost),
            "gross_profit": np.rint(gross_profit),
            "operating_profit": np.rint(operating_profit),
            "net_profit": np.rint(net_profit),
            "profit_margin": np.round(profit_margin, 2),
            "on_time_departure": on_time,
            "delay_minutes": np.where(on_time, 0, np.rint(late_minutes)).astype(int),
            "cancelled": cancelled,
            "aircraft_type": aircraft_type_for_seats(seats),
            "block_hours": round(minutes / 60.0 + TURNAROUND_HOURS, 2),
        }
    )
    return frame[PERFORMANCE_COLUMNS]


def synthesize_route_performance(
    routes: Iterable[RouteMaster] = ROUTE_CATALOG,
    start_date: date = DEFAULT_START_DATE,
    end_date: date = DEFAULT_END_DATE,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    high_profit_ids: Iterable[str] = HIGH_PROFIT_ROUTE_IDS,
    loss_making_ids: Iterable[str] = LOSS_MAKING_ROUTE_IDS,
) -> pd.DataFrame:
    """Expand the route catalog into one performance record per route and day.

    Randomness is drawn only from ``rng`` (or a generator seeded with ``seed``),
    so two calls with the same seed produce identical frames.
    """
    generator = resolve_rng(rng=rng, seed=seed)
    dates = build_date_range(start_date, end_date)
    high_profit = frozenset(high_profit_ids)
    loss_making = frozenset(loss_making_ids)

    frames = [
        _synthesize_route(
            route=route,
            dates=dates,
            tier=route_tier(route.route_id, high_profit, loss_making),
            rng=generator,
        )
        for route in routes
    ]
    if not frames:
        return pd.DataFrame(columns=PERFORMANCE_COLUMNS)

    performance = pd.concat(frames, ignore_index=True)
    logger.info(
        "Synthesized %d performance records for %d routes between %s and %s",
        len(performance),
        len(frames),
        start_date,
        end_date,
    )
    return performance


def normalize_performance_data(df: pd.DataFrame) -> pd.DataFrame:
    normalized = df.copy()
    normalized.columns = [column.lower() for column in normalized.columns]

    numeric_columns = [
        "seats_available",
        "passengers_booked",
        "load_factor",
        *REVENUE_COMPONENT_COLUMNS,
        "revenue_total",
        *COST_COMPONENT_COLUMNS,
        "cost_total",
        "gross_profit",
        "operating_profit",
        "net_profit",
        "profit_margin",
        "delay_minutes",
        "block_hours",
    ]
    for column in numeric_columns:
        if column in normalized.columns:
            normalized[column] = pd.to_numeric(normalized[column], errors="coerce").fillna(0.0)

    for column in ("on_time_departure", "cancelled"):
        if column in normalized.columns:
            normalized[column] = normalized[column].fillna(False).astype(bool)

    if "date" in normalized.columns:
        normalized["date"] = pd.to_datetime(normalized["date"], errors="coerce")

    return normalized
