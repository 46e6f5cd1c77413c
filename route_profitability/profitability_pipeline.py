from __future__ import annotations

import logging
from typing import Any

import duckdb
import pandas as pd

from route_profitability.performance_pipeline import (
    COST_COMPONENT_COLUMNS,
    normalize_performance_data,
)

logger = logging.getLogger(__name__)

TIME_RANGES = ("last_month", "last_quarter", "last_year", "ytd")
DEFAULT_TIME_RANGE = "last_year"

COST_CATEGORY_LABELS = {
    "cost_fuel": "Fuel",
    "cost_crew": "Crew",
    "cost_airport": "Airport Fees",
    "cost_ground_handling": "Ground Handling",
    "cost_maintenance": "Maintenance",
    "cost_catering": "Catering",
    "cost_navigation": "Navigation",
    "cost_insurance": "Insurance",
    "cost_aircraft_ownership": "Aircraft Ownership",
    "cost_marketing": "Marketing",
    "cost_overhead": "Overhead",
}

# Sunday first, matching DAY_OF_WEEK_MULTIPLIERS.
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

YOY_METRICS = (
    ("Revenue", "total_revenue"),
    ("Profit", "net_profit"),
    ("Load Factor", "avg_load_factor"),
    ("Passengers", "total_passengers"),
)

MONTHLY_TREND_COLUMNS = ["month", "revenue", "cost", "net_profit", "avg_load_factor", "passengers"]
YOY_COLUMNS = ["metric", "this_period", "last_period", "change_pct"]
COST_BREAKDOWN_COLUMNS = ["category", "cost_column", "value", "share_pct"]
DAY_OF_WEEK_COLUMNS = ["weekday", "day_name", "flights", "avg_load_factor", "avg_net_profit"]

_PERIOD_TOTALS_SQL = """
    SELECT
        COUNT(*) AS flights,
        COALESCE(SUM(revenue_total), 0) AS total_revenue,
        COALESCE(SUM(cost_total), 0) AS total_cost,
        COALESCE(SUM(net_profit), 0) AS net_profit,
        COALESCE(AVG(load_factor), 0) AS avg_load_factor,
        COALESCE(SUM(passengers_booked), 0) AS total_passengers,
        COALESCE(AVG(CASE WHEN on_time_departure THEN 1.0 ELSE 0.0 END), 0) AS on_time_rate
    FROM route_performance
    WHERE date BETWEEN ? AND ?
"""


def resolve_time_range(time_range: str, anchor: pd.Timestamp) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Return the inclusive ``(start, end)`` window ending on ``anchor``."""
    end = pd.Timestamp(anchor).normalize()
    if time_range == "last_month":
        start = end - pd.Timedelta(days=29)
    elif time_range == "last_quarter":
        start = end - pd.DateOffset(months=3) + pd.Timedelta(days=1)
    elif time_range == "last_year":
        start = end - pd.DateOffset(years=1) + pd.Timedelta(days=1)
    elif time_range == "ytd":
        start = pd.Timestamp(year=end.year, month=1, day=1)
    else:
        raise ValueError(f"time_range must be one of {', '.join(TIME_RANGES)}; got {time_range!r}.")
    return start, end


def load_factor_rating(avg_load_factor: float) -> str:
    if avg_load_factor > 75:
        return "Excellent"
    if avg_load_factor > 60:
        return "Good"
    return "Poor"


def _empty_profitability_views(route_id: str, time_range: str) -> dict[str, Any]:
    return {
        "kpis": {
            "route_id": route_id,
            "time_range": time_range,
            "period_start": None,
            "period_end": None,
            "flights": 0,
            "total_revenue": 0.0,
            "total_cost": 0.0,
            "net_profit": 0.0,
            "profit_margin": 0.0,
            "avg_load_factor": 0.0,
            "total_passengers": 0,
            "on_time_rate": 0.0,
            "profit_status": "Loss Making",
            "load_factor_rating": "Poor",
        },
        "monthly_trend": pd.DataFrame(columns=MONTHLY_TREND_COLUMNS),
        "yoy": pd.DataFrame(columns=YOY_COLUMNS),
        "cost_breakdown": pd.DataFrame(columns=COST_BREAKDOWN_COLUMNS),
        "day_of_week": pd.DataFrame(columns=DAY_OF_WEEK_COLUMNS),
    }


def _period_totals(
    connection: duckdb.DuckDBPyConnection,
    start: pd.Timestamp,
    end: pd.Timestamp,
) -> dict[str, Any]:
    totals = connection.execute(
        _PERIOD_TOTALS_SQL, [start.to_pydatetime(), end.to_pydatetime()]
    ).fetchdf()
    return totals.iloc[0].to_dict()


def _change_pct(current: float, previous: float) -> float:
    if not previous:
        return 0.0
    return round((current - previous) / abs(previous) * 100.0, 1)


def compute_route_profitability_views(
    performance_df: pd.DataFrame,
    route_id: str,
    time_range: str = DEFAULT_TIME_RANGE,
) -> dict[str, Any]:
    """Descriptive and diagnostic views of one route over a trailing window.

    The window ends on the route's latest record, so the result depends only on
    the data and never on the clock. ``yoy`` compares the window with the same
    dates one year earlier; ``cost_breakdown`` splits the window's costs by
    component and ``day_of_week`` shows the weekly demand pattern.
    """
    if time_range not in TIME_RANGES:
        raise ValueError(f"time_range must be one of {', '.join(TIME_RANGES)}; got {time_range!r}.")

    working = normalize_performance_data(performance_df)
    if not working.empty:
        working = working[working["route_id"] == route_id].reset_index(drop=True)
    if working.empty:
        logger.warning(
            "No performance records for route %s; returning empty profitability views.",
            route_id,
            extra={"route_id": route_id, "time_range": time_range},
        )
        return _empty_profitability_views(route_id, time_range)

    start, end = resolve_time_range(time_range, working["date"].max())
    previous_start = start - pd.DateOffset(years=1)
    previous_end = end - pd.DateOffset(years=1)
    window_params = [start.to_pydatetime(), end.to_pydatetime()]

    connection = duckdb.connect(database=":memory:")
    try:
        connection.register("route_performance", working)

        current = _period_totals(connection, start, end)
        previous = _period_totals(connection, previous_start, previous_end)

        monthly_trend = connection.execute(
            """
            SELECT
                DATE_TRUNC('month', date) AS month,
                SUM(revenue_total) AS revenue,
                SUM(cost_total) AS cost,
                SUM(net_profit) AS net_profit,
                AVG(load_factor) AS avg_load_factor,
                SUM(passengers_booked) AS passengers
            FROM route_performance
            WHERE date BETWEEN ? AND ?
            GROUP BY 1
            ORDER BY 1
            """,
            window_params,
        ).fetchdf()

        cost_sums = ",\n                ".join(
            f"COALESCE(SUM({column}), 0) AS {column}" for column in COST_COMPONENT_COLUMNS
        )
        cost_totals = connection.execute(
            f"""
            SELECT
                {cost_sums}
            FROM route_performance
            WHERE date BETWEEN ? AND ?
            """,
            window_params,
        ).fetchdf()

        day_of_week = connection.execute(
            """
            SELECT
                DAYOFWEEK(date) AS weekday,
                COUNT(*) AS flights,
                AVG(load_factor) AS avg_load_factor,
                AVG(net_profit) AS avg_net_profit
            FROM route_performance
            WHERE date BETWEEN ? AND ?
            GROUP BY 1
            ORDER BY 1
            """,
            window_params,
        ).fetchdf()
    finally:
        connection.close()

    total_revenue = float(current["total_revenue"])
    net_profit = float(current["net_profit"])
    avg_load_factor = float(current["avg_load_factor"])
    kpis = {
        "route_id": route_id,
        "time_range": time_range,
        "period_start": start.date(),
        "period_end": end.date(),
        "flights": int(current["flights"]),
        "total_revenue": total_revenue,
        "total_cost": float(current["total_cost"]),
        "net_profit": net_profit,
        "profit_margin": net_profit / total_revenue * 100.0 if total_revenue else 0.0,
        "avg_load_factor": avg_load_factor,
        "total_passengers": int(current["total_passengers"]),
        "on_time_rate": float(current["on_time_rate"]),
        "profit_status": "Profitable" if net_profit > 0 else "Loss Making",
        "load_factor_rating": load_factor_rating(avg_load_factor),
    }

    yoy = pd.DataFrame(
        [
            {
                "metric": label,
                "this_period": float(current[key]),
                "last_period": float(previous[key]),
                "change_pct": _change_pct(float(current[key]), float(previous[key])),
            }
            for label, key in YOY_METRICS
        ],
        columns=YOY_COLUMNS,
    )

    cost_row = cost_totals.iloc[0]
    total_cost = float(sum(float(cost_row[column]) for column in COST_COMPONENT_COLUMNS))
    cost_breakdown = pd.DataFrame(
        [
            {
                "category": COST_CATEGORY_LABELS[column],
                "cost_column": column,
                "value": float(cost_row[column]),
                "share_pct": float(cost_row[column]) / total_cost * 100.0 if total_cost else 0.0,
            }
            for column in COST_COMPONENT_COLUMNS
        ],
        columns=COST_BREAKDOWN_COLUMNS,
    ).sort_values("value", ascending=False, kind="stable", ignore_index=True)

    # DuckDB's DAYOFWEEK is Sunday=0.
    day_of_week["day_name"] = [WEEKDAY_NAMES[int(day)] for day in day_of_week["weekday"]]

    return {
        "kpis": kpis,
        "monthly_trend": monthly_trend[MONTHLY_TREND_COLUMNS],
        "yoy": yoy,
        "cost_breakdown": cost_breakdown,
        "day_of_week": day_of_week[DAY_OF_WEEK_COLUMNS],
    }
