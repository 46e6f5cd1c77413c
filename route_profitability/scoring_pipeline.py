from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Iterable, Mapping

import duckdb
import numpy as np
import pandas as pd

from route_profitability.catalog import ROUTE_CATALOG, RouteMaster
from route_profitability.performance_pipeline import normalize_performance_data, resolve_rng

logger = logging.getLogger(__name__)

DEFAULT_SCORING_WINDOW_DAYS = 90
DEFAULT_SCORE_WEIGHTS = {
    "profitability": 0.40,
    "operational": 0.25,
    "strategic": 0.20,
    "risk": 0.15,
}
SCORE_COMPONENTS = tuple(DEFAULT_SCORE_WEIGHTS)
CLASSIFICATIONS = ("Stars", "Cash Cows", "Question Marks", "Dogs")
STRATEGIC_IMPORTANCE_VALUES = {"High": 100.0, "Medium": 70.0, "Low": 40.0}
MARKET_SIZE_VALUES = {"Large": 100.0, "Medium": 70.0, "Small": 40.0}
ASSUMED_UTILIZATION = 85.0

WINDOW_COLUMNS = [
    "route_id",
    "records",
    "avg_profit_margin",
    "avg_load_factor",
    "on_time_rate",
    "total_net_profit",
]
_EMPTY_WINDOW = {
    "records": 0,
    "avg_profit_margin": 0.0,
    "avg_load_factor": 0.0,
    "on_time_rate": 0.0,
    "total_net_profit": 0.0,
}


@dataclass(frozen=True)
class RouteScore:
    route_id: str
    profitability_score: float
    operational_score: float
    strategic_score: float
    risk_score: float
    total_score: float
    classification: str
    trend: str


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return min(upper, max(lower, float(value)))


def validate_score_weights(weights: Mapping[str, float]) -> dict[str, float]:
    missing = [component for component in SCORE_COMPONENTS if component not in weights]
    if missing:
        raise ValueError(f"Missing score weights: {', '.join(missing)}")
    unknown = sorted(set(weights) - set(SCORE_COMPONENTS))
    if unknown:
        raise ValueError(f"Unknown score weights: {', '.join(unknown)}")

    total = sum(float(weights[component]) for component in SCORE_COMPONENTS)
    if not math.isclose(total, 1.0, abs_tol=1e-9):
        raise ValueError(f"Score weights must sum to 1.0, got {total:.4f}.")
    return {component: float(weights[component]) for component in SCORE_COMPONENTS}


def classify_route(total_score: float) -> str:
    if total_score >= 80:
        return "Stars"
    if total_score >= 65:
        return "Cash Cows"
    if total_score >= 45:
        return "Question Marks"
    return "Dogs"


def trend_from_margin(avg_profit_margin: float) -> str:
    if avg_profit_margin > 5:
        return "up"
    if avg_profit_margin < -5:
        return "down"
    return "stable"


def summarize_scoring_window(
    performance_df: pd.DataFrame,
    window_days: int = DEFAULT_SCORING_WINDOW_DAYS,
) -> pd.DataFrame:
    """Aggregate the most recent ``window_days`` records of every route."""
    if int(window_days) <= 0:
        raise ValueError("window_days must be a positive integer.")

    working = normalize_performance_data(performance_df)
    if working.empty:
        return pd.DataFrame(columns=WINDOW_COLUMNS)

    connection = duckdb.connect(database=":memory:")
    try:
        connection.register("route_performance", working)
        window = connection.execute(
            """
            WITH ranked AS (
                SELECT
                    route_id,
                    profit_margin,
                    load_factor,
                    on_time_departure,
                    net_profit,
                    ROW_NUMBER() OVER (PARTITION BY route_id ORDER BY date DESC) AS recency_rank
                FROM route_performance
            )
            SELECT
                route_id,
                COUNT(*) AS records,
                AVG(profit_margin) AS avg_profit_margin,
                AVG(load_factor) AS avg_load_factor,
                AVG(CASE WHEN on_time_departure THEN 1.0 ELSE 0.0 END) AS on_time_rate,
                SUM(net_profit) AS total_net_profit
            FROM ranked
            WHERE recency_rank <= ?
            GROUP BY route_id
            ORDER BY route_id
            """,
            [int(window_days)],
        ).fetchdf()
    finally:
        connection.close()

    return window[WINDOW_COLUMNS]


def score_route(
    route: RouteMaster,
    metrics: Mapping[str, Any],
    rng: np.random.Generator,
    weights: Mapping[str, float] = DEFAULT_SCORE_WEIGHTS,
) -> RouteScore:
    avg_margin = float(metrics["avg_profit_margin"])
    avg_load_factor = float(metrics["avg_load_factor"])
    on_time_rate = float(metrics["on_time_rate"])
    total_profit = float(metrics["total_net_profit"])

    profitability = (
        clamp(avg_margin + 20) * 0.4
        + clamp((total_profit / 1_000_000) * 10) * 0.3
        + clamp(avg_margin * 2) * 0.3
    ) * weights["profitability"]

    operational = (
        avg_load_factor * 0.4
        + (on_time_rate * 100) * 0.3
        + ASSUMED_UTILIZATION * 0.3
    ) * weights["operational"]

    # Growth, volatility, competition and seasonality have no data source yet; they are drawn.
    growth_rate = clamp(50 + rng.uniform(0.0, 30.0))
    strategic = (
        STRATEGIC_IMPORTANCE_VALUES[route.strategic_importance] * 0.4
        + MARKET_SIZE_VALUES[route.market_size] * 0.3
        + growth_rate * 0.3
    ) * weights["strategic"]

    volatility = min(100.0, rng.uniform(0.0, 40.0))
    competition = min(100.0, rng.uniform(0.0, 50.0))
    seasonality = min(100.0, rng.uniform(0.0, 30.0))
    risk = (
        (100 - volatility) * 0.35
        + (100 - competition) * 0.35
        + (100 - seasonality) * 0.30
    ) * weights["risk"]

    components = [round(value, 2) for value in (profitability, operational, strategic, risk)]
    total_score = round(clamp(sum(components)), 2)
    return RouteScore(
        route_id=route.route_id,
        profitability_score=components[0],
        operational_score=components[1],
        strategic_score=components[2],
        risk_score=components[3],
        total_score=total_score,
        classification=classify_route(total_score),
        trend=trend_from_margin(avg_margin),
    )


def compute_route_scores(
    performance_df: pd.DataFrame,
    routes: Iterable[RouteMaster] = ROUTE_CATALOG,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    window_days: int = DEFAULT_SCORING_WINDOW_DAYS,
    weights: Mapping[str, float] = DEFAULT_SCORE_WEIGHTS,
) -> list[RouteScore]:
    """Score every route on its recent window and rank the network by total score."""
    resolved_weights = validate_score_weights(weights)
    generator = resolve_rng(rng=rng, seed=seed)
    window = summarize_scoring_window(performance_df, window_days=window_days)
    metrics_by_route = {str(row["route_id"]): row for row in window.to_dict("records")}

    scores: list[RouteScore] = []
    for route in routes:
        metrics = metrics_by_route.get(route.route_id)
        if metrics is None:
            logger.warning(
                "No performance records for route %s; scoring with zero metrics.",
                route.route_id,
                extra={"route_id": route.route_id},
            )
            metrics = _EMPTY_WINDOW
        scores.append(score_route(route, metrics, generator, resolved_weights))

    ranked = sorted(scores, key=lambda score: score.total_score, reverse=True)
    logger.info("Scored %d routes over a %d-day window", len(ranked), int(window_days))
    return ranked


def route_scores_frame(scores: Iterable[RouteScore]) -> pd.DataFrame:
    columns = [field.name for field in fields(RouteScore)]
    return pd.DataFrame([asdict(score) for score in scores], columns=columns)
