from __future__ import annotations

import logging
import zlib
from typing import Any

import numpy as np
import pandas as pd

from route_profitability.catalog import ROUTE_CATALOG, RouteMaster
from route_profitability.forecast_pipeline import DEFAULT_FORECAST_HORIZON_DAYS, generate_route_forecast
from route_profitability.insights_pipeline import (
    DEFAULT_ALERT_LIMIT,
    DEFAULT_COMPETITIVE_THREAT_PROBABILITY,
    DEFAULT_RECOMMENDATION_LIMIT,
    Alert,
    Recommendation,
    compute_insight_views,
    generate_alerts as build_alerts,
    generate_recommendations as build_recommendations,
)
from route_profitability.network_pipeline import compute_network_views
from route_profitability.performance_pipeline import (
    DEFAULT_END_DATE,
    DEFAULT_START_DATE,
    synthesize_route_performance,
)
from route_profitability.profitability_pipeline import (
    DEFAULT_TIME_RANGE,
    compute_route_profitability_views,
)
from route_profitability.scoring_pipeline import (
    DEFAULT_SCORING_WINDOW_DAYS,
    RouteScore,
    compute_route_scores,
)
from route_settings import RouteSettings

logger = logging.getLogger(__name__)

route_master_data: tuple[RouteMaster, ...] = ROUTE_CATALOG

# Spawn-key prefix for per-route forecast streams; 0-2 are taken by SeedSequence.spawn.
FORECAST_STREAM_KEY = 3


class RouteProfitabilitySession:
    """Compute the route pipeline once and serve every view from the same cached results.

    Performance data, scores and alerts each draw from their own child stream of
    one seed sequence, and every route forecast from a stream keyed on its route
    ID, so the order in which views are requested does not change the numbers.
    Call :meth:`invalidate` to force a fresh run.
    """

    def __init__(self, settings: RouteSettings | None = None, seed: int | None = None) -> None:
        self.seed = seed if seed is not None else getattr(settings, "seed", None)
        self.start_date = getattr(settings, "start_date", DEFAULT_START_DATE)
        self.end_date = getattr(settings, "end_date", DEFAULT_END_DATE)
        self.scoring_window_days = getattr(settings, "scoring_window_days", DEFAULT_SCORING_WINDOW_DAYS)
        self.recommendation_limit = getattr(settings, "recommendation_limit", DEFAULT_RECOMMENDATION_LIMIT)
        self.alert_limit = getattr(settings, "alert_limit", DEFAULT_ALERT_LIMIT)
        self.competitive_threat_probability = getattr(
            settings, "competitive_threat_probability", DEFAULT_COMPETITIVE_THREAT_PROBABILITY
        )
        self._cache: dict[str, Any] = {}
        self._streams: list[np.random.Generator] = []
        self.invalidate()

    def invalidate(self) -> None:
        self._cache.clear()
        root = np.random.SeedSequence(self.seed)
        self._entropy = root.entropy
        children = root.spawn(3)
        self._streams = [np.random.default_rng(child) for child in children]

    def performance_data(self) -> pd.DataFrame:
        if "performance" not in self._cache:
            self._cache["performance"] = synthesize_route_performance(
                routes=ROUTE_CATALOG,
                start_date=self.start_date,
                end_date=self.end_date,
                rng=self._streams[0],
            )
            logger.info(
                "Cached route performance data",
                extra={"seed": self.seed, "records": len(self._cache["performance"])},
            )
        return self._cache["performance"]

    def route_scores(self) -> list[RouteScore]:
        if "scores" not in self._cache:
            self._cache["scores"] = compute_route_scores(
                self.performance_data(),
                routes=ROUTE_CATALOG,
                rng=self._streams[1],
                window_days=self.scoring_window_days,
            )
        return list(self._cache["scores"])

    def recommendations(self) -> list[Recommendation]:
        if "recommendations" not in self._cache:
            self._cache["recommendations"] = build_recommendations(
                self.route_scores(), limit=self.recommendation_limit
            )
        return list(self._cache["recommendations"])

    def alerts(self) -> list[Alert]:
        if "alerts" not in self._cache:
            self._cache["alerts"] = build_alerts(
                self.route_scores(),
                rng=self._streams[2],
                limit=self.alert_limit,
                competitive_threat_probability=self.competitive_threat_probability,
            )
        return list(self._cache["alerts"])

    def network_views(self) -> dict[str, Any]:
        return compute_network_views(self.route_scores())

    def insight_views(self) -> dict[str, Any]:
        return compute_insight_views(self.recommendations(), self.alerts())

    def route_profitability_views(
        self,
        route_id: str,
        time_range: str = DEFAULT_TIME_RANGE,
    ) -> dict[str, Any]:
        return compute_route_profitability_views(self.performance_data(), route_id, time_range)

    def route_forecast(
        self,
        route_id: str,
        horizon_days: int = DEFAULT_FORECAST_HORIZON_DAYS,
    ) -> pd.DataFrame:
        """Forecast ``route_id`` for the days after the session's ``end_date``."""
        forecasts = self._cache.setdefault("forecasts", {})
        key = (route_id, int(horizon_days))
        if key not in forecasts:
            stream = np.random.SeedSequence(
                self._entropy,
                spawn_key=(FORECAST_STREAM_KEY, zlib.crc32(route_id.encode("utf-8"))),
            )
            forecasts[key] = generate_route_forecast(
                route_id,
                start_date=self.end_date,
                horizon_days=horizon_days,
                rng=np.random.default_rng(stream),
            )
        return forecasts[key].copy()


def generate_route_performance_data(seed: int | None = None) -> pd.DataFrame:
    return RouteProfitabilitySession(seed=seed).performance_data()


def generate_route_scores(seed: int | None = None) -> list[RouteScore]:
    return RouteProfitabilitySession(seed=seed).route_scores()


def generate_recommendations(seed: int | None = None) -> list[Recommendation]:
    return RouteProfitabilitySession(seed=seed).recommendations()


def generate_alerts(seed: int | None = None) -> list[Alert]:
    return RouteProfitabilitySession(seed=seed).alerts()
