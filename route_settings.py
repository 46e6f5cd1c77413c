from __future__ import annotations

import os
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from route_profitability.insights_pipeline import (
    DEFAULT_ALERT_LIMIT,
    DEFAULT_COMPETITIVE_THREAT_PROBABILITY,
    DEFAULT_RECOMMENDATION_LIMIT,
)
from route_profitability.performance_pipeline import DEFAULT_END_DATE, DEFAULT_START_DATE
from route_profitability.scoring_pipeline import DEFAULT_SCORING_WINDOW_DAYS


class RouteSettings:
    """Pipeline settings read from the environment, optionally seeded from a .env file."""

    def __init__(self, env_path: str | os.PathLike[str] = ".env") -> None:
        self.env_path = Path(env_path)
        load_dotenv(dotenv_path=self.env_path)

        self.seed = self._optional_int("ROUTE_DATA_SEED")
        self.start_date = self._date("ROUTE_HISTORY_START", DEFAULT_START_DATE)
        self.end_date = self._date("ROUTE_HISTORY_END", DEFAULT_END_DATE)
        self.scoring_window_days = self._int("ROUTE_SCORING_WINDOW_DAYS", DEFAULT_SCORING_WINDOW_DAYS)
        self.recommendation_limit = self._int("ROUTE_RECOMMENDATION_LIMIT", DEFAULT_RECOMMENDATION_LIMIT)
        self.alert_limit = self._int("ROUTE_ALERT_LIMIT", DEFAULT_ALERT_LIMIT)
        self.competitive_threat_probability = self._float(
            "ROUTE_COMPETITIVE_THREAT_PROBABILITY", DEFAULT_COMPETITIVE_THREAT_PROBABILITY
        )

        if self.start_date > self.end_date:
            raise ValueError("ROUTE_HISTORY_START must be on or before ROUTE_HISTORY_END.")
        if self.scoring_window_days <= 0:
            raise ValueError("ROUTE_SCORING_WINDOW_DAYS must be a positive integer.")
        for key, value in (
            ("ROUTE_RECOMMENDATION_LIMIT", self.recommendation_limit),
            ("ROUTE_ALERT_LIMIT", self.alert_limit),
        ):
            if value < 0:
                raise ValueError(f"{key} must be zero or a positive integer.")
        if not 0.0 <= self.competitive_threat_probability <= 1.0:
            raise ValueError("ROUTE_COMPETITIVE_THREAT_PROBABILITY must be between 0 and 1.")

    @staticmethod
    def _raw(key: str) -> str | None:
        value = os.getenv(key)
        if value is None or not value.strip():
            return None
        return value.strip()

    def _optional_int(self, key: str) -> int | None:
        raw = self._raw(key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError as exc:
            raise ValueError(f"{key} must be a valid integer.") from exc

    def _int(self, key: str, default: int) -> int:
        value = self._optional_int(key)
        return default if value is None else value

    def _float(self, key: str, default: float) -> float:
        raw = self._raw(key)
        if raw is None:
            return float(default)
        try:
            return float(raw)
        except ValueError as exc:
            raise ValueError(f"{key} must be a valid number.") from exc

    def _date(self, key: str, default: date) -> date:
        raw = self._raw(key)
        if raw is None:
            return default
        try:
            return date.fromisoformat(raw)
        except ValueError as exc:
            raise ValueError(f"{key} must be an ISO date (YYYY-MM-DD).") from exc
