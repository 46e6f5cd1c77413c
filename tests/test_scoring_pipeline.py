from __future__ import annotations

from datetime import date
import unittest

import pandas as pd

from route_profitability.catalog import ROUTE_CATALOG, get_route
from route_profitability.performance_pipeline import synthesize_route_performance
from route_profitability.scoring_pipeline import (
    DEFAULT_SCORE_WEIGHTS,
    classify_route,
    compute_route_scores,
    route_scores_frame,
    score_route,
    summarize_scoring_window,
    trend_from_margin,
    validate_score_weights,
)


class MidpointRandom:
    """Stands in for numpy's Generator and always returns the middle of the range."""

    def uniform(self, low: float = 0.0, high: float = 1.0, size: int | None = None) -> float:
        return (low + high) / 2.0


def performance_rows(route_id: str, margins: list[float]) -> pd.DataFrame:
    dates = pd.date_range("2024-01-01", periods=len(margins), freq="D")
    return pd.DataFrame(
        {
            "date": dates,
            "route_id": route_id,
            "profit_margin": margins,
            "load_factor": 70,
            "on_time_departure": True,
            "net_profit": 1000.0,
        }
    )


class TestScoringPipeline(unittest.TestCase):
    def test_classification_boundaries(self) -> None:
        self.assertEqual(classify_route(80), "Stars")
        self.assertEqual(classify_route(79.999), "Cash Cows")
        self.assertEqual(classify_route(65), "Cash Cows")
        self.assertEqual(classify_route(64.999), "Question Marks")
        self.assertEqual(classify_route(45), "Question Marks")
        self.assertEqual(classify_route(44.999), "Dogs")
        self.assertEqual(classify_route(0), "Dogs")

    def test_trend_boundaries(self) -> None:
        self.assertEqual(trend_from_margin(5.0001), "up")
        self.assertEqual(trend_from_margin(5), "stable")
        self.assertEqual(trend_from_margin(-5), "stable")
        self.assertEqual(trend_from_margin(-5.0001), "down")

    def test_validate_score_weights(self) -> None:
        self.assertEqual(validate_score_weights(DEFAULT_SCORE_WEIGHTS), DEFAULT_SCORE_WEIGHTS)
        with self.assertRaises(ValueError) as error:
            validate_score_weights({**DEFAULT_SCORE_WEIGHTS, "risk": 0.25})
        self.assertIn("sum to 1.0", str(error.exception))
        with self.assertRaises(ValueError):
            validate_score_weights({"profitability": 1.0})
        with self.assertRaises(ValueError):
            validate_score_weights({**DEFAULT_SCORE_WEIGHTS, "growth": 0.0})

    def test_score_route_with_fixed_random_source(self) -> None:
        metrics = {
            "avg_profit_margin": 10.0,
            "avg_load_factor": 80.0,
            "on_time_rate": 0.8,
            "total_net_profit": 2_000_000.0,
        }
        score = score_route(get_route("LON-PAR"), metrics, MidpointRandom())

        self.assertAlmostEqual(score.profitability_score, 9.6, delta=0.01)
        self.assertAlmostEqual(score.operational_score, 20.375, delta=0.01)
        self.assertAlmostEqual(score.strategic_score, 17.9, delta=0.01)
        self.assertAlmostEqual(score.risk_score, 11.9625, delta=0.01)
        self.assertAlmostEqual(
            score.total_score,
            score.profitability_score + score.operational_score + score.strategic_score + score.risk_score,
            places=6,
        )
        self.assertEqual(score.classification, "Question Marks")
        self.assertEqual(score.trend, "up")

    def test_summarize_scoring_window_uses_most_recent_records(self) -> None:
        base_df = performance_rows("LON-PAR", [-100.0] * 10 + [10.0] * 90)
        window = summarize_scoring_window(base_df, window_days=90)

        row = window.iloc[0]
        self.assertEqual(row["route_id"], "LON-PAR")
        self.assertEqual(int(row["records"]), 90)
        self.assertAlmostEqual(float(row["avg_profit_margin"]), 10.0, places=6)
        self.assertAlmostEqual(float(row["on_time_rate"]), 1.0, places=6)
        self.assertAlmostEqual(float(row["total_net_profit"]), 90_000.0, places=3)

    def test_summarize_scoring_window_rejects_non_positive_window(self) -> None:
        with self.assertRaises(ValueError):
            summarize_scoring_window(performance_rows("LON-PAR", [1.0]), window_days=0)

    def test_compute_route_scores_invariants(self) -> None:
        routes = ROUTE_CATALOG[:6] + ROUTE_CATALOG[-6:]
        performance = synthesize_route_performance(
            routes=routes, start_date=date(2024, 7, 1), end_date=date(2024, 12, 31), seed=21
        )
        scores = compute_route_scores(performance, routes=routes, seed=21)

        self.assertEqual(len(scores), len(routes))
        totals = [score.total_score for score in scores]
        self.assertEqual(totals, sorted(totals, reverse=True))
        for score in scores:
            components = (
                score.profitability_score
                + score.operational_score
                + score.strategic_score
                + score.risk_score
            )
            self.assertAlmostEqual(score.total_score, components, places=6)
            self.assertGreaterEqual(score.total_score, 0.0)
            self.assertLessEqual(score.total_score, 100.0)
            self.assertEqual(score.classification, classify_route(score.total_score))
            self.assertIn(score.trend, {"up", "down", "stable"})

        repeated = compute_route_scores(performance, routes=routes, seed=21)
        self.assertEqual(scores, repeated)

    def test_route_without_records_scores_with_zero_metrics(self) -> None:
        performance = performance_rows("LON-PAR", [10.0] * 5)
        with self.assertLogs("route_profitability.scoring_pipeline", level="WARNING") as logs:
            scores = compute_route_scores(
                performance, routes=[get_route("LON-PAR"), get_route("BRS-PRG")], seed=1
            )

        self.assertTrue(any("BRS-PRG" in message for message in logs.output))
        self.assertEqual([record.route_id for record in logs.records], ["BRS-PRG"])
        brs = next(score for score in scores if score.route_id == "BRS-PRG")
        self.assertEqual(brs.trend, "stable")
        # Only the margin + 20 term survives a zero margin: 20 * 0.4 * 0.40.
        self.assertAlmostEqual(brs.profitability_score, 3.2, places=6)

    def test_compute_route_scores_rejects_bad_weights(self) -> None:
        with self.assertRaises(ValueError):
            compute_route_scores(
                performance_rows("LON-PAR", [1.0]),
                routes=[get_route("LON-PAR")],
                seed=1,
                weights={**DEFAULT_SCORE_WEIGHTS, "profitability": 0.5},
            )

    def test_route_scores_frame(self) -> None:
        scores = compute_route_scores(
            performance_rows("LON-PAR", [10.0] * 5), routes=[get_route("LON-PAR")], seed=2
        )
        frame = route_scores_frame(scores)
        self.assertEqual(len(frame), 1)
        self.assertIn("classification", frame.columns)
        self.assertTrue(route_scores_frame([]).empty)


if __name__ == "__main__":
    unittest.main()
