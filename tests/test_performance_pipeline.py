from __future__ import annotations

from datetime import date
import unittest

import numpy as np
import pandas as pd

from route_profitability.catalog import ROUTE_CATALOG, RouteMaster, get_route
from route_profitability.performance_pipeline import (
    COST_COMPONENT_COLUMNS,
    PERFORMANCE_COLUMNS,
    REVENUE_COMPONENT_COLUMNS,
    aircraft_type_for_seats,
    build_date_range,
    day_of_week_multiplier,
    normalize_performance_data,
    seasonal_multiplier,
    synthesize_route_performance,
)


class TestPerformancePipeline(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.performance = synthesize_route_performance(seed=11)

    def test_full_window_has_one_record_per_route_and_day(self) -> None:
        self.assertEqual(len(build_date_range(date(2022, 1, 1), date(2024, 12, 31))), 1096)
        self.assertEqual(len(self.performance), len(ROUTE_CATALOG) * 1096)
        self.assertEqual(list(self.performance.columns), PERFORMANCE_COLUMNS)
        per_route = self.performance.groupby("route_id").size()
        self.assertTrue((per_route == 1096).all())

    def test_every_record_references_a_catalog_route(self) -> None:
        catalog_ids = {route.route_id for route in ROUTE_CATALOG}
        self.assertTrue(set(self.performance["route_id"].unique()) <= catalog_ids)

    def test_load_factor_stays_within_bounds(self) -> None:
        self.assertGreaterEqual(int(self.performance["load_factor"].min()), 25)
        self.assertLessEqual(int(self.performance["load_factor"].max()), 95)

    def test_totals_match_their_components_within_rounding(self) -> None:
        revenue_gap = (
            self.performance[REVENUE_COMPONENT_COLUMNS].sum(axis=1) - self.performance["revenue_total"]
        ).abs()
        cost_gap = (
            self.performance[COST_COMPONENT_COLUMNS].sum(axis=1) - self.performance["cost_total"]
        ).abs()
        self.assertLessEqual(float(revenue_gap.max()), 2.5)
        self.assertLessEqual(float(cost_gap.max()), 6.0)

    def test_operational_fields(self) -> None:
        on_time = self.performance[self.performance["on_time_departure"]]
        late = self.performance[~self.performance["on_time_departure"]]
        self.assertTrue((on_time["delay_minutes"] == 0).all())
        self.assertTrue(late["delay_minutes"].between(5, 50).all())

        lon_nyc = self.performance[self.performance["route_id"] == "LON-NYC"].iloc[0]
        self.assertEqual(lon_nyc["aircraft_type"], "A321")
        self.assertEqual(int(lon_nyc["seats_available"]), 180)
        self.assertAlmostEqual(float(lon_nyc["block_hours"]), 8.5, places=6)
        self.assertRegex(str(lon_nyc["flight_number"]), r"^AB[1-9]\d{2}$")

    def test_seeded_runs_are_identical(self) -> None:
        first = synthesize_route_performance(
            routes=ROUTE_CATALOG[:3], start_date=date(2024, 1, 1), end_date=date(2024, 3, 31), seed=5
        )
        second = synthesize_route_performance(
            routes=ROUTE_CATALOG[:3], start_date=date(2024, 1, 1), end_date=date(2024, 3, 31), seed=5
        )
        pd.testing.assert_frame_equal(first, second)

    def test_injected_generator_is_used(self) -> None:
        rng_a = np.random.default_rng(3)
        rng_b = np.random.default_rng(3)
        first = synthesize_route_performance(
            routes=[get_route("LON-PAR")], start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), rng=rng_a
        )
        second = synthesize_route_performance(
            routes=[get_route("LON-PAR")], start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), rng=rng_b
        )
        pd.testing.assert_frame_equal(first, second)

    def test_zero_revenue_yields_zero_margin(self) -> None:
        ghost_route = RouteMaster(
            "GHO-STX", "GHO", "STX", "Ghost-Stix", 0, 60, "Domestic", "Small", "Spoke-Spoke", "Low", 1, False
        )
        frame = synthesize_route_performance(
            routes=[ghost_route], start_date=date(2024, 1, 1), end_date=date(2024, 1, 10), seed=1
        )
        self.assertTrue((frame["revenue_total"] == 0).all())
        self.assertTrue((frame["profit_margin"] == 0).all())

    def test_start_after_end_raises_value_error(self) -> None:
        with self.assertRaises(ValueError):
            synthesize_route_performance(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1), seed=1)

    def test_multipliers(self) -> None:
        # 2022-01-01 is a Saturday and 2022-01-02 a Sunday.
        dates = pd.DatetimeIndex(["2022-01-01", "2022-01-02"])
        np.testing.assert_allclose(day_of_week_multiplier(dates.dayofweek, "business"), [0.7, 1.0])
        np.testing.assert_allclose(day_of_week_multiplier(dates.dayofweek, "leisure"), [1.4, 1.2])
        np.testing.assert_allclose(seasonal_multiplier(np.array([1, 6, 8, 9]), "business"), [1.1, 0.9, 0.9, 1.1])
        np.testing.assert_allclose(seasonal_multiplier(np.array([1, 7]), "leisure"), [0.6, 1.4])

    def test_aircraft_type_for_seats(self) -> None:
        self.assertEqual(aircraft_type_for_seats(180), "A321")
        self.assertEqual(aircraft_type_for_seats(150), "A320")
        self.assertEqual(aircraft_type_for_seats(120), "A319")

    def test_normalize_performance_data(self) -> None:
        raw = pd.DataFrame(
            [
                {"DATE": "2024-01-01", "ROUTE_ID": "LON-PAR", "LOAD_FACTOR": "80", "ON_TIME_DEPARTURE": True},
                {"DATE": "2024-01-02", "ROUTE_ID": "LON-PAR", "LOAD_FACTOR": None, "ON_TIME_DEPARTURE": None},
            ]
        )
        normalized = normalize_performance_data(raw)
        self.assertEqual(list(normalized["load_factor"]), [80.0, 0.0])
        self.assertEqual(list(normalized["on_time_departure"]), [True, False])
        self.assertTrue(pd.api.types.is_datetime64_any_dtype(normalized["date"]))


if __name__ == "__main__":
    unittest.main()
