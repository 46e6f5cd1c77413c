import os
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import patch

from route_settings import RouteSettings


def write_env_file(path: Path, lines: list[str]) -> Path:
    env_path = path / ".env"
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class TestRouteSettings(unittest.TestCase):
    def test_defaults_apply_when_env_file_is_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            env_path = write_env_file(Path(tmp_dir), [])

            with patch.dict(os.environ, {}, clear=True):
                settings = RouteSettings(env_path=env_path)

        self.assertIsNone(settings.seed)
        self.assertEqual(settings.start_date, date(2022, 1, 1))
        self.assertEqual(settings.end_date, date(2024, 12, 31))
        self.assertEqual(settings.scoring_window_days, 90)
        self.assertEqual(settings.recommendation_limit, 20)
        self.assertEqual(settings.alert_limit, 10)
        self.assertAlmostEqual(settings.competitive_threat_probability, 0.1)

    def test_values_are_read_from_env_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            env_path = write_env_file(
                Path(tmp_dir),
                [
                    "ROUTE_DATA_SEED=42",
                    "ROUTE_HISTORY_START=2024-01-01",
                    "ROUTE_HISTORY_END=2024-06-30",
                    "ROUTE_SCORING_WINDOW_DAYS=30",
                    "ROUTE_ALERT_LIMIT=5",
                    "ROUTE_COMPETITIVE_THREAT_PROBABILITY=0",
                ],
            )

            with patch.dict(os.environ, {}, clear=True):
                settings = RouteSettings(env_path=env_path)

        self.assertEqual(settings.seed, 42)
        self.assertEqual(settings.start_date, date(2024, 1, 1))
        self.assertEqual(settings.end_date, date(2024, 6, 30))
        self.assertEqual(settings.scoring_window_days, 30)
        self.assertEqual(settings.alert_limit, 5)
        self.assertEqual(settings.competitive_threat_probability, 0.0)

    def test_invalid_integer_names_the_key(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            env_path = write_env_file(Path(tmp_dir), ["ROUTE_DATA_SEED=abc"])

            with patch.dict(os.environ, {}, clear=True):
                with self.assertRaises(ValueError) as error:
                    RouteSettings(env_path=env_path)

        self.assertIn("ROUTE_DATA_SEED", str(error.exception))

    def test_invalid_date_names_the_key(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            env_path = write_env_file(Path(tmp_dir), ["ROUTE_HISTORY_END=31/12/2024"])

            with patch.dict(os.environ, {}, clear=True):
                with self.assertRaises(ValueError) as error:
                    RouteSettings(env_path=env_path)

        self.assertIn("ROUTE_HISTORY_END", str(error.exception))

    def test_start_after_end_raises_value_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            env_path = write_env_file(
                Path(tmp_dir),
                ["ROUTE_HISTORY_START=2024-02-01", "ROUTE_HISTORY_END=2024-01-01"],
            )

            with patch.dict(os.environ, {}, clear=True):
                with self.assertRaises(ValueError) as error:
                    RouteSettings(env_path=env_path)

        self.assertIn("ROUTE_HISTORY_START", str(error.exception))

    def test_out_of_range_values_raise_value_error(self) -> None:
        for line in (
            "ROUTE_SCORING_WINDOW_DAYS=0",
            "ROUTE_RECOMMENDATION_LIMIT=-1",
            "ROUTE_COMPETITIVE_THREAT_PROBABILITY=1.5",
        ):
            with self.subTest(line=line):
                with tempfile.TemporaryDirectory() as tmp_dir:
                    env_path = write_env_file(Path(tmp_dir), [line])

                    with patch.dict(os.environ, {}, clear=True):
                        with self.assertRaises(ValueError) as error:
                            RouteSettings(env_path=env_path)

                self.assertIn(line.split("=")[0], str(error.exception))

    def test_process_environment_wins_over_env_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            env_path = write_env_file(Path(tmp_dir), ["ROUTE_DATA_SEED=1"])

            with patch.dict(os.environ, {"ROUTE_DATA_SEED": "7"}, clear=True):
                settings = RouteSettings(env_path=env_path)

        self.assertEqual(settings.seed, 7)


if __name__ == "__main__":
    unittest.main()
