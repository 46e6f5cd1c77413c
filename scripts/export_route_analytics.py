from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from logging_setup import setup_logging
from route_profitability.insights_pipeline import compute_insight_views
from route_profitability.scoring_pipeline import route_scores_frame
from route_profitability.session import RouteProfitabilitySession
from route_settings import RouteSettings

logger = logging.getLogger("export_route_analytics")


def export_frame(df: pd.DataFrame, name: str, output_dir: Path) -> tuple[Path, int]:
    output_path = output_dir / f"{name}.parquet"
    df.to_parquet(output_path, index=False)
    return output_path, len(df.index)


def build_exports(session: RouteProfitabilitySession) -> dict[str, pd.DataFrame]:
    insights = compute_insight_views(session.recommendations(), session.alerts())
    return {
        "route_performance": session.performance_data(),
        "route_scores": route_scores_frame(session.route_scores()),
        "recommendations": insights["recommendations"],
        "alerts": insights["alerts"],
    }


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Synthesize route performance, score the network and export the results to parquet."
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed; overrides ROUTE_DATA_SEED from the environment file.",
    )
    parser.add_argument(
        "--output-dir",
        default="data/route_analytics",
        help="Destination directory for parquet files.",
    )
    parser.add_argument(
        "--env-path",
        default=".env",
        help="Path to environment file containing pipeline settings.",
    )
    args = parser.parse_args()

    setup_logging()
    settings = RouteSettings(env_path=args.env_path)
    session = RouteProfitabilitySession(settings=settings, seed=args.seed)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    for name, frame in build_exports(session).items():
        output_path, row_count = export_frame(frame, name=name, output_dir=output_dir)
        logger.info(
            "Exported %s (%d rows)",
            name,
            row_count,
            extra={"output_path": str(output_path), "records": row_count},
        )


if __name__ == "__main__":
    main()
