from __future__ import annotations

from typing import Any, Sequence

import pandas as pd

from route_profitability.catalog import route_master_frame
from route_profitability.scoring_pipeline import CLASSIFICATIONS, RouteScore, route_scores_frame

RANKING_FIELDS = (
    "total_score",
    "profitability_score",
    "operational_score",
    "strategic_score",
    "risk_score",
)
TOP_ROUTES_COUNT = 10


def _empty_network_views() -> dict[str, Any]:
    return {
        "kpis": {
            "total_routes": 0,
            "profitable_routes": 0,
            "profitable_share": 0.0,
            "loss_making_routes": 0,
            "question_mark_routes": 0,
            "average_total_score": 0.0,
        },
        "classification_distribution": pd.DataFrame(
            {"classification": list(CLASSIFICATIONS), "routes": [0] * len(CLASSIFICATIONS)}
        ),
        "top_routes": pd.DataFrame(),
    }


def compute_network_views(scores: Sequence[RouteScore]) -> dict[str, Any]:
    if not scores:
        return _empty_network_views()

    scores_df = route_scores_frame(scores)
    counts = scores_df["classification"].value_counts()
    distribution = pd.DataFrame(
        {
            "classification": list(CLASSIFICATIONS),
            "routes": [int(counts.get(label, 0)) for label in CLASSIFICATIONS],
        }
    )

    total_routes = int(len(scores_df))
    profitable_routes = int(counts.get("Stars", 0) + counts.get("Cash Cows", 0))

    route_names = route_master_frame()[["route_id", "route_name", "origin_airport", "destination_airport"]]
    top_routes = scores_df.head(TOP_ROUTES_COUNT).merge(route_names, on="route_id", how="left")

    return {
        "kpis": {
            "total_routes": total_routes,
            "profitable_routes": profitable_routes,
            "profitable_share": profitable_routes / total_routes if total_routes else 0.0,
            "loss_making_routes": int(counts.get("Dogs", 0)),
            "question_mark_routes": int(counts.get("Question Marks", 0)),
            "average_total_score": float(scores_df["total_score"].mean()),
        },
        "classification_distribution": distribution,
        "top_routes": top_routes,
    }


def rank_routes(
    scores: Sequence[RouteScore],
    sort_by: str = "total_score",
    classification: str | None = None,
    search_term: str | None = None,
) -> list[RouteScore]:
    if sort_by not in RANKING_FIELDS:
        raise ValueError(f"sort_by must be one of: {', '.join(RANKING_FIELDS)}")
    if classification is not None and classification not in CLASSIFICATIONS:
        raise ValueError(f"classification must be one of: {', '.join(CLASSIFICATIONS)}")

    needle = (search_term or "").strip().lower()
    selected = [
        score
        for score in scores
        if (classification is None or score.classification == classification)
        and (not needle or needle in score.route_id.lower())
    ]
    return sorted(selected, key=lambda score: getattr(score, sort_by), reverse=True)
