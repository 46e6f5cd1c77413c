from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Any, Iterable, Sequence, TypeVar

import numpy as np
import pandas as pd

from route_profitability.catalog import get_route
from route_profitability.performance_pipeline import resolve_rng
from route_profitability.scoring_pipeline import RouteScore

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDATION_LIMIT = 20
DEFAULT_ALERT_LIMIT = 10
DEFAULT_COMPETITIVE_THREAT_PROBABILITY = 0.1
DEGRADATION_SCORE_THRESHOLD = 50


@dataclass(frozen=True)
class Recommendation:
    id: str
    route_id: str
    type: str
    category: str
    title: str
    description: str
    impact: str
    effort: str
    timeline: str
    confidence: str
    potential_savings: float
    urgency: str


@dataclass(frozen=True)
class Alert:
    id: str
    route_id: str
    type: str
    title: str
    description: str
    impact_assessment: str
    recommended_action: str
    urgency: str
    created_date: date


# Negative savings are an investment.
RECOMMENDATION_TEMPLATES: dict[str, dict[str, Any]] = {
    "Dogs": {
        "sequence": 1,
        "type": "strategic_decisions",
        "category": "route_exits",
        "title": "Consider discontinuing {route_name}",
        "description": (
            "Route consistently underperforming with score {total_score:.0f}/100. "
            "Low load factors and negative margins."
        ),
        "impact": "High",
        "effort": "Medium",
        "timeline": "Short-term",
        "confidence": "High",
        "potential_savings": 2_400_000,
        "urgency": "high",
    },
    "Question Marks": {
        "sequence": 2,
        "type": "tactical_improvements",
        "category": "schedule_optimization",
        "title": "Optimize schedule for {route_name}",
        "description": (
            "Route shows potential but needs better timing. "
            "Consider adjusting departure times or frequency."
        ),
        "impact": "Medium",
        "effort": "Easy",
        "timeline": "Immediate",
        "confidence": "Medium",
        "potential_savings": 800_000,
        "urgency": "medium",
    },
    "Stars": {
        "sequence": 3,
        "type": "tactical_improvements",
        "category": "pricing_opportunities",
        "title": "Increase capacity on {route_name}",
        "description": (
            "High-performing route with potential for growth. "
            "Consider increasing frequency or larger aircraft."
        ),
        "impact": "High",
        "effort": "Medium",
        "timeline": "Short-term",
        "confidence": "High",
        "potential_savings": -1_500_000,
        "urgency": "medium",
    },
}


def _check_limit(limit: int, name: str) -> int:
    if int(limit) < 0:
        raise ValueError(f"{name} must be zero or a positive integer.")
    return int(limit)


def generate_recommendations(
    scores: Sequence[RouteScore],
    limit: int = DEFAULT_RECOMMENDATION_LIMIT,
) -> list[Recommendation]:
    """Emit at most one recommendation per scored route, in the order of ``scores``.

    ``scores`` normally comes from ``compute_route_scores``, which ranks routes by
    total score descending (ties in catalog order), so the ``limit`` cut keeps the
    highest-scoring routes, not the first routes of the catalog. Cash Cows get no
    recommendation, and nothing is re-sorted here.
    """
    max_items = _check_limit(limit, "limit")
    recommendations: list[Recommendation] = []

    for index, score in enumerate(scores):
        template = RECOMMENDATION_TEMPLATES.get(score.classification)
        if template is None:
            continue
        route = get_route(score.route_id)
        recommendations.append(
            Recommendation(
                id=f"rec_{index}_{template['sequence']}",
                route_id=score.route_id,
                type=template["type"],
                category=template["category"],
                title=template["title"].format(route_name=route.route_name),
                description=template["description"].format(total_score=score.total_score),
                impact=template["impact"],
                effort=template["effort"],
                timeline=template["timeline"],
                confidence=template["confidence"],
                potential_savings=float(template["potential_savings"]),
                urgency=template["urgency"],
            )
        )

    return recommendations[:max_items]


def generate_alerts(
    scores: Sequence[RouteScore],
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    limit: int = DEFAULT_ALERT_LIMIT,
    competitive_threat_probability: float = DEFAULT_COMPETITIVE_THREAT_PROBABILITY,
) -> list[Alert]:
    """Walk ``scores`` in the order given (ranked by total score when it comes from
    ``compute_route_scores``) and cut the alerts to ``limit`` without re-sorting."""
    max_items = _check_limit(limit, "limit")
    probability = float(competitive_threat_probability)
    if not 0.0 <= probability <= 1.0:
        raise ValueError("competitive_threat_probability must be between 0 and 1.")

    generator = resolve_rng(rng=rng, seed=seed)
    alerts: list[Alert] = []

    for index, score in enumerate(scores):
        route = get_route(score.route_id)

        if score.trend == "down" and score.total_score < DEGRADATION_SCORE_THRESHOLD:
            alerts.append(
                Alert(
                    id=f"alert_{index}_1",
                    route_id=score.route_id,
                    type="performance_degradation",
                    title=f"Performance declining on {route.route_name}",
                    description="Route has shown 3 consecutive weeks of declining profitability",
                    impact_assessment="Potential $200K monthly loss if trend continues",
                    recommended_action="Investigate pricing strategy and competitor analysis",
                    urgency="high",
                    created_date=date(2024, 12, 15),
                )
            )

        # Competitive threats are a flat draw until competitor data is wired in.
        if generator.random() < probability:
            alerts.append(
                Alert(
                    id=f"alert_{index}_2",
                    route_id=score.route_id,
                    type="competitive_threats",
                    title=f"New competitor on {route.route_name}",
                    description="Budget airline announced new service starting next month",
                    impact_assessment="Estimated 15-20% passenger loss without response",
                    recommended_action="Consider price adjustment or schedule optimization",
                    urgency="medium",
                    created_date=date(2024, 12, 14),
                )
            )

    if len(alerts) > max_items:
        logger.info("Truncating %d alerts to %d", len(alerts), max_items)
    return alerts[:max_items]


InsightItem = TypeVar("InsightItem", Recommendation, Alert)


def filter_insights(
    items: Iterable[InsightItem],
    urgency: str | None = None,
    item_type: str | None = None,
) -> list[InsightItem]:
    filtered: list[InsightItem] = []
    for item in items:
        if urgency and item.urgency != urgency:
            continue
        if item_type and item.type != item_type:
            continue
        filtered.append(item)
    return filtered


def _records_frame(items: Sequence[Any], record_type: type) -> pd.DataFrame:
    columns = [field.name for field in fields(record_type)]
    return pd.DataFrame([asdict(item) for item in items], columns=columns)


def compute_insight_views(
    recommendations: Sequence[Recommendation],
    alerts: Sequence[Alert],
) -> dict[str, Any]:
    return {
        "kpis": {
            "high_priority_alerts": sum(1 for alert in alerts if alert.urgency == "high"),
            "total_savings_opportunity": float(
                sum(abs(item.potential_savings) for item in recommendations)
            ),
            "immediate_actions": sum(
                1 for item in recommendations if item.type == "immediate_actions"
            ),
            "total_recommendations": len(recommendations),
            "total_alerts": len(alerts),
        },
        "recommendations": _records_frame(recommendations, Recommendation),
        "alerts": _records_frame(alerts, Alert),
    }
