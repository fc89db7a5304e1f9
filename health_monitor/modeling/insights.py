"""
Insight generator.

Turns portfolio and manager metrics into prioritised, human-readable
findings. Everything is derived from PortfolioMetrics; the task argument is
accepted so callers can pass the same arguments to every generator.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from health_monitor.config import INSIGHT_THRESHOLDS, PRIORITY_RANK
from health_monitor.data.records import TaskInput
from health_monitor.metrics.portfolio import PortfolioMetrics


@dataclass
class Insight:
    """A prioritised finding for the dashboard."""
    id: str
    insight_type: str  # danger | warning | success | info
    priority: str
    title: str
    description: str
    recommendation: str
    affected_entity: str


def generate_insights(tasks: Optional[TaskInput],
                      portfolio_metrics: PortfolioMetrics) -> List[Insight]:
    """
    Build insights from portfolio metrics.

    Returns insights sorted by priority (high first); equal priorities keep
    emission order: forecast accuracy, generic resources, red share, low
    scorers, top performers.
    """
    insights = []

    if portfolio_metrics.avg_forecast_accuracy < INSIGHT_THRESHOLDS["forecast_accuracy_below"]:
        insights.append(Insight(
            id="portfolio-forecast-low",
            insight_type="danger",
            priority="high",
            title="Low Portfolio Forecast Accuracy",
            description=(
                f"Portfolio forecast accuracy is {portfolio_metrics.avg_forecast_accuracy:.1f}%, "
                f"below the {INSIGHT_THRESHOLDS['forecast_accuracy_below']}% threshold"
            ),
            recommendation=(
                "Implement mandatory historical analysis before planning. "
                "Train managers on realistic estimation techniques."
            ),
            affected_entity="Portfolio",
        ))

    if portfolio_metrics.generic_resource_pct > INSIGHT_THRESHOLDS["generic_resource_above"]:
        insights.append(Insight(
            id="portfolio-generic-high",
            insight_type="warning",
            priority="high",
            title="High Generic Resource Usage",
            description=f"{portfolio_metrics.generic_resource_pct:.1f}% of tasks use generic resources",
            recommendation="Enforce named resource assignments at least 4 weeks before task start dates.",
            affected_entity="Portfolio",
        ))

    red_pct = portfolio_metrics.red_share_pct
    if red_pct > INSIGHT_THRESHOLDS["red_share_above"]:
        insights.append(Insight(
            id="portfolio-rag-red",
            insight_type="danger",
            priority="high",
            title="High Number of Red RAG Projects",
            description=f"{red_pct:.1f}% of tasks are in Red RAG status",
            recommendation="Immediate intervention required. Review project plans, resources, and dependencies.",
            affected_entity="Portfolio",
        ))

    for manager in portfolio_metrics.manager_metrics:
        if manager.performance_score < INSIGHT_THRESHOLDS["poor_performer_below"]:
            insights.append(Insight(
                id=f"manager-{manager.manager}-low-score",
                insight_type="warning",
                priority="medium",
                title=f"{manager.manager}: Low Performance Score",
                description=f"Performance score of {manager.performance_score} indicates planning issues",
                recommendation=(
                    "Provide coaching on realistic planning, resource allocation, "
                    "and dependency management."
                ),
                affected_entity=manager.manager,
            ))

    top_performers = [
        m for m in portfolio_metrics.manager_metrics
        if m.performance_score > INSIGHT_THRESHOLDS["top_performer_above"]
    ]
    if top_performers:
        insights.append(Insight(
            id="portfolio-top-performers",
            insight_type="success",
            priority="low",
            title="Strong Performance from Top Managers",
            description=(
                f"{len(top_performers)} manager(s) achieving "
                f">{INSIGHT_THRESHOLDS['top_performer_above']}% performance score"
            ),
            recommendation="Share best practices from these managers across the organization.",
            affected_entity="Portfolio",
        ))

    return sorted(insights, key=lambda i: PRIORITY_RANK[i.priority], reverse=True)
