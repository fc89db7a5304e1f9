"""
End-to-end metrics pipeline.

tasks -> portfolio (with managers) -> projects -> patterns -> insights.
Each stage only reads the outputs of earlier stages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.logging_config import get_logger
from health_monitor.metrics.portfolio import PortfolioMetrics, calculate_portfolio_metrics
from health_monitor.metrics.projects import ProjectMetrics, calculate_project_metrics
from health_monitor.modeling.insights import Insight, generate_insights
from health_monitor.modeling.patterns import BehaviouralPattern, detect_behavioural_patterns

logger = get_logger(__name__)


@dataclass
class HealthReport:
    """Everything the dashboard views need, computed in one pass."""
    portfolio: PortfolioMetrics
    projects: List[ProjectMetrics] = field(default_factory=list)
    patterns: List[BehaviouralPattern] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)


def build_health_report(tasks: TaskInput) -> HealthReport:
    """Compute the full report for a task set."""
    df = as_task_frame(tasks)

    portfolio = calculate_portfolio_metrics(df)
    projects = calculate_project_metrics(df)
    patterns = detect_behavioural_patterns(df, portfolio.manager_metrics)
    insights = generate_insights(df, portfolio)

    logger.info(
        "Health report: %d tasks, %d projects, %d managers, %d patterns, %d insights",
        portfolio.total_tasks,
        len(projects),
        len(portfolio.manager_metrics),
        len(patterns),
        len(insights),
    )
    for pattern in patterns:
        logger.debug("Pattern %s (%s): %s", pattern.pattern_type, pattern.severity, pattern.affected_managers)

    return HealthReport(
        portfolio=portfolio,
        projects=projects,
        patterns=patterns,
        insights=insights,
    )
