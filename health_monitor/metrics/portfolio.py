"""
Portfolio roll-up across every task.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from health_monitor.config import RAG_VALUES
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import completed_mask, project_key
from health_monitor.metrics.managers import ManagerMetrics, calculate_manager_metrics
from health_monitor.metrics.task_metrics import (
    calculate_forecast_accuracy,
    calculate_duration_variance,
    calculate_generic_resource_percentage,
    calculate_resource_utilisation,
    calculate_critical_path_pct,
    count_rag,
)


def _empty_rag_distribution() -> Dict[str, int]:
    return {rag: 0 for rag in RAG_VALUES}


@dataclass
class PortfolioMetrics:
    """Portfolio-wide totals with the full manager breakdown."""
    total_projects: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    avg_forecast_accuracy: float = 0.0
    avg_duration_variance: float = 0.0
    generic_resource_pct: float = 0.0
    resource_utilisation: float = 0.0
    critical_path_tasks_pct: float = 0.0
    rag_distribution: Dict[str, int] = field(default_factory=_empty_rag_distribution)
    manager_metrics: List[ManagerMetrics] = field(default_factory=list)

    @property
    def red_share_pct(self) -> float:
        """Red tasks as a percentage of RAG-tagged tasks (0 when none are tagged)."""
        total = sum(self.rag_distribution.values())
        if total == 0:
            return 0.0
        return self.rag_distribution.get("Red", 0) / total * 100


def calculate_portfolio_metrics(tasks: TaskInput) -> PortfolioMetrics:
    """
    Roll every task up into one PortfolioMetrics.

    Empty input returns zero counts, zero percentages, an all-zero RAG
    distribution and no managers.
    """
    df = as_task_frame(tasks)

    if len(df) == 0:
        return PortfolioMetrics()

    return PortfolioMetrics(
        total_projects=int(project_key(df).nunique()),
        total_tasks=len(df),
        completed_tasks=int(completed_mask(df).sum()),
        avg_forecast_accuracy=calculate_forecast_accuracy(df),
        avg_duration_variance=calculate_duration_variance(df),
        generic_resource_pct=calculate_generic_resource_percentage(df),
        resource_utilisation=calculate_resource_utilisation(df),
        critical_path_tasks_pct=calculate_critical_path_pct(df),
        rag_distribution=count_rag(df),
        manager_metrics=calculate_manager_metrics(df),
    )
