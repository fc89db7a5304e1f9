"""
Functional manager aggregation.

One ManagerMetrics per distinct manager key, plus the planner-facing helpers
(percentile rank, per-project accuracy, upcoming work).
"""
from __future__ import annotations

import pandas as pd
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional

from health_monitor.config import ACCURACY_TARGET, UPCOMING_HORIZON_DAYS
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import (
    completed_mask,
    critical_path_mask,
    on_time_end_mask,
    on_time_start_mask,
    manager_key,
    project_key,
    filter_manager,
)
from health_monitor.logging_config import get_logger
from health_monitor.metrics.performance import calculate_performance_score
from health_monitor.metrics.task_metrics import (
    calculate_forecast_accuracy,
    calculate_duration_variance,
    calculate_generic_resource_percentage,
    calculate_resource_utilisation,
    calculate_critical_path_health,
    count_rag,
)

logger = get_logger(__name__)


@dataclass
class ManagerMetrics:
    """Planning metrics for one functional manager."""
    manager: str
    total_tasks: int
    completed_tasks: int
    on_time_start_count: int
    on_time_end_count: int
    forecast_accuracy: float
    avg_duration_variance: float
    generic_resource_pct: float
    resource_utilisation: float
    critical_path_health: int
    critical_path_tasks: int
    red_rag_count: int
    amber_rag_count: int
    green_rag_count: int
    performance_score: int


def group_tasks_by_manager(tasks: TaskInput) -> Dict[str, pd.DataFrame]:
    """
    Partition tasks by manager key in first-seen order.

    Every input row lands in exactly one group; empty managers share the
    Unassigned bucket.
    """
    df = as_task_frame(tasks)
    keys = manager_key(df)
    return {manager: group for manager, group in df.groupby(keys, sort=False)}


def compute_manager_row(manager: str, df_manager: pd.DataFrame) -> ManagerMetrics:
    """Compute ManagerMetrics for one manager's tasks."""
    completed = df_manager[completed_mask(df_manager)]
    rag = count_rag(df_manager)

    return ManagerMetrics(
        manager=manager,
        total_tasks=len(df_manager),
        completed_tasks=len(completed),
        on_time_start_count=int(on_time_start_mask(completed).sum()),
        on_time_end_count=int(on_time_end_mask(completed).sum()),
        forecast_accuracy=calculate_forecast_accuracy(df_manager),
        avg_duration_variance=calculate_duration_variance(df_manager),
        generic_resource_pct=calculate_generic_resource_percentage(df_manager),
        resource_utilisation=calculate_resource_utilisation(df_manager),
        critical_path_health=calculate_critical_path_health(df_manager),
        critical_path_tasks=int(critical_path_mask(df_manager).sum()),
        red_rag_count=rag["Red"],
        amber_rag_count=rag["Amber"],
        green_rag_count=rag["Green"],
        performance_score=calculate_performance_score(df_manager),
    )


def calculate_manager_metrics(tasks: TaskInput) -> List[ManagerMetrics]:
    """
    Compute metrics for each functional manager.

    Returns a list sorted by performance score (descending). The sort is
    stable, so tied managers keep their first-seen order.
    """
    groups = group_tasks_by_manager(tasks)
    if not groups:
        return []

    rows = [compute_manager_row(manager, df_manager) for manager, df_manager in groups.items()]
    logger.debug("Computed metrics for %d managers", len(rows))

    return sorted(rows, key=lambda m: m.performance_score, reverse=True)


def compute_percentile_rank(manager_metrics: List[ManagerMetrics], manager: str) -> float:
    """
    Percentile of a manager by performance score (100 = best).

    Returns 0 when the manager is not in the list.
    """
    ranked = sorted(manager_metrics, key=lambda m: m.performance_score, reverse=True)
    names = [m.manager for m in ranked]
    if manager not in names:
        return 0.0

    rank = names.index(manager) + 1
    return (len(ranked) - rank + 1) / len(ranked) * 100


def compute_project_accuracy_trend(tasks: TaskInput,
                                   manager: str,
                                   target: float = ACCURACY_TARGET) -> pd.DataFrame:
    """
    Forecast accuracy per project for one manager.

    Returns DataFrame with:
    - project_name
    - completed_tasks
    - forecast_accuracy
    - target
    """
    df = filter_manager(as_task_frame(tasks), manager)
    if len(df) == 0:
        return pd.DataFrame(columns=["project_name", "completed_tasks", "forecast_accuracy", "target"])

    rows = []
    for project, df_project in df.groupby(project_key(df), sort=False):
        rows.append({
            "project_name": project,
            "completed_tasks": int(completed_mask(df_project).sum()),
            "forecast_accuracy": calculate_forecast_accuracy(df_project),
            "target": target,
        })

    return pd.DataFrame(rows)


def get_upcoming_tasks(tasks: TaskInput,
                       manager: Optional[str],
                       as_of,
                       horizon_days: int = UPCOMING_HORIZON_DAYS) -> pd.DataFrame:
    """
    Open tasks planned to start within the horizon after as_of.

    Args:
        manager: Restrict to this manager's tasks (None for everyone)
        as_of: Reference date; passed in so results stay reproducible
        horizon_days: Window length in days (inclusive)
    """
    df = filter_manager(as_task_frame(tasks), manager)
    start = pd.Timestamp(as_of)
    end = start + timedelta(days=horizon_days)

    upcoming = df[
        ~completed_mask(df)
        & df["planned_start"].notna()
        & (df["planned_start"] >= start)
        & (df["planned_start"] <= end)
    ]

    return upcoming.sort_values("planned_start", kind="stable")
