"""
Project aggregation: per-project metrics, current and predicted RAG, top risks.
"""
from __future__ import annotations

import pandas as pd
from dataclasses import dataclass, field
from typing import Dict, List

from health_monitor.config import ACCURACY_TARGET, RAG_VALUES
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import (
    completed_mask,
    critical_path_mask,
    high_volatility_mask,
    over_budget_mask,
    manager_key,
    project_key,
    safe_pct,
)
from health_monitor.logging_config import get_logger
from health_monitor.metrics.task_metrics import (
    calculate_forecast_accuracy,
    calculate_duration_variance,
    calculate_generic_resource_percentage,
    calculate_resource_utilisation,
    calculate_critical_path_health,
    count_rag,
)
from health_monitor.modeling.rag_predictor import predict_rag_status
from health_monitor.modeling.risks import identify_project_risks

logger = get_logger(__name__)


@dataclass
class ProjectMetrics:
    """Health metrics for one project."""
    project_name: str
    total_tasks: int
    completed_pct: float
    forecast_accuracy: float
    avg_duration_variance: float
    generic_resource_pct: float
    resource_utilisation: float
    critical_path_health: int
    critical_path_tasks_pct: float
    rag_status: str
    predicted_rag: str = "Green"
    top_risks: List[str] = field(default_factory=list)


def group_tasks_by_project(tasks: TaskInput) -> Dict[str, pd.DataFrame]:
    """Partition tasks by project key in first-seen order."""
    df = as_task_frame(tasks)
    return {project: group for project, group in df.groupby(project_key(df), sort=False)}


def determine_current_rag(tasks: TaskInput) -> str:
    """
    Most common task RAG in the group.

    Ties go to the earlier value in Red, Amber, Green order, so a tie
    between Red and Green reports Red.
    """
    counts = count_rag(tasks)
    best = RAG_VALUES[0]
    for rag in RAG_VALUES[1:]:
        if counts[rag] > counts[best]:
            best = rag
    return best


def compute_project_row(project: str, df_project: pd.DataFrame) -> ProjectMetrics:
    """Compute ProjectMetrics for one project's tasks, including prediction and risks."""
    total = len(df_project)
    metrics = ProjectMetrics(
        project_name=project,
        total_tasks=total,
        completed_pct=safe_pct(completed_mask(df_project).sum(), total),
        forecast_accuracy=calculate_forecast_accuracy(df_project),
        avg_duration_variance=calculate_duration_variance(df_project),
        generic_resource_pct=calculate_generic_resource_percentage(df_project),
        resource_utilisation=calculate_resource_utilisation(df_project),
        critical_path_health=calculate_critical_path_health(df_project),
        critical_path_tasks_pct=safe_pct(critical_path_mask(df_project).sum(), total),
        rag_status=determine_current_rag(df_project),
    )

    metrics.predicted_rag = predict_rag_status(metrics)
    metrics.top_risks = identify_project_risks(df_project, metrics)

    return metrics


def calculate_project_metrics(tasks: TaskInput) -> List[ProjectMetrics]:
    """Compute metrics for each project, in first-seen order."""
    groups = group_tasks_by_project(tasks)
    rows = [compute_project_row(project, df_project) for project, df_project in groups.items()]
    logger.debug("Computed metrics for %d projects", len(rows))
    return rows


# =============================================================================
# PROJECT MANAGER VIEW
# =============================================================================

def _project_tasks(tasks: TaskInput, project: str) -> pd.DataFrame:
    df = as_task_frame(tasks)
    return df[project_key(df) == project]


def get_at_risk_tasks(tasks: TaskInput, project: str) -> pd.DataFrame:
    """
    Tasks in one project that need attention.

    A task is at risk when it is Red, on the critical path, or has ignored
    dependencies. Input order is kept.
    """
    df = _project_tasks(tasks, project)
    at_risk = (
        (df["project_health_rag"] == "Red")
        | critical_path_mask(df)
        | df["ignored_dependencies"]
    )
    return df[at_risk]


def get_critical_path_tasks(tasks: TaskInput, project: str) -> pd.DataFrame:
    df = _project_tasks(tasks, project)
    return df[critical_path_mask(df)]


def get_over_budget_tasks(tasks: TaskInput, project: str) -> pd.DataFrame:
    """Tasks in one project whose spend exceeds budget by more than 10%."""
    df = _project_tasks(tasks, project)
    return df[over_budget_mask(df)]


def compute_manager_accuracy_for_project(tasks: TaskInput,
                                         project: str,
                                         target: float = ACCURACY_TARGET) -> pd.DataFrame:
    """
    Forecast accuracy per functional manager inside one project.

    Returns DataFrame with:
    - manager (Unassigned for empty managers)
    - completed_tasks
    - forecast_accuracy
    - target
    """
    df = _project_tasks(tasks, project)
    if len(df) == 0:
        return pd.DataFrame(columns=["manager", "completed_tasks", "forecast_accuracy", "target"])

    rows = []
    for manager, df_manager in df.groupby(manager_key(df), sort=False):
        rows.append({
            "manager": manager,
            "completed_tasks": int(completed_mask(df_manager).sum()),
            "forecast_accuracy": calculate_forecast_accuracy(df_manager),
            "target": target,
        })

    return pd.DataFrame(rows)


def get_project_task_summary(tasks: TaskInput, project: str) -> Dict[str, int]:
    """
    Headline task counts for one project as a dictionary.

    high_volatility_tasks counts critical-path tasks only.
    """
    df = _project_tasks(tasks, project)
    critical = df[critical_path_mask(df)]

    return {
        "total_tasks": len(df),
        "at_risk_tasks": len(get_at_risk_tasks(df, project)),
        "critical_path_tasks": len(critical),
        "high_volatility_tasks": int(high_volatility_mask(critical).sum()),
        "over_budget_tasks": int(over_budget_mask(df).sum()),
    }
