"""
Project risk identifier.

Checks run in a fixed priority order; each contributes at most one
human-readable line and the list is cut at MAX_PROJECT_RISKS. Order is by
rule position, not by how badly a threshold is breached.
"""
import pandas as pd
from typing import Any, Callable, List, Optional

from health_monitor.config import RISK_THRESHOLDS, MAX_PROJECT_RISKS
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import high_volatility_mask, over_budget_mask
from health_monitor.modeling.rag_predictor import get_metric

RiskRule = Callable[[pd.DataFrame, Any], Optional[str]]


def _low_forecast_accuracy(df: pd.DataFrame, metrics: Any) -> Optional[str]:
    value = get_metric(metrics, "forecast_accuracy")
    if value < RISK_THRESHOLDS["forecast_accuracy_below"]:
        return f"Low forecast accuracy ({value:.1f}%)"
    return None


def _high_generic_usage(df: pd.DataFrame, metrics: Any) -> Optional[str]:
    value = get_metric(metrics, "generic_resource_pct")
    if value > RISK_THRESHOLDS["generic_resource_above"]:
        return f"High generic resource usage ({value:.1f}%)"
    return None


def _large_duration_variance(df: pd.DataFrame, metrics: Any) -> Optional[str]:
    value = get_metric(metrics, "avg_duration_variance")
    if value > RISK_THRESHOLDS["duration_variance_above"]:
        return f"Large duration variance (+{value:.1f}%)"
    return None


def _oversized_critical_path(df: pd.DataFrame, metrics: Any) -> Optional[str]:
    value = get_metric(metrics, "critical_path_tasks_pct")
    if value > RISK_THRESHOLDS["critical_path_pct_above"]:
        return f"Oversized critical path ({value:.1f}%)"
    return None


def _volatile_tasks(df: pd.DataFrame, metrics: Any) -> Optional[str]:
    count = int(high_volatility_mask(df).sum())
    if count > 0:
        return f"{count} tasks with high critical path volatility"
    return None


def _over_budget_tasks(df: pd.DataFrame, metrics: Any) -> Optional[str]:
    count = int(over_budget_mask(df).sum())
    if count > 0:
        return f"{count} tasks over budget by >10%"
    return None


RISK_RULES: List[RiskRule] = [
    _low_forecast_accuracy,
    _high_generic_usage,
    _large_duration_variance,
    _oversized_critical_path,
    _volatile_tasks,
    _over_budget_tasks,
]


def identify_project_risks(tasks: TaskInput,
                           metrics: Any,
                           limit: int = MAX_PROJECT_RISKS) -> List[str]:
    """
    Top risk descriptions for one project.

    Args:
        tasks: The project's tasks
        metrics: ProjectMetrics (or dict/Series) for the same project
        limit: Maximum number of lines returned
    """
    df = as_task_frame(tasks)
    risks = []
    for rule in RISK_RULES:
        message = rule(df, metrics)
        if message is not None:
            risks.append(message)
    return risks[:limit]
