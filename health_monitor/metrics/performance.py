"""
Performance score for a manager or any task group.
"""
from health_monitor.config import PERFORMANCE_WEIGHTS
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import safe_pct, round_half_up
from health_monitor.metrics.task_metrics import (
    calculate_forecast_accuracy,
    calculate_duration_variance,
    calculate_generic_resource_percentage,
    calculate_critical_path_health,
    count_rag,
)


def compute_rag_score(green_pct: float, amber_pct: float) -> float:
    """Green counts fully, Amber counts half, Red counts nothing."""
    return green_pct + 0.5 * amber_pct


def score_from_components(forecast_accuracy: float,
                          duration_variance: float,
                          generic_resource_pct: float,
                          critical_path_health: float,
                          rag_score: float) -> int:
    """
    Weighted 0-100 composite.

    Duration variance is penalised on its absolute value, so finishing far
    ahead of plan costs as much as finishing far behind it, while forecast
    accuracy only rewards on-time-or-early completion.
    """
    variance_score = max(0.0, 100 - abs(duration_variance))
    generic_score = max(0.0, 100 - generic_resource_pct)

    score = (
        forecast_accuracy * PERFORMANCE_WEIGHTS["forecast_accuracy"]
        + variance_score * PERFORMANCE_WEIGHTS["duration_variance"]
        + generic_score * PERFORMANCE_WEIGHTS["generic_resource"]
        + critical_path_health * PERFORMANCE_WEIGHTS["critical_path"]
        + rag_score * PERFORMANCE_WEIGHTS["rag_status"]
    )

    return round_half_up(score)


def calculate_performance_score(tasks: TaskInput) -> int:
    """Performance score (0-100) for a task group; 0 for an empty group."""
    df = as_task_frame(tasks)

    if len(df) == 0:
        return 0

    rag = count_rag(df)
    rag_score = compute_rag_score(
        safe_pct(rag["Green"], len(df)),
        safe_pct(rag["Amber"], len(df)),
    )

    return score_from_components(
        forecast_accuracy=calculate_forecast_accuracy(df),
        duration_variance=calculate_duration_variance(df),
        generic_resource_pct=calculate_generic_resource_percentage(df),
        critical_path_health=calculate_critical_path_health(df),
        rag_score=rag_score,
    )
