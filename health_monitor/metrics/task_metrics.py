"""
Per-task metrics pack.

Single source of truth for: forecast accuracy, duration variance, generic
resource share, resource utilisation and critical path health.

Every function accepts a task collection (Task values or a task frame), an
optional manager filter, and returns a plain float/int. Empty input yields the
documented default instead of raising.
"""
import numpy as np
import pandas as pd
from typing import Dict, Iterable, Optional

from health_monitor.config import (
    RAG_VALUES,
    CRITICAL_PATH_MAX_VOLATILITY,
    CRITICAL_PATH_IDEAL_PCT,
    CRITICAL_PATH_DEVIATION_PENALTY,
)
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import (
    completed_mask,
    critical_path_mask,
    both_dates_mask,
    on_time_end_mask,
    generic_resource_mask,
    filter_manager,
    safe_pct,
    round_half_up,
)


def _select(tasks: TaskInput, manager: Optional[str] = None) -> pd.DataFrame:
    return filter_manager(as_task_frame(tasks), manager)


def calculate_forecast_accuracy(tasks: TaskInput, manager: Optional[str] = None) -> float:
    """
    Share of completed tasks that finished on or before their planned end.

    Only Completed tasks with both planned_end and actual_end count; tasks
    missing either date are left out of numerator and denominator.

    Returns 0-100, or 0 when no task qualifies.
    """
    df = _select(tasks, manager)
    completed = df[completed_mask(df)]
    dated = completed[both_dates_mask(completed, "planned_end", "actual_end")]

    if len(dated) == 0:
        return 0.0

    return safe_pct(on_time_end_mask(dated).sum(), len(dated))


def calculate_duration_variance(tasks: TaskInput, manager: Optional[str] = None) -> float:
    """
    Mean duration overrun (%) across completed tasks.

    Positive means tasks took longer than planned. Tasks with a zero planned
    or actual duration are excluded rather than counted as 0%.
    """
    df = _select(tasks, manager)
    valid = df[
        completed_mask(df)
        & (df["planned_duration"] > 0)
        & (df["actual_duration"] > 0)
    ]

    if len(valid) == 0:
        return 0.0

    variances = (valid["actual_duration"] - valid["planned_duration"]) / valid["planned_duration"] * 100
    return float(variances.mean())


def calculate_generic_resource_percentage(tasks: TaskInput,
                                          manager: Optional[str] = None,
                                          markers: Optional[Iterable[str]] = None) -> float:
    """Percentage of tasks assigned to a placeholder resource."""
    df = _select(tasks, manager)

    if len(df) == 0:
        return 0.0

    return safe_pct(generic_resource_mask(df, markers).sum(), len(df))


def calculate_resource_utilisation(tasks: TaskInput, manager: Optional[str] = None) -> float:
    """
    Mean utilisation over tasks that report one.

    A utilisation of 0 means "not reported" and is excluded.
    """
    df = _select(tasks, manager)
    reported = df.loc[df["resource_utilisation"] > 0, "resource_utilisation"]

    if len(reported) == 0:
        return 0.0

    return float(reported.mean())


def calculate_critical_path_health(tasks: TaskInput, manager: Optional[str] = None) -> int:
    """
    Critical path health score (0-100, higher is healthier).

    Two halves of 50 points each:
    - volatility: full marks at zero average volatility, nothing at 10+
    - concentration: full marks when 20% of tasks are critical, minus 2
      points per percentage point away from that

    With no critical-path tasks (including empty input) the score is 100.
    """
    df = _select(tasks, manager)
    critical = df[critical_path_mask(df)]

    if len(critical) == 0:
        return 100

    avg_volatility = critical["critical_path_volatility"].mean()
    critical_pct = safe_pct(len(critical), len(df))

    volatility_score = np.clip((1 - avg_volatility / CRITICAL_PATH_MAX_VOLATILITY) * 50, 0, 50)
    concentration_score = np.clip(
        50 - abs(critical_pct - CRITICAL_PATH_IDEAL_PCT) * CRITICAL_PATH_DEVIATION_PENALTY,
        0,
        50,
    )

    return round_half_up(volatility_score + concentration_score)


def calculate_critical_path_pct(tasks: TaskInput, manager: Optional[str] = None) -> float:
    """Percentage of tasks flagged as on the critical path."""
    df = _select(tasks, manager)

    if len(df) == 0:
        return 0.0

    return safe_pct(critical_path_mask(df).sum(), len(df))


def count_rag(tasks: TaskInput) -> Dict[str, int]:
    """Task counts per RAG value, keyed in Red, Amber, Green order."""
    df = as_task_frame(tasks)
    counts = df["project_health_rag"].value_counts()
    return {rag: int(counts.get(rag, 0)) for rag in RAG_VALUES}
