"""
Task record model.

Task is the normalised unit every metric is computed from. Metric functions
accept either a sequence of Task values or a DataFrame with the task columns;
both are turned into a fresh, typed frame by as_task_frame().
"""
from __future__ import annotations

import pandas as pd
from dataclasses import dataclass, asdict, fields
from datetime import date
from typing import Iterable, List, Optional, Union

from health_monitor.config import TASK_COLUMNS, DATE_COLUMNS
from health_monitor.data.schema import ensure_column_types


@dataclass(frozen=True)
class Task:
    """A single unit of planned work."""
    # Identity
    portfolio_name: str = ""
    project_name: str = ""
    type_of_project: str = "PM"
    work_package_name: str = ""
    task_id: str = ""
    task_name: str = ""
    # Ownership
    functional_manager: str = ""
    assigned_resource: str = ""
    # Schedule (None = unknown)
    baseline_start: Optional[date] = None
    baseline_end: Optional[date] = None
    planned_start: Optional[date] = None
    actual_start: Optional[date] = None
    planned_end: Optional[date] = None
    actual_end: Optional[date] = None
    planned_duration: float = 0.0
    actual_duration: float = 0.0
    # Finance
    planned_budget: float = 0.0
    total_spent: float = 0.0
    # Status and health signals
    status: str = "Not Started"
    project_health_rag: str = "Green"
    resource_utilisation: float = 0.0
    critical_path_risk: bool = False
    critical_path_volatility: float = 0.0
    ignored_dependencies: bool = False
    total_reassessments: int = 0
    forecast_hours: float = 0.0
    actual_hours: float = 0.0
    etc_hours: float = 0.0
    eac_hours: float = 0.0


TaskInput = Union[pd.DataFrame, Iterable[Task]]

_TASK_FIELDS = [f.name for f in fields(Task)]


def tasks_to_frame(tasks: Iterable[Task]) -> pd.DataFrame:
    """Convert Task values to a typed task frame."""
    rows = [asdict(task) for task in tasks]
    df = pd.DataFrame(rows, columns=TASK_COLUMNS)
    return ensure_column_types(df)


def frame_to_tasks(df: pd.DataFrame) -> List[Task]:
    """Convert a task frame back to Task values (NaT becomes None)."""
    df = ensure_column_types(df)
    tasks = []
    for record in df[_TASK_FIELDS].to_dict("records"):
        for col in DATE_COLUMNS:
            value = record[col]
            record[col] = None if pd.isna(value) else value.date()
        record["total_reassessments"] = int(record["total_reassessments"])
        tasks.append(Task(**record))
    return tasks


def as_task_frame(tasks: TaskInput) -> pd.DataFrame:
    """
    Return a new typed task frame for any supported input.

    The caller's object is never modified.
    """
    if isinstance(tasks, pd.DataFrame):
        return ensure_column_types(tasks)
    return tasks_to_frame(tasks)
