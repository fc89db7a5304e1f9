"""
Resource utilisation pack.

Per-resource and resource-by-manager views for capacity planning.
Tasks without an assigned resource are left out of every view here.
"""
import numpy as np
import pandas as pd
from typing import Dict

from health_monitor.config import RESOURCE_OVER_ALLOCATED_ABOVE, RESOURCE_UNDER_UTILISED_BELOW
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import is_generic_resource, manager_key, project_key

RESOURCE_COLUMNS = [
    "resource",
    "total_hours",
    "planned_hours",
    "project_count",
    "manager_count",
    "utilisation_pct",
    "over_allocated",
    "under_utilised",
    "is_generic",
]


def _named(df: pd.DataFrame) -> pd.DataFrame:
    df = df[df["assigned_resource"] != ""].copy()
    df["manager_key"] = manager_key(df)
    df["project_key"] = project_key(df)
    df["reported_util"] = df["resource_utilisation"].where(df["resource_utilisation"] > 0)
    return df


def compute_resource_metrics(tasks: TaskInput) -> pd.DataFrame:
    """
    Compute capacity metrics per assigned resource.

    Returns DataFrame with:
    - total_hours (actual), planned_hours (forecast)
    - project_count, manager_count
    - utilisation_pct: mean of reported (non-zero) utilisation, 0 if none
    - over_allocated (> 100%), under_utilised (< 60%)
    - is_generic (placeholder assignee)
    """
    df = _named(as_task_frame(tasks))

    if len(df) == 0:
        return pd.DataFrame(columns=RESOURCE_COLUMNS)

    result = df.groupby("assigned_resource", sort=False).agg(
        total_hours=("actual_hours", "sum"),
        planned_hours=("forecast_hours", "sum"),
        project_count=("project_key", "nunique"),
        manager_count=("manager_key", "nunique"),
        utilisation_pct=("reported_util", "mean"),
    ).reset_index().rename(columns={"assigned_resource": "resource"})

    result["utilisation_pct"] = result["utilisation_pct"].fillna(0)
    result["over_allocated"] = result["utilisation_pct"] > RESOURCE_OVER_ALLOCATED_ABOVE
    result["under_utilised"] = result["utilisation_pct"] < RESOURCE_UNDER_UTILISED_BELOW
    result["is_generic"] = result["resource"].map(is_generic_resource).astype(bool)

    return result[RESOURCE_COLUMNS]


def compute_resource_heatmap(tasks: TaskInput) -> pd.DataFrame:
    """
    Mean utilisation for every (resource, manager) pair that shares a task.

    Unlike compute_resource_metrics, zero utilisation is averaged in, so the
    grid shows idle pairings as cold cells.
    """
    df = _named(as_task_frame(tasks))

    if len(df) == 0:
        return pd.DataFrame(columns=["resource", "manager", "utilisation", "over_allocated"])

    result = df.groupby(["assigned_resource", "manager_key"], sort=False).agg(
        utilisation=("resource_utilisation", "mean"),
    ).reset_index().rename(columns={"assigned_resource": "resource", "manager_key": "manager"})

    result["over_allocated"] = result["utilisation"] > RESOURCE_OVER_ALLOCATED_ABOVE

    return result.sort_values(["manager", "resource"], kind="stable").reset_index(drop=True)


def get_resource_summary(tasks: TaskInput) -> Dict[str, float]:
    """
    Get resource headline counts as a dictionary.
    """
    resources = compute_resource_metrics(tasks)
    total = len(resources)

    if total == 0:
        return {
            "total_resources": 0,
            "generic_resources": 0,
            "generic_pct": 0.0,
            "over_allocated": 0,
            "under_utilised": 0,
            "avg_utilisation": 0.0,
        }

    generic = int(resources["is_generic"].sum())
    return {
        "total_resources": total,
        "generic_resources": generic,
        "generic_pct": generic / total * 100,
        "over_allocated": int(resources["over_allocated"].sum()),
        "under_utilised": int(resources["under_utilised"].sum()),
        "avg_utilisation": float(np.mean(resources["utilisation_pct"])),
    }
