"""
Semantic layer: shared task masks and grouping keys.

CRITICAL: All metrics must select tasks through these helpers so that
"completed", "on time", "generic" and the grouping fallbacks mean the same
thing on every view.
"""
import numpy as np
import pandas as pd
from typing import Iterable, Optional

from health_monitor.config import (
    config,
    STATUS_COMPLETED,
    HIGH_VOLATILITY_THRESHOLD,
    OVER_BUDGET_RATIO,
)


# =============================================================================
# STATUS / FLAGS
# =============================================================================

def completed_mask(df: pd.DataFrame) -> pd.Series:
    """True where the task is Completed."""
    return df["status"] == STATUS_COMPLETED


def critical_path_mask(df: pd.DataFrame) -> pd.Series:
    return df["critical_path_risk"].astype(bool)


def high_volatility_mask(df: pd.DataFrame,
                         threshold: float = HIGH_VOLATILITY_THRESHOLD) -> pd.Series:
    return df["critical_path_volatility"] > threshold


def over_budget_mask(df: pd.DataFrame, ratio: float = OVER_BUDGET_RATIO) -> pd.Series:
    """True where spend exceeds the planned budget by more than the ratio."""
    return df["total_spent"] > df["planned_budget"] * ratio


# =============================================================================
# SCHEDULE
# =============================================================================
# Unknown dates (NaT) never count as on time or late; callers exclude them.

def both_dates_mask(df: pd.DataFrame, planned_col: str, actual_col: str) -> pd.Series:
    return df[planned_col].notna() & df[actual_col].notna()


def on_time_end_mask(df: pd.DataFrame) -> pd.Series:
    """True where actual_end <= planned_end and both are known."""
    return both_dates_mask(df, "planned_end", "actual_end") & (df["actual_end"] <= df["planned_end"])


def on_time_start_mask(df: pd.DataFrame) -> pd.Series:
    """True where actual_start <= planned_start and both are known."""
    return both_dates_mask(df, "planned_start", "actual_start") & (df["actual_start"] <= df["planned_start"])


# =============================================================================
# GENERIC RESOURCES
# =============================================================================

def generic_resource_mask(df: pd.DataFrame,
                          markers: Optional[Iterable[str]] = None) -> pd.Series:
    """
    True where the assignee looks like a placeholder.

    Case-folded substring containment against lowercase markers such as
    "tbd" or "resource_". Empty assignees are not generic.
    """
    if markers is None:
        markers = config.generic_resource_markers

    names = df["assigned_resource"].fillna("").astype(str).str.lower()
    mask = pd.Series(False, index=df.index)
    for marker in markers:
        mask |= names.str.contains(marker.lower(), regex=False)
    return mask


def is_generic_resource(name: str, markers: Optional[Iterable[str]] = None) -> bool:
    """Scalar form of generic_resource_mask."""
    if markers is None:
        markers = config.generic_resource_markers
    lowered = (name or "").lower()
    return any(marker.lower() in lowered for marker in markers)


# =============================================================================
# GROUPING KEYS
# =============================================================================

def manager_key(df: pd.DataFrame) -> pd.Series:
    """Functional manager with empty values mapped to the Unassigned bucket."""
    managers = df["functional_manager"].fillna("").astype(str)
    return managers.where(managers != "", config.unassigned_manager)


def project_key(df: pd.DataFrame) -> pd.Series:
    """Project name with empty values mapped to Unnamed Project."""
    projects = df["project_name"].fillna("").astype(str)
    return projects.where(projects != "", config.unnamed_project)


def filter_manager(df: pd.DataFrame, manager: Optional[str]) -> pd.DataFrame:
    """Restrict to one manager's tasks (by manager key); no-op for None."""
    if manager is None:
        return df
    return df[manager_key(df) == manager]


# =============================================================================
# NUMERIC HELPERS
# =============================================================================

def safe_pct(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return float(numerator) / float(denominator) * 100


def round_half_up(value: float) -> int:
    """Round halves up (2.5 -> 3), unlike round() which rounds to even."""
    return int(np.floor(value + 0.5))
