"""
Application configuration management.
"""
import os
from dataclasses import dataclass, field
from typing import Tuple


DEFAULT_GENERIC_RESOURCE_MARKERS = (
    "resource_",
    "generic",
    "tbd",
    "unassigned",
    "placeholder",
    "to be determined",
)


def _markers_from_env() -> Tuple[str, ...]:
    raw = os.getenv("GENERIC_RESOURCE_MARKERS")
    if not raw:
        return DEFAULT_GENERIC_RESOURCE_MARKERS
    markers = [m.strip().lower() for m in raw.split(",")]
    return tuple(m for m in markers if m)


@dataclass
class AppConfig:
    """Application configuration with environment overrides."""

    # Environment
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "dev"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Assignee strings containing any of these (case-folded) count as placeholders
    generic_resource_markers: Tuple[str, ...] = field(default_factory=_markers_from_env)

    # Grouping fallbacks
    unassigned_manager: str = "Unassigned"
    unnamed_project: str = "Unnamed Project"

    @property
    def is_prod(self) -> bool:
        return self.app_env.lower() == "prod"


# Global config instance
config = AppConfig()


# Enumerations (iteration order matters for tie-breaks)
STATUS_COMPLETED = "Completed"
STATUS_IN_PROGRESS = "In Progress"
STATUS_NOT_STARTED = "Not Started"
STATUS_VALUES = (STATUS_COMPLETED, STATUS_IN_PROGRESS, STATUS_NOT_STARTED)

RAG_VALUES = ("Red", "Amber", "Green")
PROJECT_TYPES = ("BL", "PC", "PM", "WPM")

SEVERITY_RANK = {"high": 3, "medium": 2, "low": 1}
PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


# Task table columns by type
TEXT_COLUMNS = [
    "portfolio_name",
    "project_name",
    "type_of_project",
    "work_package_name",
    "task_id",
    "task_name",
    "functional_manager",
    "assigned_resource",
    "status",
    "project_health_rag",
]

DATE_COLUMNS = [
    "baseline_start",
    "baseline_end",
    "planned_start",
    "actual_start",
    "planned_end",
    "actual_end",
]

NUMERIC_COLUMNS = [
    "planned_duration",
    "actual_duration",
    "planned_budget",
    "total_spent",
    "resource_utilisation",
    "total_reassessments",
    "critical_path_volatility",
    "forecast_hours",
    "actual_hours",
    "etc_hours",
    "eac_hours",
]

BOOL_COLUMNS = [
    "ignored_dependencies",
    "critical_path_risk",
]

TASK_COLUMNS = TEXT_COLUMNS + DATE_COLUMNS + NUMERIC_COLUMNS + BOOL_COLUMNS

# Required columns (hard fail if missing)
REQUIRED_COLUMNS = {
    "tasks": [
        "project_name",
        "task_id",
        "task_name",
        "functional_manager",
        "assigned_resource",
        "status",
        "project_health_rag",
    ],
}

# Optional columns (soft warn if missing, filled with defaults)
OPTIONAL_COLUMNS = {
    "tasks": [c for c in TASK_COLUMNS if c not in REQUIRED_COLUMNS["tasks"]],
}


# Performance score weights (sum to 1.0)
PERFORMANCE_WEIGHTS = {
    "forecast_accuracy": 0.35,
    "duration_variance": 0.25,
    "generic_resource": 0.20,
    "critical_path": 0.10,
    "rag_status": 0.10,
}

# Critical path health model
CRITICAL_PATH_MAX_VOLATILITY = 10.0
CRITICAL_PATH_IDEAL_PCT = 20.0
CRITICAL_PATH_DEVIATION_PENALTY = 2.0

HIGH_VOLATILITY_THRESHOLD = 5.0
OVER_BUDGET_RATIO = 1.1

# Project risk thresholds
RISK_THRESHOLDS = {
    "forecast_accuracy_below": 60,
    "generic_resource_above": 60,
    "duration_variance_above": 20,
    "critical_path_pct_above": 35,
}
MAX_PROJECT_RISKS = 5

# Behavioural pattern thresholds
PATTERN_THRESHOLDS = {
    "optimism_variance_above": 15,
    "optimism_accuracy_below": 60,
    "optimism_high_share": 0.5,
    "generic_overuse_above": 70,
    "generic_overuse_high_share": 0.3,
    "instability_trigger_share": 0.2,
    "instability_high_share": 0.3,
    "hoarding_utilisation_below": 60,
    "hoarding_min_tasks": 5,
    "hoarding_high_share": 0.3,
}

# Per-manager planning anti-patterns
ANTI_PATTERN_THRESHOLDS = {
    "variance_above": 20,
    "generic_above": 70,
    "reassessments_above": 3,
}

# Insight thresholds
INSIGHT_THRESHOLDS = {
    "forecast_accuracy_below": 60,
    "generic_resource_above": 50,
    "red_share_above": 30,
    "poor_performer_below": 40,
    "top_performer_above": 80,
}

# Resource views
RESOURCE_OVER_ALLOCATED_ABOVE = 100
RESOURCE_UNDER_UTILISED_BELOW = 60
ACCURACY_TARGET = 70
UPCOMING_HORIZON_DAYS = 14
