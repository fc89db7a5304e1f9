"""
Behavioural anti-pattern detection.

Portfolio-wide rules look across all managers and emit at most one
BehaviouralPattern each. The per-manager checks feed the planner view.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from health_monitor.config import (
    PATTERN_THRESHOLDS,
    ANTI_PATTERN_THRESHOLDS,
    SEVERITY_RANK,
)
from health_monitor.data.records import TaskInput, as_task_frame
from health_monitor.data.semantic import high_volatility_mask, manager_key, filter_manager
from health_monitor.metrics.managers import ManagerMetrics

CHRONIC_OPTIMISM = "chronic_optimism"
GENERIC_RESOURCE_OVERUSE = "generic_resource_overuse"
CRITICAL_PATH_INSTABILITY = "critical_path_instability"
RESOURCE_HOARDING = "resource_hoarding"


@dataclass
class BehaviouralPattern:
    """A detected planning anti-pattern."""
    pattern_type: str
    severity: str
    description: str
    affected_managers: List[str] = field(default_factory=list)
    recommendation: str = ""


def _chronic_optimism(manager_metrics: List[ManagerMetrics]) -> Optional[BehaviouralPattern]:
    optimists = [
        m for m in manager_metrics
        if m.avg_duration_variance > PATTERN_THRESHOLDS["optimism_variance_above"]
        and m.forecast_accuracy < PATTERN_THRESHOLDS["optimism_accuracy_below"]
    ]
    if not optimists:
        return None

    high = len(optimists) > len(manager_metrics) * PATTERN_THRESHOLDS["optimism_high_share"]
    return BehaviouralPattern(
        pattern_type=CHRONIC_OPTIMISM,
        severity="high" if high else "medium",
        description=(
            f"{len(optimists)} manager(s) consistently underestimate task duration "
            f"by {optimists[0].avg_duration_variance:.1f}% on average"
        ),
        affected_managers=[m.manager for m in optimists],
        recommendation=(
            "Implement historical data analysis and add buffer time based on past performance. "
            "Consider planning poker sessions with the team."
        ),
    )


def _generic_resource_overuse(manager_metrics: List[ManagerMetrics]) -> Optional[BehaviouralPattern]:
    overusers = [
        m for m in manager_metrics
        if m.generic_resource_pct > PATTERN_THRESHOLDS["generic_overuse_above"]
    ]
    if not overusers:
        return None

    high = len(overusers) > len(manager_metrics) * PATTERN_THRESHOLDS["generic_overuse_high_share"]
    return BehaviouralPattern(
        pattern_type=GENERIC_RESOURCE_OVERUSE,
        severity="high" if high else "medium",
        description=(
            f"{len(overusers)} manager(s) use generic resources for "
            f"{overusers[0].generic_resource_pct:.1f}% of tasks"
        ),
        affected_managers=[m.manager for m in overusers],
        recommendation=(
            "Require named resource assignments 4+ weeks before task start. "
            "Implement resource booking system with advance planning incentives."
        ),
    )


def _critical_path_instability(tasks: TaskInput) -> Optional[BehaviouralPattern]:
    df = as_task_frame(tasks)
    if len(df) == 0:
        return None

    volatile = high_volatility_mask(df)
    count = int(volatile.sum())
    if count <= len(df) * PATTERN_THRESHOLDS["instability_trigger_share"]:
        return None

    high = count > len(df) * PATTERN_THRESHOLDS["instability_high_share"]
    affected = list(dict.fromkeys(manager_key(df[volatile])))
    return BehaviouralPattern(
        pattern_type=CRITICAL_PATH_INSTABILITY,
        severity="high" if high else "medium",
        description=(
            f"{count} tasks ({count / len(df) * 100:.1f}%) show high critical path volatility"
        ),
        affected_managers=affected,
        recommendation=(
            "Stabilize critical path through dependency review, buffer management, "
            "and reducing multitasking on critical tasks."
        ),
    )


def _resource_hoarding(manager_metrics: List[ManagerMetrics]) -> Optional[BehaviouralPattern]:
    hoarders = [
        m for m in manager_metrics
        if m.resource_utilisation < PATTERN_THRESHOLDS["hoarding_utilisation_below"]
        and m.total_tasks > PATTERN_THRESHOLDS["hoarding_min_tasks"]
    ]
    if not hoarders:
        return None

    high = len(hoarders) > len(manager_metrics) * PATTERN_THRESHOLDS["hoarding_high_share"]
    return BehaviouralPattern(
        pattern_type=RESOURCE_HOARDING,
        severity="high" if high else "low",
        description=(
            f"{len(hoarders)} manager(s) showing low resource utilisation "
            f"(<{PATTERN_THRESHOLDS['hoarding_utilisation_below']}%)"
        ),
        affected_managers=[m.manager for m in hoarders],
        recommendation=(
            "Review resource allocation and capacity. Consider resource sharing across teams "
            "and reduce resource hoarding."
        ),
    )


def detect_behavioural_patterns(tasks: TaskInput,
                                manager_metrics: List[ManagerMetrics]) -> List[BehaviouralPattern]:
    """
    Detect the four portfolio anti-patterns.

    Rules run in a fixed order (optimism, generic overuse, instability,
    hoarding). The result is sorted by severity, high first; equal
    severities keep that rule order.
    """
    candidates = [
        _chronic_optimism(manager_metrics),
        _generic_resource_overuse(manager_metrics),
        _critical_path_instability(tasks),
        _resource_hoarding(manager_metrics),
    ]
    patterns = [p for p in candidates if p is not None]
    return sorted(patterns, key=lambda p: SEVERITY_RANK[p.severity], reverse=True)


def detect_manager_anti_patterns(tasks: TaskInput, metrics: ManagerMetrics) -> List[Dict[str, str]]:
    """
    Planning anti-patterns for a single manager.

    Returns list of dicts with type, description and severity.
    """
    df = filter_manager(as_task_frame(tasks), metrics.manager)
    patterns = []

    if metrics.avg_duration_variance > ANTI_PATTERN_THRESHOLDS["variance_above"]:
        patterns.append({
            "type": "Chronic Optimism",
            "description": (
                f"Average {metrics.avg_duration_variance:.0f}% over planned duration. "
                "Tasks consistently take longer than estimated."
            ),
            "severity": "high",
        })

    if metrics.generic_resource_pct > ANTI_PATTERN_THRESHOLDS["generic_above"]:
        patterns.append({
            "type": "Generic Resource Overuse",
            "description": (
                f"{metrics.generic_resource_pct:.0f}% of tasks use generic resources. "
                "Assign named resources earlier."
            ),
            "severity": "high",
        })

    if len(df) > 0:
        avg_reassessments = df["total_reassessments"].mean()
        if avg_reassessments > ANTI_PATTERN_THRESHOLDS["reassessments_above"]:
            patterns.append({
                "type": "Plan Instability",
                "description": (
                    f"Average {avg_reassessments:.1f} reassessments per task. "
                    "Plans are frequently changing."
                ),
                "severity": "medium",
            })

    ignored = int(df["ignored_dependencies"].sum())
    if ignored > 0:
        patterns.append({
            "type": "Dependency Neglect",
            "description": (
                f"{ignored} task(s) have ignored dependencies. "
                "Review and respect task dependencies."
            ),
            "severity": "medium",
        })

    return patterns
