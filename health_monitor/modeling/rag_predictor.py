"""
Rule-based RAG predictor for projects.

Rules are evaluated top to bottom and the first match wins, so any single
breach escalates the whole project (worst signal wins).
"""
import operator

import pandas as pd
from dataclasses import dataclass
from typing import Any, Callable, List, Optional


@dataclass(frozen=True)
class RagRule:
    """One escalation condition: `metric <comparison> threshold` -> status."""
    status: str
    metric: str
    comparison: Callable[[float, float], bool]
    threshold: float
    reason: str

    def matches(self, metrics: Any) -> bool:
        return self.comparison(get_metric(metrics, self.metric), self.threshold)


RAG_RULES: List[RagRule] = [
    RagRule("Red", "forecast_accuracy", operator.lt, 50, "Forecast accuracy below 50%"),
    RagRule("Red", "generic_resource_pct", operator.gt, 80, "Generic resources above 80%"),
    RagRule("Red", "avg_duration_variance", operator.gt, 25, "Duration variance above 25%"),
    RagRule("Red", "critical_path_tasks_pct", operator.gt, 40, "Critical path above 40% of tasks"),
    RagRule("Amber", "forecast_accuracy", operator.lt, 70, "Forecast accuracy below 70%"),
    RagRule("Amber", "generic_resource_pct", operator.gt, 50, "Generic resources above 50%"),
    RagRule("Amber", "avg_duration_variance", operator.gt, 15, "Duration variance above 15%"),
    RagRule("Amber", "critical_path_tasks_pct", operator.gt, 30, "Critical path above 30% of tasks"),
]

DEFAULT_STATUS = "Green"


def get_metric(metrics: Any, name: str) -> float:
    """Read a metric from a ProjectMetrics-like object, dict or Series."""
    if isinstance(metrics, (dict, pd.Series)):
        return float(metrics.get(name, 0))
    return float(getattr(metrics, name, 0))


def explain_rag_prediction(metrics: Any, rules: Optional[List[RagRule]] = None) -> Optional[RagRule]:
    """Return the first rule that fires, or None for Green."""
    for rule in rules if rules is not None else RAG_RULES:
        if rule.matches(metrics):
            return rule
    return None


def predict_rag_status(metrics: Any, rules: Optional[List[RagRule]] = None) -> str:
    """
    Predict Red/Amber/Green from a project's aggregated metrics.

    Reads forecast_accuracy, generic_resource_pct, avg_duration_variance and
    critical_path_tasks_pct.
    """
    rule = explain_rag_prediction(metrics, rules)
    return rule.status if rule is not None else DEFAULT_STATUS
