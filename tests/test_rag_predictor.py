import pandas as pd
import pytest

from health_monitor.metrics.projects import ProjectMetrics
from health_monitor.modeling.rag_predictor import (
    RAG_RULES,
    predict_rag_status,
    explain_rag_prediction,
)


def make_metrics(**overrides) -> ProjectMetrics:
    values = {
        "project_name": "Apollo",
        "total_tasks": 10,
        "completed_pct": 50.0,
        "forecast_accuracy": 90.0,
        "avg_duration_variance": 5.0,
        "generic_resource_pct": 10.0,
        "resource_utilisation": 75.0,
        "critical_path_health": 90,
        "critical_path_tasks_pct": 15.0,
        "rag_status": "Green",
    }
    values.update(overrides)
    return ProjectMetrics(**values)


def test_low_accuracy_is_red_regardless_of_other_fields():
    metrics = make_metrics(
        forecast_accuracy=45,
        generic_resource_pct=30,
        avg_duration_variance=10,
        critical_path_tasks_pct=10,
    )
    assert predict_rag_status(metrics) == "Red"


@pytest.mark.parametrize("overrides,expected", [
    ({"generic_resource_pct": 81}, "Red"),
    ({"avg_duration_variance": 26}, "Red"),
    ({"critical_path_tasks_pct": 41}, "Red"),
    ({"forecast_accuracy": 60}, "Amber"),
    ({"generic_resource_pct": 51}, "Amber"),
    ({"avg_duration_variance": 16}, "Amber"),
    ({"critical_path_tasks_pct": 31}, "Amber"),
    ({"forecast_accuracy": 70, "generic_resource_pct": 50,
      "avg_duration_variance": 15, "critical_path_tasks_pct": 30}, "Green"),
])
def test_thresholds(overrides, expected):
    assert predict_rag_status(make_metrics(**overrides)) == expected


def test_worst_signal_wins():
    metrics = make_metrics(forecast_accuracy=65, critical_path_tasks_pct=45)
    assert predict_rag_status(metrics) == "Red"


def test_idempotent():
    metrics = make_metrics(forecast_accuracy=65)
    assert predict_rag_status(metrics) == predict_rag_status(metrics) == "Amber"


def test_accepts_dict_and_series():
    values = {
        "forecast_accuracy": 80,
        "generic_resource_pct": 55,
        "avg_duration_variance": 0,
        "critical_path_tasks_pct": 0,
    }
    assert predict_rag_status(values) == "Amber"
    assert predict_rag_status(pd.Series(values)) == "Amber"


def test_explain_returns_first_matching_rule():
    rule = explain_rag_prediction(make_metrics(avg_duration_variance=30, critical_path_tasks_pct=45))

    assert rule is RAG_RULES[2]
    assert rule.status == "Red"
    assert explain_rag_prediction(make_metrics()) is None


def test_every_input_gets_exactly_one_status():
    for accuracy in (0, 49, 50, 69, 70, 100):
        for generic in (0, 50, 51, 80, 81):
            status = predict_rag_status(make_metrics(forecast_accuracy=accuracy, generic_resource_pct=generic))
            assert status in ("Red", "Amber", "Green")
