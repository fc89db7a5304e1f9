import pytest

from health_monitor.data.records import Task
from health_monitor.modeling.risks import identify_project_risks


def make_metrics(**overrides) -> dict:
    values = {
        "forecast_accuracy": 90.0,
        "generic_resource_pct": 10.0,
        "avg_duration_variance": 5.0,
        "critical_path_tasks_pct": 15.0,
    }
    values.update(overrides)
    return values


def test_healthy_project_has_no_risks():
    tasks = [Task(task_id="T1", planned_budget=100, total_spent=100)]
    assert identify_project_risks(tasks, make_metrics()) == []


def test_fixed_order_and_truncation():
    """Six rules fire; the sixth (over budget) is cut off."""
    tasks = [
        Task(task_id="T1", critical_path_volatility=6, planned_budget=100, total_spent=200),
        Task(task_id="T2", critical_path_volatility=7),
    ]
    metrics = make_metrics(
        forecast_accuracy=40,
        generic_resource_pct=70,
        avg_duration_variance=30,
        critical_path_tasks_pct=50,
    )

    risks = identify_project_risks(tasks, metrics)

    assert risks == [
        "Low forecast accuracy (40.0%)",
        "High generic resource usage (70.0%)",
        "Large duration variance (+30.0%)",
        "Oversized critical path (50.0%)",
        "2 tasks with high critical path volatility",
    ]


def test_task_level_rules():
    tasks = [
        Task(task_id="T1", critical_path_volatility=5),
        Task(task_id="T2", planned_budget=100, total_spent=111),
        Task(task_id="T3", planned_budget=100, total_spent=110),
    ]
    risks = identify_project_risks(tasks, make_metrics())

    # volatility must exceed 5; spend must exceed 110%
    assert risks == ["1 tasks over budget by >10%"]


@pytest.mark.parametrize("limit", [0, 1, 3])
def test_limit(limit):
    metrics = make_metrics(forecast_accuracy=10, generic_resource_pct=90, avg_duration_variance=50)
    assert len(identify_project_risks([], metrics, limit=limit)) == limit
