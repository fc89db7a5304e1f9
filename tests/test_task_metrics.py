"""
Tests for per-task metric functions.
"""
import pytest
import pandas as pd
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from health_monitor.data.records import Task, tasks_to_frame
from health_monitor.metrics.task_metrics import (
    calculate_forecast_accuracy,
    calculate_duration_variance,
    calculate_generic_resource_percentage,
    calculate_resource_utilisation,
    calculate_critical_path_health,
    calculate_critical_path_pct,
    count_rag,
)


def make_task(**overrides) -> Task:
    values = {
        "project_name": "Apollo",
        "task_id": "T1",
        "task_name": "Design",
        "functional_manager": "Alice",
        "assigned_resource": "Alice Smith",
        "status": "Completed",
        "project_health_rag": "Green",
    }
    values.update(overrides)
    return Task(**values)


class TestForecastAccuracy:
    """Tests for on-time completion share."""

    def test_all_on_time_then_three_late(self):
        """10 on-time tasks score 100; flipping 3 to late scores 70."""
        tasks = [
            make_task(task_id=f"T{i}", planned_end=date(2024, 1, 10), actual_end=date(2024, 1, 9))
            for i in range(10)
        ]
        assert calculate_forecast_accuracy(tasks) == pytest.approx(100)

        flipped = [
            replace(t, actual_end=date(2024, 1, 12)) if i < 3 else t
            for i, t in enumerate(tasks)
        ]
        assert calculate_forecast_accuracy(flipped) == pytest.approx(70)

    def test_finishing_on_planned_day_counts_as_on_time(self):
        tasks = [make_task(planned_end=date(2024, 1, 10), actual_end=date(2024, 1, 10))]
        assert calculate_forecast_accuracy(tasks) == pytest.approx(100)

    def test_missing_dates_are_excluded_not_failed(self):
        """Tasks without both end dates drop out of numerator and denominator."""
        tasks = [
            make_task(task_id="T1", planned_end=date(2024, 1, 10), actual_end=date(2024, 1, 9)),
            make_task(task_id="T2", planned_end=date(2024, 1, 10), actual_end=None),
            make_task(task_id="T3", planned_end=None, actual_end=date(2024, 1, 9)),
        ]
        assert calculate_forecast_accuracy(tasks) == pytest.approx(100)

    def test_only_completed_tasks_count(self):
        tasks = [
            make_task(task_id="T1", planned_end=date(2024, 1, 10), actual_end=date(2024, 1, 9)),
            make_task(task_id="T2", status="In Progress",
                      planned_end=date(2024, 1, 10), actual_end=date(2024, 2, 1)),
        ]
        assert calculate_forecast_accuracy(tasks) == pytest.approx(100)

    def test_empty_and_incomplete_return_zero(self):
        assert calculate_forecast_accuracy([]) == 0
        tasks = [make_task(status="Not Started", planned_end=date(2024, 1, 10))]
        assert calculate_forecast_accuracy(tasks) == 0

    def test_manager_filter(self):
        tasks = [
            make_task(task_id="T1", functional_manager="Alice",
                      planned_end=date(2024, 1, 10), actual_end=date(2024, 1, 9)),
            make_task(task_id="T2", functional_manager="Bob",
                      planned_end=date(2024, 1, 10), actual_end=date(2024, 1, 20)),
        ]
        assert calculate_forecast_accuracy(tasks, manager="Alice") == pytest.approx(100)
        assert calculate_forecast_accuracy(tasks, manager="Bob") == 0
        assert calculate_forecast_accuracy(tasks) == pytest.approx(50)

    def test_accepts_dataframe_without_mutating_it(self):
        df = tasks_to_frame([
            make_task(planned_end=date(2024, 1, 10), actual_end=date(2024, 1, 9)),
        ])
        before = df.copy()

        assert calculate_forecast_accuracy(df) == pytest.approx(100)
        pd.testing.assert_frame_equal(df, before)


class TestDurationVariance:
    """Tests for mean duration overrun."""

    def test_mean_of_overruns(self):
        tasks = [
            make_task(task_id="T1", planned_duration=10, actual_duration=12),
            make_task(task_id="T2", planned_duration=10, actual_duration=15),
        ]
        assert calculate_duration_variance(tasks) == pytest.approx(35)

    def test_early_and_late_cancel_out(self):
        tasks = [
            make_task(task_id="T1", planned_duration=10, actual_duration=12),
            make_task(task_id="T2", planned_duration=10, actual_duration=8),
        ]
        assert calculate_duration_variance(tasks) == pytest.approx(0)

    def test_zero_durations_and_open_tasks_excluded(self):
        tasks = [
            make_task(task_id="T1", planned_duration=10, actual_duration=12),
            make_task(task_id="T2", planned_duration=0, actual_duration=5),
            make_task(task_id="T3", planned_duration=5, actual_duration=0),
            make_task(task_id="T4", status="In Progress", planned_duration=10, actual_duration=30),
        ]
        assert calculate_duration_variance(tasks) == pytest.approx(20)

    def test_empty_returns_zero(self):
        assert calculate_duration_variance([]) == 0


class TestGenericResourcePercentage:
    """Tests for placeholder assignee detection."""

    def test_detects_markers_case_insensitively(self):
        resources = ["Resource_04", "TBD", "Alice Smith", "Generic Developer", "", "To Be Determined"]
        tasks = [make_task(task_id=f"T{i}", assigned_resource=r) for i, r in enumerate(resources)]

        assert calculate_generic_resource_percentage(tasks) == pytest.approx(4 / 6 * 100)

    def test_counts_all_statuses(self):
        tasks = [
            make_task(task_id="T1", assigned_resource="Placeholder", status="Not Started"),
            make_task(task_id="T2", assigned_resource="Bob Jones", status="In Progress"),
        ]
        assert calculate_generic_resource_percentage(tasks) == pytest.approx(50)

    def test_custom_markers(self):
        tasks = [
            make_task(task_id="T1", assigned_resource="Contractor A"),
            make_task(task_id="T2", assigned_resource="TBD"),
        ]
        assert calculate_generic_resource_percentage(tasks, markers=["contractor"]) == pytest.approx(50)

    def test_empty_returns_zero(self):
        assert calculate_generic_resource_percentage([]) == 0


class TestResourceUtilisation:
    """Tests for mean reported utilisation."""

    def test_zero_is_not_reported(self):
        tasks = [
            make_task(task_id="T1", resource_utilisation=0),
            make_task(task_id="T2", resource_utilisation=50),
            make_task(task_id="T3", resource_utilisation=100),
        ]
        assert calculate_resource_utilisation(tasks) == pytest.approx(75)

    def test_over_allocation_is_kept(self):
        tasks = [make_task(resource_utilisation=130)]
        assert calculate_resource_utilisation(tasks) == pytest.approx(130)

    def test_nothing_reported_returns_zero(self):
        assert calculate_resource_utilisation([make_task()]) == 0
        assert calculate_resource_utilisation([]) == 0


class TestCriticalPathHealth:
    """Tests for critical path health score."""

    def test_no_critical_tasks_is_healthy(self):
        """Volatility on non-critical tasks does not matter."""
        tasks = [
            make_task(task_id="T1", critical_path_volatility=9),
            make_task(task_id="T2", critical_path_volatility=20),
        ]
        assert calculate_critical_path_health(tasks) == 100

    def test_empty_is_healthy(self):
        assert calculate_critical_path_health([]) == 100

    def test_ideal_share_and_no_volatility(self):
        tasks = [make_task(task_id="T0", critical_path_risk=True)]
        tasks += [make_task(task_id=f"T{i}") for i in range(1, 5)]

        assert calculate_critical_path_health(tasks) == 100

    def test_everything_critical_and_volatile(self):
        tasks = [
            make_task(task_id="T1", critical_path_risk=True, critical_path_volatility=10),
            make_task(task_id="T2", critical_path_risk=True, critical_path_volatility=12),
        ]
        assert calculate_critical_path_health(tasks) == 0

    def test_partial_scores(self):
        """3 of 10 critical at volatility 5: 25 + (50 - 2*10) = 55."""
        tasks = [
            make_task(task_id=f"C{i}", critical_path_risk=True, critical_path_volatility=5)
            for i in range(3)
        ]
        tasks += [make_task(task_id=f"T{i}") for i in range(7)]

        assert calculate_critical_path_health(tasks) == 55

    def test_rounds_half_up(self):
        """1 of 4 critical at volatility 2.5: 37.5 + 40 = 77.5 -> 78."""
        tasks = [make_task(task_id="C1", critical_path_risk=True, critical_path_volatility=2.5)]
        tasks += [make_task(task_id=f"T{i}") for i in range(3)]

        assert calculate_critical_path_health(tasks) == 78


class TestCounts:
    """Tests for simple share and count helpers."""

    def test_critical_path_pct(self):
        tasks = [
            make_task(task_id="T1", critical_path_risk=True),
            make_task(task_id="T2"),
            make_task(task_id="T3"),
            make_task(task_id="T4"),
        ]
        assert calculate_critical_path_pct(tasks) == pytest.approx(25)
        assert calculate_critical_path_pct([]) == 0

    def test_count_rag(self):
        tasks = [
            make_task(task_id="T1", project_health_rag="Red"),
            make_task(task_id="T2", project_health_rag="Green"),
            make_task(task_id="T3", project_health_rag="Green"),
        ]
        counts = count_rag(tasks)

        assert counts == {"Red": 1, "Amber": 0, "Green": 2}
        assert list(counts) == ["Red", "Amber", "Green"]
