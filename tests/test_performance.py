"""
Tests for the weighted performance score.
"""
import pytest
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from health_monitor.data.records import Task
from health_monitor.metrics.performance import (
    compute_rag_score,
    score_from_components,
    calculate_performance_score,
)


def make_task(**overrides) -> Task:
    values = {
        "project_name": "Apollo",
        "task_id": "T1",
        "functional_manager": "Alice",
        "assigned_resource": "Alice Smith",
        "status": "Completed",
        "project_health_rag": "Green",
        "planned_end": date(2024, 3, 1),
        "actual_end": date(2024, 2, 28),
        "planned_duration": 10,
        "actual_duration": 10,
    }
    values.update(overrides)
    return Task(**values)


class TestRagScore:
    def test_amber_counts_half(self):
        assert compute_rag_score(50, 50) == pytest.approx(75)
        assert compute_rag_score(0, 0) == 0


class TestScoreFromComponents:
    """Tests for the weighting itself."""

    def test_perfect_inputs(self):
        assert score_from_components(100, 0, 0, 100, 100) == 100

    def test_worst_inputs(self):
        assert score_from_components(0, 150, 100, 0, 0) == 0

    def test_weights(self):
        """Only forecast accuracy at 100: 35 + 25 (no variance) + 20 (no generic)."""
        assert score_from_components(100, 0, 0, 0, 0) == 80

    def test_variance_penalised_symmetrically(self):
        early = score_from_components(80, -30, 10, 90, 60)
        late = score_from_components(80, 30, 10, 90, 60)
        assert early == late

    def test_non_increasing_in_variance(self):
        scores = [score_from_components(70, v, 20, 80, 60) for v in (0, 10, 20, 40, 80, 120)]
        assert scores == sorted(scores, reverse=True)

    def test_non_increasing_in_generic_share(self):
        scores = [score_from_components(70, 10, g, 80, 60) for g in (0, 25, 50, 75, 100)]
        assert scores == sorted(scores, reverse=True)

    def test_returns_int(self):
        assert isinstance(score_from_components(66.6, 3.3, 12.1, 71, 40.5), int)


class TestCalculatePerformanceScore:
    """Tests for scoring a task group."""

    def test_perfect_group(self):
        tasks = [make_task(task_id="T1"), make_task(task_id="T2")]
        assert calculate_performance_score(tasks) == 100

    def test_mixed_group(self):
        """FA 50, DV 0, generic 25, CPH 100, RAG 75 -> 17.5 + 25 + 15 + 10 + 7.5."""
        tasks = [
            make_task(task_id="T1"),
            make_task(task_id="T2", assigned_resource="TBD"),
            make_task(task_id="T3", actual_end=date(2024, 3, 5), project_health_rag="Amber"),
            make_task(task_id="T4", actual_end=date(2024, 3, 5), project_health_rag="Amber"),
        ]
        assert calculate_performance_score(tasks) == 75

    def test_empty_group_scores_zero(self):
        assert calculate_performance_score([]) == 0
