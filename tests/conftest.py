"""Test fixtures for okr-pace.

Provides fixtures for:
- Key results, check-ins and quarter targets for a 2026 plan
- Task lists for velocity and task metrics
- A snapshot file on disk
"""

from datetime import date, datetime
from pathlib import Path

import pytest

from okr_pace.models import CheckIn, KeyResult, KrType, QuarterTarget, Task


@pytest.fixture
def revenue_kr() -> KeyResult:
    """Metric KR going from 0 to 1000 over 2026."""
    return KeyResult(
        id="kr-revenue",
        objective_id="obj-growth",
        name="Revenue",
        kr_type=KrType.METRIC,
        start_value=0,
        target_value=1000,
        unit="k$",
        year=2026,
    )


@pytest.fixture
def launch_kr() -> KeyResult:
    """Milestone KR due at the end of June 2026."""
    return KeyResult(
        id="kr-launch",
        objective_id="obj-growth",
        name="Launch v2",
        kr_type=KrType.MILESTONE,
        start_value=0,
        target_value=1,
        year=2026,
        due_date=date(2026, 6, 30),
    )


@pytest.fixture
def revenue_check_ins() -> list[CheckIn]:
    """Check-ins for the revenue KR: Jan 1 = 0, Apr 1 = 200, Jul 1 = 600."""
    return [
        CheckIn(kr_id="kr-revenue", value=0, recorded_at=datetime(2026, 1, 1)),
        CheckIn(kr_id="kr-revenue", value=200, recorded_at=datetime(2026, 4, 1)),
        CheckIn(kr_id="kr-revenue", value=600, recorded_at=datetime(2026, 7, 1)),
    ]


@pytest.fixture
def revenue_quarter_targets() -> list[QuarterTarget]:
    """Explicit Q1 and Q2 targets for the revenue KR."""
    return [
        QuarterTarget(kr_id="kr-revenue", quarter=1, target_value=100),
        QuarterTarget(kr_id="kr-revenue", quarter=2, target_value=300),
    ]


@pytest.fixture
def january_tasks() -> list[Task]:
    """Tasks completed and pending in early January 2026."""
    return [
        Task(
            id="t-1",
            status="completed",
            created_at=datetime(2026, 1, 1, 9),
            completed_at=datetime(2026, 1, 6, 9),
            kr_id="kr-revenue",
        ),
        Task(
            id="t-2",
            status="completed",
            created_at=datetime(2026, 1, 3, 9),
            completed_at=datetime(2026, 1, 5, 9),
        ),
        Task(
            id="t-3",
            status="completed",
            created_at=datetime(2026, 1, 10, 9),
            completed_at=datetime(2026, 1, 13, 9),
            kr_id="kr-revenue",
        ),
        Task(
            id="t-4",
            status="completed",
            created_at=datetime(2026, 1, 20, 9),
            completed_at=datetime(2026, 2, 1, 9),
        ),
        Task(
            id="t-5",
            status="todo",
            created_at=datetime(2026, 1, 2, 9),
            due_date=date(2026, 1, 10),
        ),
        Task(id="t-6", status="cancelled", created_at=datetime(2026, 1, 2, 9)),
    ]


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    """Write a small plan snapshot to disk."""
    content = """year: 2026
plan_id: plan-2026
objectives:
  - id: obj-growth
    name: Grow the business
key_results:
  - id: kr-revenue
    objective_id: obj-growth
    name: Revenue
    kr_type: metric
    start_value: 0
    target_value: 1000
    unit: k$
    year: 2026
  - id: kr-launch
    objective_id: obj-growth
    name: Launch v2
    kr_type: milestone
    year: 2026
    due_date: "2026-06-30"
check_ins:
  - kr_id: kr-revenue
    value: 0
    recorded_at: "2026-01-01T00:00:00Z"
  - kr_id: kr-revenue
    value: 200
    recorded_at: "2026-04-01T00:00:00Z"
  - kr_id: kr-revenue
    value: 600
    recorded_at: "2026-07-01T00:00:00Z"
  - kr_id: kr-launch
    value: 1
    recorded_at: "2026-06-15T12:00:00Z"
quarter_targets:
  - kr_id: kr-revenue
    quarter: 1
    target_value: 100
tasks:
  - id: t-1
    status: completed
    created_at: "2026-06-01T09:00:00Z"
    completed_at: "2026-06-20T09:00:00Z"
    kr_id: kr-launch
"""
    path = tmp_path / "plan.yaml"
    path.write_text(content)
    return path
