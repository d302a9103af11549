"""Snapshot loading.

A snapshot is a YAML or JSON export of one plan's records, already scoped to
the plan and year by whoever produced it:

    year: 2026
    plan_id: plan-1
    objectives: [...]
    key_results: [...]
    check_ins: [...]
    quarter_targets: [...]
    tasks: [...]
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from okr_pace.models import CheckIn, KeyResult, Objective, QuarterTarget, Task

logger = logging.getLogger(__name__)


class Snapshot(BaseModel):
    """Validated records of one plan."""

    year: int | None = None
    plan_id: str = "plan"
    objectives: list[Objective] = Field(default_factory=list)
    key_results: list[KeyResult] = Field(default_factory=list)
    check_ins: list[CheckIn] = Field(default_factory=list)
    quarter_targets: list[QuarterTarget] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)

    def key_result(self, kr_id: str) -> KeyResult | None:
        """Find a key result by id."""
        return next((kr for kr in self.key_results if kr.id == kr_id), None)


def load_snapshot(path: Path) -> Snapshot:
    """Load and validate a snapshot file.

    Args:
        path: Path to a .yaml, .yml or .json file.

    Returns:
        Validated Snapshot.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file suffix is not supported.
        ValidationError: If the records are invalid.
    """
    if not path.exists():
        msg = f"Snapshot file not found: {path}"
        raise FileNotFoundError(msg)

    suffix = path.suffix.lower()
    with path.open() as f:
        if suffix in (".yaml", ".yml"):
            raw: dict[str, Any] | None = yaml.safe_load(f)
        elif suffix == ".json":
            raw = json.load(f)
        else:
            msg = f"Unsupported snapshot format '{suffix}', expected .yaml, .yml or .json"
            raise ValueError(msg)

    snapshot = Snapshot.model_validate(raw or {})
    logger.info(
        "Loaded snapshot %s: %d key results, %d check-ins, %d tasks",
        path,
        len(snapshot.key_results),
        len(snapshot.check_ins),
        len(snapshot.tasks),
    )
    return snapshot
