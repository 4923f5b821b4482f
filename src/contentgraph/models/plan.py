"""Study plan models."""

from __future__ import annotations

import json
import math
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class PlanConfig(BaseModel):
    """Caller-supplied planning configuration.

    Alternate reading paths (a one-week crash course, a month-long pass) are separate
    `PlanConfig` instances; nothing here is tuned for either.
    """

    budget: float = Field(gt=0.0)
    effort_overrides: dict[str, float] = Field(default_factory=dict)
    priority_overrides: dict[str, float] = Field(default_factory=dict)
    targets: list[str] = Field(default_factory=list)
    default_effort: float = Field(default=1.0, gt=0.0)

    @field_validator("effort_overrides")
    @classmethod
    def _positive_efforts(cls, v: dict[str, float]) -> dict[str, float]:
        bad = [k for k, cost in v.items() if not cost > 0 or math.isinf(cost)]
        if bad:
            raise ValueError(f"effort must be a positive finite number: {', '.join(sorted(bad))}")
        return v

    @classmethod
    def unbounded(cls, **kwargs: object) -> PlanConfig:
        """Configuration with an infinite budget."""

        return cls(budget=math.inf, **kwargs)


def load_plan_config(path: Path, **overrides: object) -> PlanConfig:
    """Load a `PlanConfig` from a JSON file.

    Args:
        path: JSON file with `budget` and optional override mappings.
        overrides: Fields replacing the file's values (e.g. a CLI `--budget`).

    Raises:
        ValueError: The file is not valid JSON or not a JSON object.
        pydantic.ValidationError: The values are out of range.
    """

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"plan config must be a JSON object, got {type(data).__name__}")
    data.update({k: v for k, v in overrides.items() if v is not None})
    return PlanConfig.model_validate(data)


class PlanStep(BaseModel):
    node_id: str
    effort: float = Field(gt=0.0)
    cumulative_cost: float = Field(ge=0.0)


class StudyPlan(BaseModel):
    """Ordered, budget-bounded, prerequisite-respecting traversal."""

    budget: float
    steps: list[PlanStep] = Field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [s.node_id for s in self.steps]

    @property
    def total_cost(self) -> float:
        return self.steps[-1].cumulative_cost if self.steps else 0.0

    def __len__(self) -> int:
        return len(self.steps)
