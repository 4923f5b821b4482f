from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RunState:
    run_id: str
    stage: str = "init"
    node_count: int = 0
    edge_count: int = 0
    error_count: int = 0
    warning_count: int = 0
    planned_count: int | None = None

    def snapshot(self) -> dict[str, str | int | None]:
        return {
            "run_id": self.run_id,
            "stage": self.stage,
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "planned_count": self.planned_count,
        }
