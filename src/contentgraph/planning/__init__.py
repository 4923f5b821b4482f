"""Study plan computation."""

from __future__ import annotations

from contentgraph.planning.planner import PlanResult, TraversalPlanner, plan_study

__all__ = ["PlanResult", "TraversalPlanner", "plan_study"]
