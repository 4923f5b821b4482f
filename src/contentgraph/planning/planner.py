"""Traversal planner.

Produces a study plan: a topological order over prerequisite edges, highest priority first
among the nodes that are currently eligible, ties broken by document order, truncated where
the next node would overrun the budget.
"""

from __future__ import annotations

import heapq
import math
from collections import deque
from dataclasses import dataclass, field
from itertools import chain

from contentgraph.errors import PlanningError, PlanningErrorReason
from contentgraph.graph.validator import (
    check_dangling_edges,
    check_orphan_nodes,
    check_prerequisite_cycles,
)
from contentgraph.logging import get_logger
from contentgraph.models.diagnostics import Diagnostic, DiagnosticKind
from contentgraph.models.graph import Graph
from contentgraph.models.plan import PlanConfig, PlanStep, StudyPlan

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlanResult:
    """Plan plus the planner's own (warning-level) diagnostics."""

    plan: StudyPlan
    diagnostics: list[Diagnostic] = field(default_factory=list)


class TraversalPlanner:
    """Budget-bounded, priority-ordered topological scheduler."""

    def __init__(self, graph: Graph, config: PlanConfig) -> None:
        self._graph = graph
        self._config = config
        self._diagnostics: list[Diagnostic] = []

    def effort(self, node_id: str) -> float:
        return self._config.effort_overrides.get(node_id, self._config.default_effort)

    def priority(self, node_id: str) -> float:
        return self._config.priority_overrides.get(node_id, 0.0)

    def plan(self) -> PlanResult:
        """Compute the plan.

        Raises:
            PlanningError: The graph has a prerequisite cycle or another error-level defect.
        """

        self._require_clean()
        self._warn_unknown("effort_overrides", self._config.effort_overrides)
        self._warn_unknown("priority_overrides", self._config.priority_overrides)
        self._warn_unknown("targets", self._config.targets)

        scope = self._scope()
        waiting = {
            node_id: sum(1 for p in self._graph.prerequisites_of(node_id) if p in scope)
            for node_id in scope
        }
        ready: list[tuple[float, int, str]] = []
        for node_id, count in waiting.items():
            if count == 0:
                self._push(ready, node_id)

        steps: list[PlanStep] = []
        efforts: list[float] = []
        spent = 0.0
        while ready:
            _neg_priority, _pos, node_id = heapq.heappop(ready)
            cost = self.effort(node_id)
            total = math.fsum([*efforts, cost])
            if not self._fits(total):
                left_out = len(scope) - len(steps)
                self._diagnostics.append(
                    Diagnostic.warning(
                        DiagnosticKind.BUDGET_EXHAUSTED,
                        [node_id],
                        f"budget {self._config.budget:g} exhausted at {node_id} "
                        f"(needs {cost:g}, {self._config.budget - spent:g} left); "
                        f"{left_out} node(s) not scheduled",
                    )
                )
                break
            efforts.append(cost)
            spent = min(total, self._config.budget)
            steps.append(PlanStep(node_id=node_id, effort=cost, cumulative_cost=spent))
            for dependent in self._graph.dependents_of(node_id):
                if dependent not in waiting:
                    continue
                waiting[dependent] -= 1
                if waiting[dependent] == 0:
                    self._push(ready, dependent)
        else:
            if len(steps) < len(scope):
                raise PlanningError(
                    "prerequisite cycle left nodes unschedulable",
                    reason=PlanningErrorReason.CYCLIC_INPUT,
                )

        plan = StudyPlan(budget=self._config.budget, steps=steps)
        logger.info(
            "Planned %d/%d nodes, cost %g of budget %g",
            len(steps),
            len(scope),
            plan.total_cost,
            self._config.budget,
        )
        return PlanResult(plan=plan, diagnostics=list(self._diagnostics))

    def _fits(self, total: float) -> bool:
        """Within budget, counting a total that only overshoots by float rounding as fitting."""

        budget = self._config.budget
        return total <= budget or math.isclose(total, budget)

    def _push(self, ready: list[tuple[float, int, str]], node_id: str) -> None:
        heapq.heappush(ready, (-self.priority(node_id), self._graph.position(node_id), node_id))

    def _scope(self) -> set[str]:
        """All nodes, or the targets plus their transitive prerequisites."""

        if not self._config.targets:
            return set(self._graph.node_ids())

        scope: set[str] = set()
        queue = deque(t for t in self._config.targets if t in self._graph)
        while queue:
            node_id = queue.popleft()
            if node_id in scope:
                continue
            scope.add(node_id)
            queue.extend(self._graph.prerequisites_of(node_id))
        return scope

    def _require_clean(self) -> None:
        if self._graph.frozen:
            return
        cycles = list(check_prerequisite_cycles(self._graph))
        if cycles:
            raise PlanningError(
                cycles[0].message,
                reason=PlanningErrorReason.CYCLIC_INPUT,
                item=", ".join(cycles[0].node_ids),
            )
        errors = list(chain(check_dangling_edges(self._graph), check_orphan_nodes(self._graph)))
        if errors:
            raise PlanningError(
                f"graph is not clean: {len(errors)} error(s), first: {errors[0].message}",
                reason=PlanningErrorReason.UNCLEAN_GRAPH,
                item=", ".join(errors[0].node_ids),
            )

    def _warn_unknown(self, option: str, ids: dict[str, float] | list[str]) -> None:
        unknown = sorted(node_id for node_id in ids if node_id not in self._graph)
        if unknown:
            self._diagnostics.append(
                Diagnostic.warning(
                    DiagnosticKind.UNKNOWN_OVERRIDE,
                    unknown,
                    f"{option} name unknown node(s): {', '.join(unknown)}",
                )
            )


def plan_study(graph: Graph, config: PlanConfig) -> PlanResult:
    """Compute a study plan for a clean graph.

    Args:
        graph: Validated graph; warnings are tolerated, errors are not.
        config: Budget, overrides and optional targets.

    Returns:
        The plan and planner diagnostics.

    Raises:
        PlanningError: `cyclic_input` for a prerequisite cycle, `unclean_graph` for any
            other error-level defect.
    """

    return TraversalPlanner(graph, config).plan()
