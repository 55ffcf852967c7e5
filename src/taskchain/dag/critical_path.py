"""Critical path and earliest-start analysis over a topological order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from .errors import DataIntegrityError
from .graph import Graph
from .model import format_timestamp


@dataclass(frozen=True)
class ChainInfo:
    """Per-task analysis record.

    ``chain_path`` is the longest dependency chain ending at the task,
    roots first.  ``earliest_start`` is the latest finish time among the
    direct dependencies, or None for a root task.
    """

    chain_length: int
    chain_path: tuple[int, ...]
    finish_time: datetime
    earliest_start: Optional[datetime]


@dataclass
class CriticalPathResult:
    critical_path: list[int] = field(default_factory=list)
    earliest_start: dict[int, Optional[datetime]] = field(default_factory=dict)
    chains: dict[int, ChainInfo] = field(default_factory=dict)

    def earliest_start_iso(self) -> dict[str, Optional[str]]:
        """Earliest starts keyed by stringified id, as ISO timestamps."""
        return {str(tid): format_timestamp(ts) for tid, ts in self.earliest_start.items()}


def analyze(graph: Graph, order: Sequence[int]) -> CriticalPathResult:
    """Compute chain lengths, the critical path, and earliest starts.

    *order* must be a topological order of *graph* (see
    :func:`~taskchain.dag.toposort.topological_sort`), so every dependency is
    processed before its dependents.  A dependency whose result is missing
    means the order and the graph disagree and raises
    :class:`DataIntegrityError`.
    """
    chains: dict[int, ChainInfo] = {}
    for tid in order:
        node = graph[tid]
        finish = node.task.finish_time

        if not node.dependency_ids:
            chains[tid] = ChainInfo(1, (tid,), finish, None)
            continue

        deps: list[ChainInfo] = []
        for dep_id in sorted(node.dependency_ids):
            dep = chains.get(dep_id)
            if dep is None:
                raise DataIntegrityError(
                    f"Dependency {dep_id} of task {tid} was not analyzed before it",
                    task_ids=(tid, dep_id),
                )
            deps.append(dep)

        # max() keeps the first (lowest id) dependency on ties.
        best = max(deps, key=lambda d: d.chain_length)
        chains[tid] = ChainInfo(
            chain_length=best.chain_length + 1,
            chain_path=best.chain_path + (tid,),
            finish_time=finish,
            earliest_start=max(d.finish_time for d in deps),
        )

    if len(chains) != len(graph):
        missing = set(graph) - set(chains)
        raise DataIntegrityError(
            f"Order does not cover tasks {sorted(missing)}", task_ids=missing
        )

    critical: tuple[int, ...] = ()
    best_length = 0
    for tid in sorted(chains):
        info = chains[tid]
        if info.chain_length > best_length:
            best_length = info.chain_length
            critical = info.chain_path

    return CriticalPathResult(
        critical_path=list(critical),
        earliest_start={tid: chains[tid].earliest_start for tid in sorted(chains)},
        chains=chains,
    )
