"""Dependency engine: graph model, cycle guard, topological sort, critical path.

The engine is a pure function of the task and edge collections supplied to
it.  Persistence and locking live in :mod:`taskchain.store`.
"""

from __future__ import annotations

from .critical_path import ChainInfo, CriticalPathResult, analyze
from .cycle import would_create_cycle
from .engine import (
    Neighbors,
    check_and_prepare_insert,
    compute_critical_path,
    list_dependencies_and_dependents,
    remove_edge,
)
from .errors import (
    CycleWouldFormError,
    DataIntegrityError,
    InvalidArgumentError,
    NotFoundError,
    TaskGraphError,
    UnknownTaskError,
)
from .graph import Graph, GraphNode, build_graph
from .model import DependencyEdge, Task
from .toposort import topological_sort

__all__ = [
    "ChainInfo",
    "CriticalPathResult",
    "CycleWouldFormError",
    "DataIntegrityError",
    "DependencyEdge",
    "Graph",
    "GraphNode",
    "InvalidArgumentError",
    "Neighbors",
    "NotFoundError",
    "Task",
    "TaskGraphError",
    "UnknownTaskError",
    "analyze",
    "build_graph",
    "check_and_prepare_insert",
    "compute_critical_path",
    "list_dependencies_and_dependents",
    "remove_edge",
    "topological_sort",
    "would_create_cycle",
]
