"""Insertion-time cycle guard."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from .model import DependencyEdge


def would_create_cycle(from_id: int, to_id: int, edges: Iterable[DependencyEdge]) -> bool:
    """Return True if adding ``from_id -> to_id`` ("from depends on to") closes a cycle.

    That happens exactly when ``to_id`` already depends, directly or
    transitively, on ``from_id``.  We walk the depends-on relation starting at
    ``to_id`` with an explicit stack and stop as soon as ``from_id`` shows up.
    """
    if from_id == to_id:
        return True

    depends_on: dict[int, list[int]] = defaultdict(list)
    for edge in edges:
        depends_on[edge.from_id].append(edge.to_id)

    visited: set[int] = set()
    stack: list[int] = [to_id]
    while stack:
        current = stack.pop()
        if current == from_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        for dep_id in depends_on.get(current, ()):
            if dep_id not in visited:
                stack.append(dep_id)
    return False
