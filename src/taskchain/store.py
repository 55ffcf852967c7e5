"""File-based task and dependency store with exclusive locking.

Tasks and dependency edges live in a single YAML file (``tasks.yaml``) inside
the project's ``.taskchain/`` directory.  All reads and writes go through
:meth:`TaskStore.transaction` or :meth:`TaskStore.read_snapshot`, both of which
hold an exclusive file lock, so a check-then-insert performed inside one
transaction is serialized against every other writer of the same store.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from filelock import FileLock, Timeout
from loguru import logger

from .constants import DEFAULT_LOCK_TIMEOUT, LOCK_FILENAME, STORE_FILENAME, STORE_VERSION
from .dag.engine import remove_edge
from .dag.errors import NotFoundError, TaskGraphError
from .dag.model import DependencyEdge, Task, now_utc
from .io_utils import _atomic_write_yaml, _load_yaml_with_error


class StoreError(Exception):
    """The store file could not be locked, read, or parsed."""


# ---------------------------------------------------------------------------
# TaskStore
# ---------------------------------------------------------------------------

class TaskStore:
    """Lock-guarded, file-backed store for :class:`Task` and :class:`DependencyEdge`.

    Parameters
    ----------
    state_dir:
        Path to the ``.taskchain/`` directory for the project.
    lock_timeout:
        Seconds to wait for the exclusive lock before raising :class:`StoreError`.
    """

    def __init__(self, state_dir: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self._state_dir = state_dir
        self._store_path = state_dir / STORE_FILENAME
        self._lock_path = state_dir / LOCK_FILENAME
        self._lock_timeout = lock_timeout

    @property
    def path(self) -> Path:
        return self._store_path

    # -- internal helpers ---------------------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        self._state_dir.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(self._lock_path), timeout=self._lock_timeout)
        try:
            lock.acquire()
        except Timeout as exc:
            raise StoreError(
                f"Timed out after {self._lock_timeout}s waiting for {self._lock_path}"
            ) from exc
        try:
            yield
        finally:
            lock.release()

    def _load(self) -> _GraphTx:
        raw, err = _load_yaml_with_error(self._store_path, {})
        if err:
            raise StoreError(err)
        try:
            tasks = [Task.from_dict(d) for d in raw.get("tasks") or []]
            edges = [DependencyEdge.from_dict(d) for d in raw.get("dependencies") or []]
        except (TaskGraphError, AttributeError, TypeError) as exc:
            raise StoreError(f"{self._store_path.name}: malformed record: {exc}") from exc
        next_id = raw.get("next_id")
        if not isinstance(next_id, int) or isinstance(next_id, bool):
            next_id = 1
        return _GraphTx(tasks, edges, next_id)

    def _save(self, tx: _GraphTx) -> None:
        payload: dict[str, Any] = {
            "version": STORE_VERSION,
            "next_id": tx.next_id,
            "tasks": [t.to_dict() for t in tx.list_tasks()],
            "dependencies": [e.to_dict() for e in tx.edges()],
        }
        _atomic_write_yaml(self._store_path, payload)

    # -- public API ---------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[_GraphTx]:
        """Acquire the lock, load, yield a transaction, and save on clean exit.

        Usage::

            with store.transaction() as tx:
                edge = check_and_prepare_insert(a, b, tx.list_tasks(), tx.edges())
                tx.add_edge(edge)
                # saved on exit

        If the block raises, nothing is written.
        """
        with self._locked():
            tx = self._load()
            yield tx
            if tx.dirty:
                self._save(tx)

    def read_snapshot(self) -> tuple[list[Task], list[DependencyEdge]]:
        """Return ``(tasks, edges)``; the lock is released before returning."""
        with self._locked():
            tx = self._load()
        return tx.list_tasks(), tx.edges()


class _GraphTx:
    """In-memory transaction over the task list and the edge set.

    Mutations set ``dirty`` and are flushed when the ``transaction`` context
    manager exits.
    """

    def __init__(self, tasks: list[Task], edges: list[DependencyEdge], next_id: int) -> None:
        self._tasks: dict[int, Task] = {t.id: t for t in tasks}
        self._edges: set[DependencyEdge] = set(edges)
        self.next_id = max([next_id, *(tid + 1 for tid in self._tasks)])
        self.dirty = False

    # -- lookups ------------------------------------------------------------

    def list_tasks(self) -> list[Task]:
        return [self._tasks[tid] for tid in sorted(self._tasks)]

    def edges(self) -> list[DependencyEdge]:
        return sorted(self._edges)

    # -- mutations ----------------------------------------------------------

    def add_task(
        self,
        title: str,
        due_date: Any = None,
        image_url: Optional[str] = None,
    ) -> Task:
        task = Task(
            id=self.next_id,
            title=title,
            created_at=now_utc(),
            due_date=due_date,
            image_url=image_url,
        )
        self._tasks[task.id] = task
        self.next_id += 1
        self.dirty = True
        return task

    def delete_task(self, task_id: int) -> Task:
        """Remove a task and every edge touching it."""
        task = self._tasks.pop(task_id, None)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        dropped = {e for e in self._edges if task_id in (e.from_id, e.to_id)}
        self._edges -= dropped
        if dropped:
            logger.debug("Dropped {} edge(s) with deleted task {}", len(dropped), task_id)
        self.dirty = True
        return task

    def add_edge(self, edge: DependencyEdge) -> bool:
        """Insert *edge*; returns False when it was already present."""
        if edge in self._edges:
            return False
        self._edges.add(edge)
        self.dirty = True
        return True

    def remove_edge(self, from_id: int, to_id: int) -> None:
        """Delete ``(from_id, to_id)``; raises NotFoundError when absent."""
        self._edges = remove_edge(from_id, to_id, self._edges)
        self.dirty = True
