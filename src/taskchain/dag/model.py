"""Task and dependency edge model for the dependency engine.

Tasks are owned by the store; the engine only reads them.  Both types
serialize to the camelCase JSON shape the web client consumes
(``createdAt``, ``dueDate``, ``imageURL``, ``fromId``, ``toId``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .errors import InvalidArgumentError


_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INT_RE = re.compile(r"^\+?[0-9]+$")


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

def _to_millis(dt: datetime) -> datetime:
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


def now_utc() -> datetime:
    """Current UTC time at the millisecond precision the store persists."""
    return _to_millis(datetime.now(timezone.utc))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp or ``YYYY-MM-DD`` date into an aware UTC datetime.

    Empty values yield ``None``.  A bare date means midnight UTC.  Raises
    :class:`InvalidArgumentError` for anything else that does not parse.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if _DATE_ONLY_RE.match(text):
            text = f"{text}T00:00:00+00:00"
        elif text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidArgumentError(f"Invalid timestamp: {value!r}") from exc
    # A naive timestamp is assumed to be UTC.
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return _to_millis(dt.astimezone(timezone.utc))


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render *value* as ``2024-01-10T00:00:00.000Z`` (or ``None``)."""
    if value is None:
        return None
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def coerce_task_id(value: Any, name: str = "id") -> int:
    """Validate a task id coming from the outside world.

    Accepts ints and base-10 integer strings.  Booleans, floats with a
    fraction, blanks and non-positive numbers raise :class:`InvalidArgumentError`.
    """
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"Invalid {name}: {value!r}")
    if isinstance(value, int):
        task_id = value
    elif isinstance(value, float) and value.is_integer():
        task_id = int(value)
    elif isinstance(value, str) and _INT_RE.match(value.strip()):
        task_id = int(value.strip())
    else:
        raise InvalidArgumentError(f"Invalid {name}: {value!r}")
    if task_id <= 0:
        raise InvalidArgumentError(f"Invalid {name}: {value!r}")
    return task_id


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A unit of work on the board."""

    id: int
    title: str
    created_at: datetime = field(default_factory=now_utc)
    due_date: Optional[datetime] = None
    image_url: Optional[str] = None

    @property
    def finish_time(self) -> datetime:
        """Proxy finish time: the due date, or the creation time when unset."""
        return self.due_date if self.due_date is not None else self.created_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": format_timestamp(self.created_at),
            "dueDate": format_timestamp(self.due_date),
            "imageURL": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize from either the camelCase or the snake_case shape.

        A record without a creation time has no finish-time fallback and is
        rejected with :class:`InvalidArgumentError`.
        """
        created = parse_timestamp(data.get("createdAt", data.get("created_at")))
        if created is None:
            raise InvalidArgumentError(f"Task {data.get('id')!r} has no createdAt")
        return cls(
            id=coerce_task_id(data.get("id")),
            title=str(data.get("title", "")),
            created_at=created,
            due_date=parse_timestamp(data.get("dueDate", data.get("due_date"))),
            image_url=data.get("imageURL", data.get("image_url")),
        )


# ---------------------------------------------------------------------------
# DependencyEdge
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class DependencyEdge:
    """``from_id`` depends on ``to_id``: ``to_id`` must finish first."""

    from_id: int
    to_id: int

    def to_dict(self) -> dict[str, int]:
        return {"fromId": self.from_id, "toId": self.to_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DependencyEdge":
        return cls(
            from_id=coerce_task_id(data.get("fromId", data.get("from_id")), "fromId"),
            to_id=coerce_task_id(data.get("toId", data.get("to_id")), "toId"),
        )
