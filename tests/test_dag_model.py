"""Tests for the task / edge model (dag/model.py)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskchain.dag.errors import InvalidArgumentError
from taskchain.dag.model import (
    DependencyEdge,
    Task,
    coerce_task_id,
    format_timestamp,
    parse_timestamp,
)


class TestTimestamps:
    def test_date_only_is_midnight_utc(self) -> None:
        assert parse_timestamp("2024-01-10") == datetime(2024, 1, 10, tzinfo=timezone.utc)

    def test_zulu_suffix(self) -> None:
        assert parse_timestamp("2024-01-10T12:30:00.000Z") == datetime(
            2024, 1, 10, 12, 30, tzinfo=timezone.utc
        )

    def test_offset_is_normalized_to_utc(self) -> None:
        parsed = parse_timestamp("2024-01-10T02:00:00+02:00")
        assert parsed == datetime(2024, 1, 10, 0, 0, tzinfo=timezone.utc)
        assert parsed is not None and parsed.utcoffset() == timedelta(0)

    def test_naive_assumed_utc(self) -> None:
        assert parse_timestamp("2024-01-10T05:00:00") == datetime(2024, 1, 10, 5, tzinfo=timezone.utc)

    @pytest.mark.parametrize("empty", [None, "", "   "])
    def test_empty_is_none(self, empty: object) -> None:
        assert parse_timestamp(empty) is None

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_timestamp("next tuesday")

    def test_parse_truncates_to_millis(self) -> None:
        parsed = parse_timestamp("2024-01-10T08:05:03.456789Z")
        assert parsed == datetime(2024, 1, 10, 8, 5, 3, 456000, tzinfo=timezone.utc)

    def test_format_millis_and_z(self) -> None:
        value = datetime(2024, 1, 10, 8, 5, 3, 456789, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-01-10T08:05:03.456Z"
        assert format_timestamp(None) is None


class TestCoerceTaskId:
    @pytest.mark.parametrize("raw,expected", [(5, 5), ("5", 5), (" 12 ", 12), (3.0, 3)])
    def test_valid(self, raw: object, expected: int) -> None:
        assert coerce_task_id(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "x1", "1e3", 1.5, False, 0, -3, [1]])
    def test_invalid(self, raw: object) -> None:
        with pytest.raises(InvalidArgumentError):
            coerce_task_id(raw)


class TestTask:
    def test_finish_time_prefers_due_date(self) -> None:
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        due = datetime(2024, 2, 1, tzinfo=timezone.utc)
        assert Task(id=1, title="a", created_at=created, due_date=due).finish_time == due
        assert Task(id=2, title="b", created_at=created).finish_time == created

    def test_to_dict_shape(self) -> None:
        task = Task(
            id=7,
            title="Write docs",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            due_date=datetime(2024, 1, 10, tzinfo=timezone.utc),
            image_url="https://example.test/a.png",
        )
        assert task.to_dict() == {
            "id": 7,
            "title": "Write docs",
            "createdAt": "2024-01-01T00:00:00.000Z",
            "dueDate": "2024-01-10T00:00:00.000Z",
            "imageURL": "https://example.test/a.png",
        }

    def test_from_dict_accepts_snake_case(self) -> None:
        task = Task.from_dict({"id": "3", "title": "x", "created_at": "2024-01-01", "due_date": None})
        assert task.id == 3
        assert task.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert task.due_date is None
        assert task.image_url is None

    def test_from_dict_rejects_bad_id(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Task.from_dict({"id": "nope", "title": "x", "createdAt": "2024-01-01"})

    def test_from_dict_requires_created_at(self) -> None:
        with pytest.raises(InvalidArgumentError, match="createdAt"):
            Task.from_dict({"id": 1, "title": "x", "dueDate": "2024-01-10"})


class TestDependencyEdge:
    def test_hashable_and_ordered(self) -> None:
        edges = {DependencyEdge(2, 1), DependencyEdge(2, 1), DependencyEdge(1, 3)}
        assert sorted(edges) == [DependencyEdge(1, 3), DependencyEdge(2, 1)]

    def test_dict_shape(self) -> None:
        edge = DependencyEdge.from_dict({"fromId": 4, "toId": "2"})
        assert edge == DependencyEdge(4, 2)
        assert edge.to_dict() == {"fromId": 4, "toId": 2}
