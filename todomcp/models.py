"""Todo data shapes: request payloads, stored entries and the table layout."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

TABLE_NAME = "todolist"
COLUMNS = ("id", "title", "description", "is_done", "created_at", "updated_at")

TABLE_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    is_done BOOLEAN NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U32_MAX = 2**32 - 1


class ValidationError(ValueError):
    """Raised when a payload is malformed or fails validation."""

    def __init__(self, message: str, errors: Mapping[str, str] | None = None):
        super().__init__(message)
        self.errors = dict(errors or {})


def _as_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError("expected a JSON object")
    return data


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _required(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValidationError(f"missing field `{key}`", {key: "missing"})
    value = data[key]
    valid = _is_int(value) if kind is int else isinstance(value, kind)
    if not valid:
        raise ValidationError(f"invalid type for field `{key}`", {key: "invalid type"})
    return value


def _optional(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if data.get(key) is None:
        return None
    return _required(data, key, kind)


def _bounded(value: int, key: str, low: int, high: int) -> int:
    if not low <= value <= high:
        raise ValidationError(f"field `{key}` out of range", {key: "out of range"})
    return value


@dataclass
class CreateTodo:
    """Payload for creating a task."""

    title: str
    description: str
    is_done: bool

    @classmethod
    def from_dict(cls, data: Any) -> CreateTodo:
        data = _as_mapping(data)
        return cls(
            title=_required(data, "title", str),
            description=_required(data, "description", str),
            is_done=_required(data, "is_done", bool),
        )

    def validate(self) -> None:
        """Raise ValidationError if the title or description is empty."""
        errors = {}
        if len(self.title) < 1:
            errors["title"] = "title cannot be empty"
        if len(self.description) < 1:
            errors["description"] = "description cannot be empty"
        if errors:
            raise ValidationError("; ".join(errors.values()), errors)


@dataclass
class UpdateTodo:
    """Payload for a partial update of a task."""

    id: int
    title: str | None = None
    description: str | None = None
    is_done: bool | None = None

    @classmethod
    def from_dict(cls, data: Any) -> UpdateTodo:
        data = _as_mapping(data)
        return cls(
            id=_bounded(_required(data, "id", int), "id", _I32_MIN, _I32_MAX),
            title=_optional(data, "title", str),
            description=_optional(data, "description", str),
            is_done=_optional(data, "is_done", bool),
        )

    def changes(self) -> dict[str, Any]:
        """The columns to set: every field other than ``id`` that is not None."""
        fields = {"title": self.title, "description": self.description, "is_done": self.is_done}
        return {name: value for name, value in fields.items() if value is not None}


@dataclass
class TodoEntry:
    """A stored task as returned to clients."""

    id: int
    title: str
    description: str
    is_done: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> TodoEntry:
        """Build an entry from a table row; missing timestamps become empty strings."""
        created_at = row["created_at"]
        updated_at = row["updated_at"]
        return cls(
            id=int(row["id"]),
            title=row["title"],
            description=row["description"],
            is_done=bool(row["is_done"]),
            created_at="" if created_at is None else str(created_at),
            updated_at="" if updated_at is None else str(updated_at),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TaskId:
    """Payload naming a single task."""

    id: int

    @classmethod
    def from_dict(cls, data: Any) -> TaskId:
        data = _as_mapping(data)
        return cls(id=_bounded(_required(data, "id", int), "id", 0, _U32_MAX))