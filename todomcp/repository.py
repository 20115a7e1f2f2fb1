"""Todo storage: the repository interface and its SQLite implementation."""

from __future__ import annotations

import abc
import sqlite3
import threading
from typing import Any

from .models import TABLE_NAME, TABLE_SCHEMA, CreateTodo, TodoEntry, UpdateTodo


class RepositoryError(RuntimeError):
    """Raised when a storage operation fails."""


class NotFoundError(RepositoryError):
    """Raised when no task has the requested id."""


class TodoRepository(abc.ABC):
    """Operations every todo store provides."""

    @abc.abstractmethod
    def create_task(self, dto: CreateTodo) -> TodoEntry: ...

    @abc.abstractmethod
    def update_task(self, task_id: int, dto: UpdateTodo) -> TodoEntry: ...

    @abc.abstractmethod
    def get_by_id(self, task_id: int) -> TodoEntry: ...

    @abc.abstractmethod
    def get_all(self) -> list[TodoEntry]: ...

    @abc.abstractmethod
    def delete_task(self, task_id: int) -> None: ...

    @abc.abstractmethod
    def count_all_task(self) -> int: ...

    @abc.abstractmethod
    def count_done_task(self) -> int: ...

    @abc.abstractmethod
    def count_undone_task(self) -> int: ...


def connect(database_url: str) -> sqlite3.Connection:
    """Open a SQLite connection from a path, ``file:`` URI or ``sqlite://`` URL."""
    target = database_url
    if target.startswith("sqlite://"):
        target = "file:" + target[len("sqlite://"):]
    try:
        conn = sqlite3.connect(
            target, uri=target.startswith("file:"), check_same_thread=False
        )
    except sqlite3.Error as exc:
        raise RepositoryError("Failed to get DB connection from pool") from exc
    conn.row_factory = sqlite3.Row
    return conn


class SqliteTodoRepository(TodoRepository):
    """Todo store backed by a single SQLite connection."""

    def __init__(self, database_url: str):
        self._conn = connect(database_url)
        self._lock = threading.Lock()
        try:
            with self._conn:
                self._conn.execute(TABLE_SCHEMA)
        except sqlite3.Error as exc:
            self._conn.close()
            raise RepositoryError("Failed to prepare the todo table") from exc

    def __enter__(self) -> SqliteTodoRepository:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def _fetch(self, task_id: int) -> sqlite3.Row | None:
        return self._conn.execute(
            f"SELECT * FROM {TABLE_NAME} WHERE id = ?", (task_id,)
        ).fetchone()

    def _count(self, where: str, params: tuple, failure: str) -> int:
        try:
            with self._lock:
                (count,) = self._conn.execute(
                    f"SELECT COUNT(*) FROM {TABLE_NAME}{where}", params
                ).fetchone()
        except sqlite3.Error as exc:
            raise RepositoryError(failure) from exc
        return int(count)

    def create_task(self, dto: CreateTodo) -> TodoEntry:
        try:
            with self._lock, self._conn:
                cursor = self._conn.execute(
                    f"INSERT INTO {TABLE_NAME} (title, description, is_done) VALUES (?, ?, ?)",
                    (dto.title, dto.description, dto.is_done),
                )
                row = self._fetch(cursor.lastrowid)
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to insert new todo into database") from exc
        return TodoEntry.from_row(row)

    def update_task(self, task_id: int, dto: UpdateTodo) -> TodoEntry:
        changes = dto.changes()
        if not changes:
            raise RepositoryError("Failed to update todo item: there are no changes to save")
        assignments = ", ".join(f"{column} = ?" for column in changes)
        try:
            with self._lock, self._conn:
                cursor = self._conn.execute(
                    f"UPDATE {TABLE_NAME} SET {assignments} WHERE id = ?",
                    (*changes.values(), task_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"No todo item found with id {task_id}")
                row = self._fetch(task_id)
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to update todo item") from exc
        if row is None:
            raise RepositoryError("Failed to get Data")
        return TodoEntry.from_row(row)

    def get_by_id(self, task_id: int) -> TodoEntry:
        try:
            with self._lock:
                row = self._fetch(task_id)
        except sqlite3.Error as exc:
            raise RepositoryError(f"Todo with id {task_id} not found") from exc
        if row is None:
            raise NotFoundError(f"Todo with id {task_id} not found")
        return TodoEntry.from_row(row)

    def get_all(self) -> list[TodoEntry]:
        try:
            with self._lock:
                rows = self._conn.execute(f"SELECT * FROM {TABLE_NAME} ORDER BY id").fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to load todo items from the database") from exc
        return [TodoEntry.from_row(row) for row in rows]

    def delete_task(self, task_id: int) -> None:
        try:
            with self._lock, self._conn:
                cursor = self._conn.execute(
                    f"DELETE FROM {TABLE_NAME} WHERE id = ?", (task_id,)
                )
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to delete todo item") from exc
        if cursor.rowcount == 0:
            raise NotFoundError(f"No todo item found with id {task_id}")

    def count_all_task(self) -> int:
        return self._count("", (), "Failed to count all todo items in the database")

    def count_done_task(self) -> int:
        return self._count(
            " WHERE is_done = ?", (True,), "Failed to count done todo items in the database"
        )

    def count_undone_task(self) -> int:
        return self._count(
            " WHERE is_done = ?", (False,), "Failed to count undone todo items in the database"
        )