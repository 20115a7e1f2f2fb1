"""Application layer: todo operations with uniform failure reporting."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from .models import CreateTodo, TodoEntry, UpdateTodo
from .repository import TodoRepository


class UseCaseError(RuntimeError):
    """Raised when a todo operation fails; the underlying error is chained."""


@contextmanager
def _failure(message: str) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        raise UseCaseError(message) from exc


class TodolistUseCase:
    """Runs todo operations against a repository."""

    def __init__(self, repo: TodoRepository):
        self._repo = repo

    def create_task(self, dto: CreateTodo) -> TodoEntry:
        with _failure("Fail to create"):
            return self._repo.create_task(dto)

    def update_task(self, task_id: int, dto: UpdateTodo) -> TodoEntry:
        with _failure("Fail to update"):
            return self._repo.update_task(task_id, dto)

    def get_by_id(self, task_id: int) -> TodoEntry:
        with _failure("Fail to retrive"):
            return self._repo.get_by_id(task_id)

    def get_all(self) -> list[TodoEntry]:
        with _failure("Fail to get all tasks"):
            return self._repo.get_all()

    def delete_task(self, task_id: int) -> None:
        with _failure("Fail to delete"):
            self._repo.delete_task(task_id)

    def count_all_task(self) -> int:
        with _failure("Fail to count all tasks"):
            return self._repo.count_all_task()

    def count_done_task(self) -> int:
        with _failure("Fail to count done task"):
            return self._repo.count_done_task()

    def count_undone_task(self) -> int:
        with _failure("Fail to count undone task"):
            return self._repo.count_undone_task()