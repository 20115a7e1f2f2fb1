import pytest

from todomcp.models import CreateTodo, UpdateTodo
from todomcp.repository import NotFoundError, RepositoryError, SqliteTodoRepository, TodoRepository
from todomcp.usecase import TodolistUseCase, UseCaseError


class _BrokenRepository(TodoRepository):
    def create_task(self, dto):
        raise RepositoryError("broken")

    def update_task(self, task_id, dto):
        raise RepositoryError("broken")

    def get_by_id(self, task_id):
        raise RepositoryError("broken")

    def get_all(self):
        raise RepositoryError("broken")

    def delete_task(self, task_id):
        raise RepositoryError("broken")

    def count_all_task(self):
        raise RepositoryError("broken")

    def count_done_task(self):
        raise RepositoryError("broken")

    def count_undone_task(self):
        raise RepositoryError("broken")


@pytest.fixture
def use_case():
    with SqliteTodoRepository(":memory:") as repo:
        yield TodolistUseCase(repo)


def test_create_then_get_round_trip(use_case):
    created = use_case.create_task(CreateTodo("Buy groceries", "Milk, eggs, and bread", False))
    fetched = use_case.get_by_id(created.id)
    assert fetched == created
    assert fetched.title == "Buy groceries"
    assert fetched.description == "Milk, eggs, and bread"
    assert fetched.is_done is False


def test_update_changes_only_given_fields(use_case):
    created = use_case.create_task(CreateTodo("Do laundry", "Wash and dry clothes", False))
    updated = use_case.update_task(created.id, UpdateTodo(id=created.id, is_done=True))
    assert updated.is_done is True
    assert updated.title == created.title
    assert updated.description == created.description


def test_get_all_returns_every_task(use_case):
    titles = ["first", "second", "third"]
    for title in titles:
        use_case.create_task(CreateTodo(title, "details", False))
    assert [entry.title for entry in use_case.get_all()] == titles


def test_counts_are_consistent(use_case):
    use_case.create_task(CreateTodo("a", "a", True))
    use_case.create_task(CreateTodo("b", "b", False))
    use_case.create_task(CreateTodo("c", "c", False))
    total = use_case.count_all_task()
    assert total == len(use_case.get_all())
    assert use_case.count_done_task() + use_case.count_undone_task() == total
    assert use_case.count_done_task() == sum(entry.is_done for entry in use_case.get_all())


def test_delete_removes_task(use_case):
    created = use_case.create_task(CreateTodo("gone", "soon", False))
    use_case.delete_task(created.id)
    with pytest.raises(UseCaseError, match="Fail to retrive"):
        use_case.get_by_id(created.id)


def test_missing_task_error_chains_repository_error(use_case):
    with pytest.raises(UseCaseError) as info:
        use_case.get_by_id(404)
    assert str(info.value) == "Fail to retrive"
    assert isinstance(info.value.__cause__, NotFoundError)


def test_delete_missing_task_fails(use_case):
    with pytest.raises(UseCaseError, match="Fail to delete"):
        use_case.delete_task(404)


def test_update_missing_task_fails(use_case):
    with pytest.raises(UseCaseError, match="Fail to update"):
        use_case.update_task(404, UpdateTodo(id=404, title="new"))


def test_update_without_changes_fails(use_case):
    created = use_case.create_task(CreateTodo("same", "same", False))
    with pytest.raises(UseCaseError, match="Fail to update"):
        use_case.update_task(created.id, UpdateTodo(id=created.id))


@pytest.mark.parametrize(
    ("call", "message"),
    [
        (lambda uc: uc.create_task(CreateTodo("t", "d", False)), "Fail to create"),
        (lambda uc: uc.update_task(1, UpdateTodo(id=1, title="t")), "Fail to update"),
        (lambda uc: uc.get_by_id(1), "Fail to retrive"),
        (lambda uc: uc.get_all(), "Fail to get all tasks"),
        (lambda uc: uc.delete_task(1), "Fail to delete"),
        (lambda uc: uc.count_all_task(), "Fail to count all tasks"),
        (lambda uc: uc.count_done_task(), "Fail to count done task"),
        (lambda uc: uc.count_undone_task(), "Fail to count undone task"),
    ],
)
def test_repository_failures_are_reported(call, message):
    with pytest.raises(UseCaseError) as info:
        call(TodolistUseCase(_BrokenRepository()))
    assert str(info.value) == message
    assert isinstance(info.value.__cause__, RepositoryError)