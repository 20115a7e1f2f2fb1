import pytest

from todomcp.models import CreateTodo, UpdateTodo
from todomcp.repository import (
    NotFoundError,
    RepositoryError,
    SqliteTodoRepository,
    TodoRepository,
    connect,
)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "todo.db")


@pytest.fixture
def repo(db_path):
    with SqliteTodoRepository(db_path) as repository:
        yield repository


def _add(repo, title="t", description="d", is_done=False):
    return repo.create_task(CreateTodo(title, description, is_done))


def test_repository_implements_interface(repo):
    assert isinstance(repo, TodoRepository)
    assert repo.get_all() == []


def test_create_then_get_by_id(repo):
    created = _add(repo, "Buy groceries", "Milk, eggs, and bread", False)
    assert created.title == "Buy groceries"
    assert created.is_done is False
    assert created.created_at
    assert repo.get_by_id(created.id) == created


def test_ids_increase(repo):
    first = _add(repo)
    second = _add(repo)
    assert second.id > first.id


def test_get_missing_raises(repo):
    with pytest.raises(NotFoundError, match="Todo with id 99 not found"):
        repo.get_by_id(99)


def test_update_changes_only_given_fields(repo):
    created = _add(repo, "old", "keep", False)
    updated = repo.update_task(created.id, UpdateTodo(id=created.id, title="new", is_done=True))
    assert updated.title == "new"
    assert updated.description == "keep"
    assert updated.is_done is True
    assert repo.get_by_id(created.id) == updated


def test_update_uses_task_id_argument(repo):
    first = _add(repo, "first")
    second = _add(repo, "second")
    repo.update_task(second.id, UpdateTodo(id=first.id, title="changed"))
    assert repo.get_by_id(first.id).title == "first"
    assert repo.get_by_id(second.id).title == "changed"


def test_update_missing_raises(repo):
    with pytest.raises(NotFoundError, match="No todo item found with id 5"):
        repo.update_task(5, UpdateTodo(id=5, title="x"))


def test_update_without_changes_raises(repo):
    created = _add(repo)
    with pytest.raises(RepositoryError):
        repo.update_task(created.id, UpdateTodo(id=created.id))


def test_get_all_in_insertion_order(repo):
    titles = ["a", "b", "c"]
    for title in titles:
        _add(repo, title)
    assert [entry.title for entry in repo.get_all()] == titles


def test_delete_removes_task(repo):
    created = _add(repo)
    repo.delete_task(created.id)
    assert repo.count_all_task() == 0
    with pytest.raises(NotFoundError):
        repo.get_by_id(created.id)


def test_delete_missing_raises(repo):
    with pytest.raises(NotFoundError, match="No todo item found with id 3"):
        repo.delete_task(3)


def test_counts(repo):
    _add(repo, is_done=True)
    _add(repo, is_done=False)
    _add(repo, is_done=False)
    assert repo.count_all_task() == 3
    assert repo.count_done_task() == 1
    assert repo.count_undone_task() == 2
    assert repo.count_done_task() + repo.count_undone_task() == repo.count_all_task()


def test_data_persists_across_instances(db_path):
    with SqliteTodoRepository(db_path) as first:
        created = _add(first, "kept")
    with SqliteTodoRepository(db_path) as second:
        assert second.get_by_id(created.id).title == "kept"


def test_sqlite_url_prefix(tmp_path):
    url = "sqlite://" + str(tmp_path / "url.db")
    with SqliteTodoRepository(url) as repository:
        created = _add(repository, "via url")
    assert (tmp_path / "url.db").exists()
    assert created.title == "via url"


def test_connect_failure_raises(tmp_path):
    with pytest.raises(RepositoryError, match="Failed to get DB connection"):
        connect(str(tmp_path / "missing" / "todo.db"))