import pytest

from todomcp.http_api import CORS_HEADERS, ErrorResponse, build_openapi, create_app
from todomcp.models import CreateTodo
from todomcp.repository import SqliteTodoRepository
from todomcp.usecase import TodolistUseCase


@pytest.fixture
def use_case():
    with SqliteTodoRepository(":memory:") as repo:
        yield TodolistUseCase(repo)


@pytest.fixture
def client(use_case):
    return create_app(use_case).test_client()


def _create(use_case, title="Buy groceries", is_done=False):
    return use_case.create_task(CreateTodo(title, "Milk, eggs, and bread", is_done))


def test_create_todo(client, use_case):
    response = client.post(
        "/v1/todo", json={"title": "Write report", "description": "Quarterly", "is_done": False}
    )
    assert response.status_code == 200
    body = response.get_data(as_text=True)
    assert body.startswith("Task create succesfull ")
    assert "Write report" in body
    assert [entry.title for entry in use_case.get_all()] == ["Write report"]


def test_create_with_missing_field_is_unprocessable(client, use_case):
    response = client.post("/v1/todo", json={"title": "only title"})
    assert response.status_code == 422
    assert use_case.get_all() == []


def test_create_with_malformed_json_is_bad_request(client):
    response = client.post("/v1/todo", data="{not json", content_type="application/json")
    assert response.status_code == 400


def test_get_by_id(client, use_case):
    entry = _create(use_case)
    response = client.get(f"/v1/todo/{entry.id}")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == repr(use_case.get_by_id(entry.id))


def test_get_missing_id_is_bad_request(client):
    response = client.get("/v1/todo/999")
    assert response.status_code == 400
    body = response.get_data(as_text=True)
    assert body.startswith("Fail to get todo by id : ")
    assert "999" in body


@pytest.mark.parametrize("todo_id", ["abc", "1.5", "99999999999"])
def test_unparsable_id_is_server_error(client, todo_id):
    assert client.get(f"/v1/todo/{todo_id}").status_code == 500


def test_get_all(client, use_case):
    _create(use_case, "one")
    _create(use_case, "two")
    response = client.get("/v1/todo")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == repr(use_case.get_all())


def test_update_todo(client, use_case):
    entry = _create(use_case)
    response = client.put("/v1/todo", json={"id": entry.id, "title": "Buy fruit", "is_done": True})
    assert response.status_code == 200
    assert response.get_data(as_text=True).startswith("Task Update Successfull ")
    updated = use_case.get_by_id(entry.id)
    assert updated.title == "Buy fruit"
    assert updated.is_done is True
    assert updated.description == entry.description


def test_update_missing_task_is_bad_request(client):
    response = client.put("/v1/todo", json={"id": 42, "title": "nothing"})
    assert response.status_code == 400
    assert response.get_data(as_text=True) == "Failed to update the task"


def test_delete_todo(client, use_case):
    entry = _create(use_case)
    response = client.delete(f"/v1/todo/{entry.id}")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == f"Task id : {entry.id} has deleted"
    assert client.get(f"/v1/todo/{entry.id}").status_code == 400


def test_delete_missing_task_is_bad_request(client):
    response = client.delete("/v1/todo/42")
    assert response.status_code == 400
    assert response.get_data(as_text=True) == "Fail to delte task id: 42"


def test_counts(client, use_case):
    _create(use_case, "a", True)
    _create(use_case, "b", False)
    _create(use_case, "c", False)
    all_body = client.get("/v1/todo/all").get_data(as_text=True)
    done_body = client.get("/v1/todo/done").get_data(as_text=True)
    undone_body = client.get("/v1/todo/undone").get_data(as_text=True)
    assert all_body == f"all todo have {use_case.count_all_task()} items"
    assert done_body == f"all todo have {use_case.count_done_task()} task that mark as done"
    assert undone_body == f"all todo have {use_case.count_undone_task()} task that mark as undone"


def test_cors_headers_on_every_response(client):
    for response in (client.get("/v1/todo"), client.get("/v1/todo/999"), client.get("/nowhere")):
        for name, value in CORS_HEADERS.items():
            assert response.headers[name] == value


def test_preflight_answered_with_empty_body(client):
    response = client.options("/anything/at/all")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == ""
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_openapi_document_served(client):
    response = client.get("/api-doc/openapi.json")
    assert response.status_code == 200
    assert response.get_json() == build_openapi()


def test_openapi_merges_routes_and_info():
    spec = build_openapi()
    assert spec["info"]["title"] == "Todolist Management API"
    assert spec["info"]["version"] == "0.1.0"
    assert spec["servers"][0]["url"] == "http://127.0.0.1:8000/v1"
    assert set(spec["paths"]) == {"/todo", "/todo/{todo_id}", "/todo/all", "/todo/done", "/todo/undone"}
    assert set(spec["paths"]["/todo"]) == {"get", "post", "put"}
    assert set(spec["paths"]["/todo/{todo_id}"]) == {"get", "delete"}
    assert set(spec["components"]["schemas"]) == {
        "ResEntryTodoDto",
        "ReqCreateTodoDto",
        "ReqUpdateTodoDto",
    }


def test_error_response_display():
    error = ErrorResponse(400, "nope")
    assert str(error) == "ErrorResponse: status = 400 Bad Request, message = nope"
    assert error.message == "nope"