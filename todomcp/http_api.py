"""HTTP interface: todo REST routes, CORS headers and the OpenAPI document."""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from functools import reduce
from http import HTTPStatus
from typing import Any, TypeVar

from flask import Blueprint, Flask, Response, jsonify, request

from .models import CreateTodo, UpdateTodo, ValidationError
from .usecase import TodolistUseCase, UseCaseError

API_PREFIX = "/v1"
OPENAPI_PATH = "/api-doc/openapi.json"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Credentials": "true",
}

_I32_PATTERN = re.compile(r"[+-]?[0-9]+")
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1

T = TypeVar("T")


class ErrorResponse(Exception):
    """A failed request: the HTTP status and the plain-text message sent back."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = HTTPStatus(status)
        self.message = message

    def __str__(self) -> str:
        return (
            f"ErrorResponse: status = {self.status.value} {self.status.phrase}, "
            f"message = {self.message}"
        )


def _text(body: str, status: int = HTTPStatus.OK) -> Response:
    return Response(body, status=int(status), mimetype="text/plain")


def _payload(parse: Callable[[Any], T]) -> T:
    """Decode the JSON request body with ``parse``.

    Malformed JSON is a bad request; well-formed JSON of the wrong shape is
    unprocessable.
    """
    try:
        data = json.loads(request.get_data())
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ErrorResponse(HTTPStatus.BAD_REQUEST, f"Malformed JSON body: {exc}") from exc
    try:
        return parse(data)
    except ValidationError as exc:
        raise ErrorResponse(HTTPStatus.UNPROCESSABLE_ENTITY, str(exc)) from exc


def _parse_id(todo_id: str) -> int:
    if _I32_PATTERN.fullmatch(todo_id):
        value = int(todo_id)
        if _I32_MIN <= value <= _I32_MAX:
            return value
    raise ErrorResponse(HTTPStatus.INTERNAL_SERVER_ERROR, f"Invalid todo id {todo_id!r}")


def _run(operation: Callable[..., T], failure: str, *args: Any) -> T:
    try:
        return operation(*args)
    except UseCaseError as exc:
        raise ErrorResponse(HTTPStatus.BAD_REQUEST, failure) from exc


def _todolist_routes(use_case: TodolistUseCase) -> Blueprint:
    routes = Blueprint("todolist", __name__)

    @routes.post("/todo")
    def create_todo() -> Response:
        dto = _payload(CreateTodo.from_dict)
        data = _run(use_case.create_task, "Failed to create task please try again", dto)
        return _text(f"Task create succesfull {data!r}")

    @routes.put("/todo")
    def update_todo() -> Response:
        dto = _payload(UpdateTodo.from_dict)
        data = _run(use_case.update_task, "Failed to update the task", dto.id, dto)
        return _text(f"Task Update Successfull {data!r}")

    @routes.get("/todo/<todo_id>")
    def get_by_id(todo_id: str) -> Response:
        task_id = _parse_id(todo_id)
        data = _run(use_case.get_by_id, f"Fail to get todo by id : {todo_id!r}", task_id)
        return _text(repr(data))

    @routes.get("/todo")
    def get_all() -> Response:
        data = _run(use_case.get_all, "Failed to get all todo")
        return _text(repr(data))

    @routes.delete("/todo/<todo_id>")
    def delete_todo(todo_id: str) -> Response:
        task_id = _parse_id(todo_id)
        _run(use_case.delete_task, f"Fail to delte task id: {task_id}", task_id)
        return _text(f"Task id : {task_id} has deleted")

    @routes.get("/todo/all")
    def count_all_task() -> Response:
        items = _run(use_case.count_all_task, "Fail to get all count")
        return _text(f"all todo have {items} items")

    @routes.get("/todo/done")
    def count_done_task() -> Response:
        items = _run(use_case.count_done_task, "Fail to count done task")
        return _text(f"all todo have {items} task that mark as done")

    @routes.get("/todo/undone")
    def count_undone_task() -> Response:
        items = _run(use_case.count_undone_task, "Fail to count undone task")
        return _text(f"all todo have {items} task that mark as undone")

    return routes


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _json_body(schema: dict[str, Any]) -> dict[str, Any]:
    return {"content": {"application/json": {"schema": schema}}, "required": True}


def _responses(ok: str, failure: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
    success: dict[str, Any] = {"description": ok}
    if body is not None:
        success["content"] = {"application/json": {"schema": body}}
    return {"200": success, "400": {"description": failure}}


def _id_parameter(description: str) -> list[dict[str, Any]]:
    return [
        {
            "name": "todo_id",
            "in": "path",
            "description": description,
            "required": True,
            "schema": {"type": "integer", "format": "int32"},
        }
    ]


def _operation(operation_id: str, summary: str, description: str, **extra: Any) -> dict[str, Any]:
    return {"operationId": operation_id, "summary": summary, "description": description, **extra}


def _todolist_api() -> dict[str, Any]:
    nullable_string = {"type": ["string", "null"]}
    schemas = {
        "ResEntryTodoDto": {
            "type": "object",
            "required": ["id", "title", "description", "is_done", "created_at", "updated_at"],
            "properties": {
                "id": {"type": "integer", "format": "int32", "minimum": 0},
                "title": {"type": "string"},
                "description": {"type": "string"},
                "is_done": {"type": "boolean"},
                "created_at": {"type": "string"},
                "updated_at": {"type": "string"},
            },
        },
        "ReqCreateTodoDto": {
            "type": "object",
            "required": ["title", "description", "is_done"],
            "properties": {
                "title": {"type": "string"},
                "description": {"type": "string"},
                "is_done": {"type": "boolean"},
            },
        },
        "ReqUpdateTodoDto": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "integer", "format": "int32"},
                "title": nullable_string,
                "description": nullable_string,
                "is_done": {"type": ["boolean", "null"]},
            },
        },
    }
    entry = _ref("ResEntryTodoDto")
    paths = {
        "/todo": {
            "post": _operation(
                "create_todo",
                "Create a new todo entry.",
                "Creates a todo item from a title, a description and a completion flag "
                "and returns the details of the new task.",
                requestBody=_json_body(_ref("ReqCreateTodoDto")),
                responses=_responses(
                    "Todo created successfully",
                    "Failed to create todo. Input validation failed or internal error occurred",
                    entry,
                ),
            ),
            "put": _operation(
                "update_todo",
                "Update an existing todo entry.",
                "Updates only the fields given in the request body.",
                requestBody=_json_body(_ref("ReqUpdateTodoDto")),
                responses=_responses(
                    "Todo updated successfully",
                    "Failed to update todo. Invalid input or task not found",
                    entry,
                ),
            ),
            "get": _operation(
                "get_all",
                "Retrieve all todo entries.",
                "Returns every stored todo task with its full details.",
                responses=_responses(
                    "All todos retrieved successfully",
                    "Failed to retrieve todos. Internal error occurred",
                    {"type": "array", "items": entry},
                ),
            ),
        },
        "/todo/{todo_id}": {
            "get": _operation(
                "get_by_id",
                "Retrieve a todo entry by ID.",
                "Returns the full details of the task with the given identifier.",
                parameters=_id_parameter("Unique identifier of the todo task"),
                responses=_responses(
                    "Todo retrieved successfully",
                    "Failed to retrieve todo. Invalid ID or item not found",
                    entry,
                ),
            ),
            "delete": _operation(
                "delete_todo",
                "Delete a todo entry by ID.",
                "Permanently removes the task with the given identifier.",
                parameters=_id_parameter("Unique identifier of the todo task to delete"),
                responses=_responses(
                    "Todo deleted successfully",
                    "Failed to delete todo. Invalid ID or task not found",
                ),
            ),
        },
        "/todo/all": {
            "get": _operation(
                "count_all_task",
                "Count all todo tasks.",
                "Returns the total number of todo items.",
                responses=_responses(
                    "Successfully retrieved the total number of todo items",
                    "Failed to retrieve todo count due to an internal error",
                ),
            )
        },
        "/todo/done": {
            "get": _operation(
                "count_done_task",
                "Count completed todo tasks.",
                "Returns the number of todo items marked as done.",
                responses=_responses(
                    "Successfully retrieved the total number of completed todo items",
                    "Failed to retrieve completed todo count due to an internal error",
                ),
            )
        },
        "/todo/undone": {
            "get": _operation(
                "count_undone_task",
                "Count incomplete (undone) todo tasks.",
                "Returns the number of todo items not marked as done.",
                responses=_responses(
                    "Successfully retrieved the total number of undone todo items",
                    "Failed to retrieve undone todo count due to an internal error",
                ),
            )
        },
    }
    return {"paths": paths, "components": {"schemas": schemas}}


def _api_doc() -> dict[str, Any]:
    return {
        "info": {
            "title": "Todolist Management API",
            "version": "0.1.0",
            "description": "API for Entry Project",
        },
        "servers": [
            {"url": "http://127.0.0.1:8000/v1", "description": "Local Development Server"}
        ],
    }


def _merge(base: dict[str, Any], other: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in other.items():
        if key == "paths":
            paths = {path: dict(ops) for path, ops in merged.get("paths", {}).items()}
            for path, operations in value.items():
                paths.setdefault(path, {}).update(operations)
            merged["paths"] = paths
        elif key == "components":
            components = {name: dict(group) for name, group in merged.get("components", {}).items()}
            for name, group in value.items():
                components.setdefault(name, {}).update(group)
            merged["components"] = components
        elif key in ("servers", "tags", "security"):
            merged[key] = [*merged.get(key, []), *value]
        else:
            merged.setdefault(key, value)
    return merged


def build_openapi() -> dict[str, Any]:
    """The OpenAPI document describing the todo routes."""
    return reduce(_merge, [_todolist_api(), _api_doc()], {"openapi": "3.1.0"})


def _error_response(error: ErrorResponse) -> Response:
    return _text(error.message, error.status)


def _answer_preflight() -> Response | None:
    if request.method == "OPTIONS":
        return _text("")
    return None


def _add_cors_headers(response: Response) -> Response:
    response.headers.update(CORS_HEADERS)
    return response


def create_app(use_case: TodolistUseCase) -> Flask:
    """Build the web application serving the todo API and its OpenAPI document."""
    app = Flask(__name__)
    app.extensions["todo_use_case"] = use_case
    app.register_blueprint(_todolist_routes(use_case), url_prefix=API_PREFIX)
    spec = build_openapi()
    app.add_url_rule(OPENAPI_PATH, "openapi", lambda: jsonify(spec))
    app.register_error_handler(ErrorResponse, _error_response)
    app.before_request(_answer_preflight)
    app.after_request(_add_cors_headers)
    return app