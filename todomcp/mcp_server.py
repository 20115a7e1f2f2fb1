"""Model Context Protocol server exposing the todo operations as tools over JSON-RPC."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, TextIO, TypeVar

from .models import CreateTodo, TaskId, UpdateTodo, ValidationError
from .usecase import TodolistUseCase, UseCaseError

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "todomcp"
SERVER_VERSION = "0.1.0"
INSTRUCTIONS = "Real personal financial analysis"

CWD_URI = "str:////Users/to/some/path/"
MEMO_URI = "memo://insights"
_CWD_TEXT = "/Users/to/some/path/"
_MEMO_TEXT = "Business Intelligence Memo\n\nAnalysis has revealed 5 key insights ..."

EXAMPLE_PROMPT = "example_prompt"

_I32_MAX = 2**31 - 1

T = TypeVar("T")


class ErrorCode(IntEnum):
    """JSON-RPC and MCP error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    RESOURCE_NOT_FOUND = -32002


class McpError(Exception):
    """An error reported to the client as a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message
        self.data = data

    @classmethod
    def internal_error(cls, message: str, data: Any = None) -> McpError:
        return cls(ErrorCode.INTERNAL_ERROR, message, data)

    @classmethod
    def invalid_params(cls, message: str, data: Any = None) -> McpError:
        return cls(ErrorCode.INVALID_PARAMS, message, data)

    @classmethod
    def resource_not_found(cls, message: str, data: Any = None) -> McpError:
        return cls(ErrorCode.RESOURCE_NOT_FOUND, message, data)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


@dataclass(frozen=True)
class _Tool:
    name: str
    description: str
    input_schema: dict[str, Any]
    takes_arguments: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


_NO_ARGUMENTS: dict[str, Any] = {"type": "object", "properties": {}}

_TASK_ID_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"id": {"type": "integer", "format": "uint32", "minimum": 0}},
    "required": ["id"],
}

_TOOLS: tuple[_Tool, ...] = (
    _Tool(
        "create_task",
        "Create a new task by specifying its title, description and status. "
        'Example: {"title": "Buy groceries", "description": "Milk, eggs, and bread", '
        '"is_done": false}. On success, returns the full data of the newly created task.',
        {
            "type": "object",
            "properties": {
                "title": {"type": "string"},
                "description": {"type": "string"},
                "is_done": {"type": "boolean"},
            },
            "required": ["title", "description", "is_done"],
        },
        True,
    ),
    _Tool(
        "get_by_id",
        'Retrieve the details of a task by its ID. Example: {"id": 1}. Returns the task '
        "with its id, title, description, is_done, created_at and updated_at.",
        _TASK_ID_SCHEMA,
        True,
    ),
    _Tool(
        "get_all",
        "Retrieve all tasks from the system as an array of task entries.",
        _NO_ARGUMENTS,
        False,
    ),
    _Tool(
        "delete_task",
        'Delete a task by providing its ID. Example: {"id": 1}. Returns only a status '
        "message; an error is returned if no task has the given ID.",
        _TASK_ID_SCHEMA,
        True,
    ),
    _Tool(
        "update_task",
        "Update an existing task by specifying its ID and the fields to change. "
        'Example: {"id": 1, "title": "Buy groceries and fruits", "is_done": true}. '
        "If the ID is unknown, call get_all first. Returns the updated task.",
        {
            "type": "object",
            "properties": {
                "id": {"type": "integer", "format": "int32"},
                "title": {"type": ["string", "null"]},
                "description": {"type": ["string", "null"]},
                "is_done": {"type": ["boolean", "null"]},
            },
            "required": ["id"],
        },
        True,
    ),
    _Tool(
        "count_all_task",
        'Count the total number of tasks, e.g. "Task have: 10 items".',
        _NO_ARGUMENTS,
        False,
    ),
    _Tool(
        "count_done_task",
        'Count the tasks marked as done, e.g. "You have 5 tasks, mark as done".',
        _NO_ARGUMENTS,
        False,
    ),
    _Tool(
        "count_undone_task",
        'Count the tasks not yet done, e.g. "You have 3 tasks, mark as undone".',
        _NO_ARGUMENTS,
        False,
    ),
)


def _text_content(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text}


def _json_content(value: Any) -> dict[str, Any]:
    try:
        text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise McpError.internal_error("Failed to convert results to JSON") from exc
    return _text_content(text)


def _success(*content: dict[str, Any]) -> dict[str, Any]:
    return {"content": list(content), "isError": False}


def _parse(parse: Callable[[Any], T], arguments: Any) -> T:
    try:
        return parse({} if arguments is None else arguments)
    except ValidationError as exc:
        raise McpError.invalid_params(str(exc)) from exc


def _run(operation: Callable[..., T], *args: Any) -> T:
    try:
        return operation(*args)
    except UseCaseError as exc:
        raise McpError.internal_error(str(exc)) from exc


def _as_i32(value: int) -> int:
    """Reinterpret an unsigned 32-bit id as a signed one."""
    return value - 2**32 if value > _I32_MAX else value


def _param_str(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str):
        raise McpError.invalid_params(f"missing or invalid parameter `{key}`")
    return value


def _reply(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _error_reply(request_id: Any, error: McpError) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": error.to_dict()}


class MCPHandler:
    """Serves todo tools, sample resources and a sample prompt to MCP clients."""

    def __init__(self, use_case: TodolistUseCase):
        self._use_case = use_case
        self._tools: dict[str, tuple[_Tool, Callable[..., dict[str, Any]]]] = {
            tool.name: (tool, getattr(self, tool.name)) for tool in _TOOLS
        }
        self._methods: dict[str, Callable[[Mapping[str, Any]], Any]] = {
            "initialize": lambda params: self.get_info(),
            "ping": lambda params: {},
            "tools/list": lambda params: self.list_tools(),
            "tools/call": lambda params: self.call_tool(
                _param_str(params, "name"), params.get("arguments")
            ),
            "resources/list": lambda params: self.list_resources(),
            "resources/read": lambda params: self.read_resource(_param_str(params, "uri")),
            "resources/templates/list": lambda params: self.list_resource_templates(),
            "prompts/list": lambda params: self.list_prompts(),
            "prompts/get": lambda params: self.get_prompt(
                _param_str(params, "name"), params.get("arguments")
            ),
        }

    # Tools

    def create_task(self, arguments: Any) -> dict[str, Any]:
        dto = _parse(CreateTodo.from_dict, arguments)
        data = _run(self._use_case.create_task, dto)
        return _success(_json_content(data.to_dict()))

    def get_by_id(self, arguments: Any) -> dict[str, Any]:
        dto = _parse(TaskId.from_dict, arguments)
        data = _run(self._use_case.get_by_id, _as_i32(dto.id))
        return _success(_json_content(data.to_dict()))

    def get_all(self) -> dict[str, Any]:
        data = _run(self._use_case.get_all)
        return _success(_json_content([entry.to_dict() for entry in data]))

    def delete_task(self, arguments: Any) -> dict[str, Any]:
        dto = _parse(TaskId.from_dict, arguments)
        _run(self._use_case.delete_task, _as_i32(dto.id))
        return _success(_text_content("Task delete succesfull!!!"))

    def update_task(self, arguments: Any) -> dict[str, Any]:
        dto = _parse(UpdateTodo.from_dict, arguments)
        data = _run(self._use_case.update_task, dto.id, dto)
        return _success(_json_content(data.to_dict()))

    def count_all_task(self) -> dict[str, Any]:
        count = _run(self._use_case.count_all_task)
        return _success(_text_content(f"Task have: {count} items"))

    def count_done_task(self) -> dict[str, Any]:
        count = _run(self._use_case.count_done_task)
        return _success(_text_content(f"You have {count} tasks, mark as done"))

    def count_undone_task(self) -> dict[str, Any]:
        count = _run(self._use_case.count_undone_task)
        return _success(_text_content(f"You have {count} tasks, mark as undone"))

    # Server

    def get_info(self) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"prompts": {}, "resources": {}, "tools": {}},
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            "instructions": INSTRUCTIONS,
        }

    def list_tools(self) -> dict[str, Any]:
        return {"tools": [tool.to_dict() for tool in _TOOLS]}

    def call_tool(self, name: str, arguments: Any = None) -> dict[str, Any]:
        try:
            tool, method = self._tools[name]
        except KeyError:
            raise McpError.invalid_params("tool not found") from None
        return method(arguments) if tool.takes_arguments else method()

    def list_resources(self) -> dict[str, Any]:
        return {
            "resources": [
                {"uri": CWD_URI, "name": "cwd"},
                {"uri": MEMO_URI, "name": "memo-name"},
            ]
        }

    def read_resource(self, uri: str) -> dict[str, Any]:
        texts = {CWD_URI: _CWD_TEXT, MEMO_URI: _MEMO_TEXT}
        if uri not in texts:
            raise McpError.resource_not_found("resource_not_found", {"uri": uri})
        return {"contents": [{"uri": uri, "mimeType": "text", "text": texts[uri]}]}

    def list_prompts(self) -> dict[str, Any]:
        return {
            "prompts": [
                {
                    "name": EXAMPLE_PROMPT,
                    "description": "This is an example prompt that takes one required "
                    "argument, message",
                    "arguments": [
                        {
                            "name": "message",
                            "description": "A message to put in the prompt",
                            "required": True,
                        }
                    ],
                }
            ]
        }

    def get_prompt(self, name: str, arguments: Any = None) -> dict[str, Any]:
        if name != EXAMPLE_PROMPT:
            raise McpError.invalid_params("prompt not found")
        message = arguments.get("message") if isinstance(arguments, Mapping) else None
        if not isinstance(message, str):
            raise McpError.invalid_params("No message provided to example_prompt")
        prompt = f"This is an example prompt with your message here: '{message}'"
        return {"messages": [{"role": "user", "content": _text_content(prompt)}]}

    def list_resource_templates(self) -> dict[str, Any]:
        return {"resourceTemplates": []}

    # Transport

    def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Answer one JSON-RPC message; notifications and responses get no reply."""
        if not isinstance(message, Mapping):
            return _error_reply(None, McpError(ErrorCode.INVALID_REQUEST, "Invalid request"))
        request_id = message.get("id")
        is_notification = "id" not in message
        method = message.get("method")
        if not isinstance(method, str):
            if is_notification or "result" in message or "error" in message:
                return None
            return _error_reply(request_id, McpError(ErrorCode.INVALID_REQUEST, "Invalid request"))
        if is_notification:
            logger.debug("notification received: %s", method)
            return None
        params = message.get("params") or {}
        if not isinstance(params, Mapping):
            return _error_reply(request_id, McpError.invalid_params("params must be an object"))
        handler = self._methods.get(method)
        if handler is None:
            return _error_reply(
                request_id, McpError(ErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}")
            )
        try:
            return _reply(request_id, handler(params))
        except McpError as exc:
            return _error_reply(request_id, exc)
        except Exception as exc:
            logger.exception("request %s failed", method)
            return _error_reply(request_id, McpError.internal_error(str(exc)))

    def serve(self, reader: Iterable[str], writer: TextIO) -> None:
        """Read newline-delimited JSON-RPC messages and write the replies until input ends."""
        for line in reader:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError as exc:
                response: dict[str, Any] | None = _error_reply(
                    None, McpError(ErrorCode.PARSE_ERROR, f"Parse error: {exc}")
                )
            else:
                response = self.handle_message(message)
            if response is not None:
                writer.write(json.dumps(response, ensure_ascii=False) + "\n")
                writer.flush()