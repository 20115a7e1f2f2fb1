# todomcp

A small todo list service that keeps its tasks in a SQLite database and
offers them two ways at once:

- a REST API under `/v1`, with an OpenAPI document and CORS headers on
  every response;
- a Model Context Protocol (MCP) server speaking newline-delimited
  JSON-RPC over standard input and output, so that an assistant can
  create, read, update, delete and count tasks through tools.

## Installation

```
pip install .
```

## Configuration

The database location is read from the `DATABASE_URL` environment
variable. A `.env` file found from the working directory upwards is loaded
first, so the variable may be set there:

```
DATABASE_URL=todo.db
```

If `DATABASE_URL` is not set, the first command-line argument is used
instead. The value may be a file path, a `file:` URI or a `sqlite://` URL.
The `todolist` table is created on first use if it does not exist.

The HTTP server listens on `127.0.0.1:8000` by default; set
`TODO_HTTP_ADDRESS` and `TODO_HTTP_PORT` to change that.

## Running

```
todomcp todo.db
```

This starts the HTTP server and the MCP server on stdio together. The
program stops when either of them ends, or on Ctrl+C, and exits with
status 1 if no database is configured or the server cannot start. Log
lines go to standard error so that they never mix with MCP traffic on
standard output.

## REST API

All routes live under `/v1`:

| Method | Path              | Purpose                          |
|--------|-------------------|----------------------------------|
| POST   | `/v1/todo`        | create a task                    |
| PUT    | `/v1/todo`        | update a task (partial)          |
| GET    | `/v1/todo`        | list all tasks                   |
| GET    | `/v1/todo/<id>`   | fetch one task                   |
| DELETE | `/v1/todo/<id>`   | delete one task                  |
| GET    | `/v1/todo/all`    | count all tasks                  |
| GET    | `/v1/todo/done`   | count tasks marked as done       |
| GET    | `/v1/todo/undone` | count tasks not yet done         |

A task is created from a body such as:

```json
{"title": "Buy groceries", "description": "Milk, eggs, and bread", "is_done": false}
```

An update carries the task's `id` and any of `title`, `description` and
`is_done`; fields left out or `null` are not changed.

Responses are plain text messages, not JSON. A failed operation (for
example an unknown id) answers with status 400 and a short message;
malformed JSON gives 400, a body of the wrong shape gives 422, and an id in
the path that is not a 32-bit integer gives 500. `OPTIONS` requests are
answered with an empty 200 response. The OpenAPI document is served as
JSON at `/api-doc/openapi.json`.

## MCP tools

The MCP server answers `initialize`, `ping`, `tools/list`, `tools/call`,
`resources/list`, `resources/read`, `resources/templates/list`,
`prompts/list` and `prompts/get`. Its tools are `create_task`,
`get_by_id`, `get_all`, `delete_task`, `update_task`, `count_all_task`,
`count_done_task` and `count_undone_task`; task data comes back as JSON
text content. It also offers an example prompt, `example_prompt`, which
takes a `message` argument, and two fixed example resources.

## Use from Python

```python
from todomcp.cli import build_use_case
from todomcp.models import CreateTodo

use_case = build_use_case("todo.db")
entry = use_case.create_task(CreateTodo("Buy groceries", "Milk, eggs, and bread", False))
print(entry.to_dict())
print(use_case.count_undone_task())
```

`CreateTodo.validate()` raises `ValidationError` when the title or
description is empty; nothing calls it for you. Failures in the use case
raise `UseCaseError`, with the storage error chained.

`todomcp.http_api.create_app(use_case)` returns the Flask application,
`todomcp.http_api.build_openapi()` the OpenAPI document as a dict, and
`todomcp.mcp_server.MCPHandler(use_case)` the MCP handler, whose
`serve(reader, writer)` runs over any pair of text streams.

## What it does not do

There is no Swagger UI page: only the OpenAPI document itself is served.
There is no authentication, and the HTTP server is the standard library's
simple WSGI server, meant for local use.