"""Todo list service on SQLite with a REST API and an MCP server over stdio."""

__version__ = "0.1.0"