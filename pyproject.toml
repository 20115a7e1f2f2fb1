[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "todomcp"
version = "0.1.0"
description = "A todo list service backed by SQLite, exposed over a REST API and a Model Context Protocol server on stdio."
requires-python = ">=3.10"
dependencies = [
    "flask",
    "python-dotenv",
]
keywords = ["todo", "tasks", "mcp", "sqlite", "rest", "json-rpc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Scheduling",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
todomcp = "todomcp.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["todomcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
