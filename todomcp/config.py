"""Runtime configuration loaded from the environment, a .env file or the command line."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DATABASE_URL_VAR = "DATABASE_URL"


class ConfigError(RuntimeError):
    """Raised when a required configuration value cannot be found."""


@dataclass(frozen=True)
class Config:
    """Settings the application needs to start."""

    database_url: str


def load(argv: Sequence[str] | None = None) -> Config:
    """Load the configuration.

    ``DATABASE_URL`` is read from the environment (after loading a ``.env``
    file found from the working directory upwards). When it is not set, the
    first command-line argument is used instead. ``argv`` excludes the
    program name and defaults to ``sys.argv[1:]``.
    """
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)

    database_url = os.environ.get(DATABASE_URL_VAR)
    if database_url is None:
        args = list(sys.argv[1:] if argv is None else argv)
        if not args:
            raise ConfigError(
                "DATABASE_URL not found in environment variables or command line arguments"
            )
        database_url = args[0]
    return Config(database_url=database_url)