"""Substitution of environment variables in ``${NAME}`` style expressions."""

from __future__ import annotations

import os
import re

# Matches '${NAME}', '${NAME-default}' and '${NAME:-default}'.
_ENVSUB_RE = re.compile(r"\$\{(?P<var>[a-zA-Z_][a-zA-Z0-9_]*)(:?-(?P<def>.*?))?\}")


class EnvSubError(Exception):
    """Raised when an environment variable cannot be substituted."""

    def __init__(self, var: str, message: str) -> None:
        super().__init__(message)
        self.var = var


class EnvVarNotPresentError(EnvSubError):
    """Raised when a variable is unset and the expression gives no default."""

    def __init__(self, var: str) -> None:
        super().__init__(
            var,
            f"The environment variable '{var}' is not set "
            "and no default value is specified",
        )


def _replace(match: re.Match[str]) -> str:
    name = match["var"]
    value = os.environ.get(name)
    if value is None:
        default = match["def"]
        if default is None:
            raise EnvVarNotPresentError(name)
        return default
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise EnvSubError(
            name, f"The environment variable '{name}' contains invalid unicode"
        ) from None
    return value


def envsub(text: str) -> str:
    """Return ``text`` with every ``${NAME}``, ``${NAME-def}`` and ``${NAME:-def}`` expanded."""
    return _ENVSUB_RE.sub(_replace, text)