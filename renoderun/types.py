"""Validated pieces of a Renode script definition."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from renoderun.config import AppConfig, RenodeScriptConfig
from renoderun.envsub import envsub

REPL_FILE_EXT = "repl"
RESC_PATH_PREFIX = "@"
IMPORT_PATH_PREFIX = "<"

DEFAULT_NAME = "renode-system"
DEFAULT_DESCRIPTION = "Renode script generated by renode-run"
DEFAULT_MACHINE_NAME = "default-machine"
DEFAULT_RESET = "sysbus LoadELF $bin"


class RescDefinitionError(Exception):
    """Base class for errors building a script definition."""


class MissingPlatformDescriptionError(RescDefinitionError):
    """Raised when no platform description is configured."""

    def __init__(self) -> None:
        super().__init__("At least one platform description is required")


class ExeNotFoundError(RescDefinitionError):
    """Raised when the application executable does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"The application executable file '{path}' could not be found")
        self.path = path


class PlatformDescriptionError(RescDefinitionError):
    """Raised when a platform description is empty or its file is unusable."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class RescFieldError(RescDefinitionError):
    """Raised when a script field ends up empty."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"The field '{field_name}' cannot contain an empty string")
        self.field = field_name


class PlatformDescriptionKind(enum.Enum):
    """Where a platform description comes from."""

    INTERNAL = "renode-platform"
    LOCAL_FILE = "local-platform"
    GENERATED_LOCAL_FILE = "local-imported-platform"
    STRING = "platform"

    def __str__(self) -> str:
        return self.value


def _leading_ws(line: str) -> int | None:
    stripped = line.lstrip(" \t")
    if not stripped:
        return None
    return len(line) - len(stripped)


def _unindent(text: str) -> str:
    """Remove the indentation common to every non-blank line after the first."""
    lines = text.split("\n")
    ignore_first = text.startswith("\n") or text.startswith("\r\n")
    counts = [n for n in map(_leading_ws, lines[1:]) if n is not None]
    spaces = min(counts, default=0)
    out = [lines[0]] + [line[spaces:] if len(line) > spaces else "" for line in lines[1:]]
    if ignore_first:
        out = out[1:]
    return "\n".join(out)


def _indent(text: str, spaces: int, *, first: bool) -> str:
    prefix = " " * spaces
    lines = text.split("\n")
    return "\n".join(
        prefix + line if (first or i > 0) and line.strip() else line
        for i, line in enumerate(lines)
    )


@dataclass(frozen=True)
class PlatformDescription:
    """A platform description and how it is loaded by the script."""

    content: str
    kind: PlatformDescriptionKind
    file_name: str | None = None

    def resc_fmt(self) -> str:
        """Return the text the script uses to load this description."""
        match self.kind:
            case PlatformDescriptionKind.LOCAL_FILE:
                return f"@{self.content}"
            case PlatformDescriptionKind.GENERATED_LOCAL_FILE:
                return f"@{self.file_name}"
            case _:
                return self.content


def _line_count(text: str) -> int:
    return text.count("\n") + 1 if text else 0


def parse_platform_description(text: str) -> PlatformDescription:
    """Classify and validate one configured platform description."""
    desc = _unindent(text.strip())
    num_lines = _line_count(desc)
    ends_with_repl = desc.endswith(REPL_FILE_EXT)
    begins_with_import = desc.startswith(IMPORT_PATH_PREFIX)

    if not desc:
        raise PlatformDescriptionError("The platform description is empty")

    if desc.startswith(RESC_PATH_PREFIX) and ends_with_repl:
        return PlatformDescription(desc, PlatformDescriptionKind.INTERNAL)

    if num_lines == 1 and ends_with_repl and not begins_with_import:
        local_path = envsub(desc)
        if not os.path.exists(local_path):
            raise PlatformDescriptionError(
                f"The local platform description file '{local_path}' could not be found",
                local_path,
            )
        return PlatformDescription(local_path, PlatformDescriptionKind.LOCAL_FILE)

    if num_lines == 1 and ends_with_repl and begins_with_import:
        local_path = envsub(desc.lstrip(IMPORT_PATH_PREFIX).strip())
        path = Path(local_path)
        if not path.exists():
            raise PlatformDescriptionError(
                f"The local platform description file '{local_path}' could not be found",
                local_path,
            )
        file_name = path.name
        if file_name in ("", ".", ".."):
            raise PlatformDescriptionError(
                f"Could not determine a file name for local file '{local_path}'",
                local_path,
            )
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PlatformDescriptionError(
                f"Encountered an IO error while reading the local file '{local_path}'. {exc}",
                local_path,
            ) from exc
        return PlatformDescription(
            envsub(raw), PlatformDescriptionKind.GENERATED_LOCAL_FILE, file_name
        )

    raw_content = envsub(desc)
    content = raw_content if raw_content.startswith("using") else _indent(
        raw_content, 4, first=False
    )
    return PlatformDescription(content, PlatformDescriptionKind.STRING)


def substitute_field(value: str, field: str, dedent: bool) -> str:
    """Expand environment variables in a field value, rejecting an empty result.

    With ``dedent`` the value is trimmed and its common indentation removed first.
    """
    if dedent:
        value = _unindent(value.strip())
    result = envsub(value)
    if not result:
        raise RescFieldError(field)
    return result


@dataclass
class RescDefinition:
    """Everything needed to write a Renode script."""

    platform_descriptions: list[PlatformDescription]
    variables: list[str]
    name: str = DEFAULT_NAME
    description: str = DEFAULT_DESCRIPTION
    machine_name: str = DEFAULT_MACHINE_NAME
    init_commands: list[str] = field(default_factory=list)
    reset: str = DEFAULT_RESET
    start: str | None = None
    pre_start_commands: list[str] = field(default_factory=list)
    post_start_commands: list[str] = field(default_factory=list)

    def reset_resc_fmt(self) -> str:
        """Return the reset macro body indented for the script."""
        return _indent(self.reset, 4, first=True)


def build_resc_definition(
    resc: RenodeScriptConfig, app: AppConfig, bin_path: str | PathLike[str]
) -> RescDefinition:
    """Validate the script configuration against the executable at ``bin_path``."""
    if not os.path.exists(bin_path):
        raise ExeNotFoundError(str(bin_path))

    sources = ([resc.platform_description] if resc.platform_description is not None else [])
    platforms = [parse_platform_description(p) for p in sources + resc.platform_descriptions]
    if not platforms:
        raise MissingPlatformDescriptionError()

    variables = [substitute_field(f"$bin = @{os.fspath(bin_path)}", "variables", True)]
    variables += [substitute_field(v, "variables", True) for v in resc.variables]
    init_commands = [substitute_field(c, "init-commands", True) for c in resc.init_commands]
    pre_start = [substitute_field(c, "pre-start-commands", True) for c in resc.pre_start_commands]
    post_start = [
        substitute_field(c, "post-start-commands", True) for c in resc.post_start_commands
    ]

    def optional(value: str | None, name: str, default: str, dedent: bool) -> str:
        return default if value is None else substitute_field(value, name, dedent)

    return RescDefinition(
        platform_descriptions=platforms,
        variables=variables,
        name=optional(resc.name, "name", DEFAULT_NAME, False),
        description=optional(resc.description, "description", DEFAULT_DESCRIPTION, False),
        machine_name=optional(resc.machine_name, "machine-name", DEFAULT_MACHINE_NAME, False),
        init_commands=init_commands,
        reset=optional(resc.reset, "reset-macro", DEFAULT_RESET, True),
        start=resc.start,
        pre_start_commands=pre_start,
        post_start_commands=post_start,
    )