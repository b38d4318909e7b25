"""Writing of Renode ``.resc`` scripts from a validated definition."""

from __future__ import annotations

import os
from collections.abc import Iterator
from os import PathLike
from pathlib import Path
from typing import TextIO

from renoderun.config import AppConfig
from renoderun.types import PlatformDescriptionKind, RescDefinition


def write_generated_platforms(
    output_dir: str | PathLike[str], resc: RescDefinition
) -> list[Path]:
    """Write every imported platform description into ``output_dir``.

    Returns the paths of the files written.
    """
    out = Path(output_dir)
    written = []
    for platform in resc.platform_descriptions:
        if platform.kind is PlatformDescriptionKind.GENERATED_LOCAL_FILE:
            path = out / str(platform.file_name)
            path.write_text(platform.content, encoding="utf-8")
            written.append(path)
    return written


def _platform_line(kind: PlatformDescriptionKind, text: str) -> str:
    if kind is PlatformDescriptionKind.STRING:
        return f'machine LoadPlatformDescriptionFromString\n"""\n{text}\n"""'
    return f"machine LoadPlatformDescription {text}"


def _script_lines(
    output_dir: str | PathLike[str], app: AppConfig, resc: RescDefinition
) -> Iterator[str]:
    yield f":name: {resc.name}"
    yield f":description: {resc.description}"
    yield ""

    if not app.omit_out_dir_path:
        yield f"path add @{os.fspath(output_dir)}"
        yield ""

    if app.using_sysbus:
        yield "using sysbus"
        yield ""

    yield f'mach create "{resc.machine_name}"'
    yield ""

    yield from resc.init_commands
    if resc.init_commands:
        yield ""

    yield from resc.variables
    yield ""

    for platform in resc.platform_descriptions:
        yield _platform_line(platform.kind, platform.resc_fmt())
    yield ""

    yield from resc.pre_start_commands
    if resc.pre_start_commands:
        yield ""

    yield f'macro reset\n"""\n{resc.reset_resc_fmt()}\n"""'
    yield ""

    yield "runMacro $reset"
    yield ""

    if not app.omit_start:
        yield resc.start if resc.start is not None else "start"
        yield ""
        yield from resc.post_start_commands


def generate_resc(
    writer: TextIO,
    output_dir: str | PathLike[str],
    app: AppConfig,
    resc: RescDefinition,
) -> None:
    """Write imported platform files into ``output_dir`` and the script to ``writer``."""
    write_generated_platforms(output_dir, resc)
    for line in _script_lines(output_dir, app, resc):
        writer.write(line + "\n")