"""The ``renode-run`` command: generate a Renode script and run it."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from renoderun.config import AppConfig, ConfigError, RenodeCliConfig, load_manifest_config
from renoderun.envsub import EnvSubError, envsub
from renoderun.opts import Opts, parse_opts
from renoderun.resc_gen import generate_resc
from renoderun.types import RescDefinitionError, build_resc_definition

log = logging.getLogger(__name__)

DEFAULT_RENODE_BIN = "renode"
DEFAULT_MANIFEST = "Cargo.toml"
SCRIPT_FILE_NAME = "emulate.resc"


class _RunError(Exception):
    pass


def resolve_renode_bin(opts: Opts, app: AppConfig) -> Path:
    """Pick the Renode binary: command line first, then configuration, then ``renode``."""
    configured = envsub(app.renode) if app.renode is not None else None
    if opts.renode_bin is not None:
        return opts.renode_bin
    if configured is not None:
        return Path(configured)
    return Path(DEFAULT_RENODE_BIN)


def renode_command(
    renode_bin: str | PathLike[str],
    script_path: str | PathLike[str],
    cli: RenodeCliConfig,
) -> list[str]:
    """Return the argument vector that runs ``script_path`` in Renode."""
    return [os.fspath(renode_bin), os.fspath(script_path), *cli.to_args()]


def _check_cargo_workspace() -> None:
    try:
        subprocess.run(
            ["cargo", "metadata", "--format-version", "1"],
            stdout=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise _RunError(f"could not resolve the cargo workspace: {exc}") from exc


def _run(opts: Opts) -> None:
    if opts.config is not None:
        log.debug("Using config '%s'", opts.config)
        input_file = opts.config
    else:
        log.debug("Looking up default config from cargo metadata")
        _check_cargo_workspace()
        input_file = Path(DEFAULT_MANIFEST)

    config = load_manifest_config(input_file)
    app = config.app
    for name, value in app.environment_variables:
        os.environ[name] = value

    with tempfile.TemporaryDirectory() as tmpdir:
        output_dir = opts.output_dir or Path(tmpdir) / "renode-run"
        log.debug("Using output dir '%s'", output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        resc = build_resc_definition(config.resc, app, opts.input)

        script_path = (
            Path(app.resc_file_name)
            if app.resc_file_name is not None
            else output_dir / SCRIPT_FILE_NAME
        )
        log.debug("Using output script '%s'", script_path)
        with open(script_path, "w", encoding="utf-8") as fh:
            generate_resc(fh, output_dir, app, resc)
            fh.flush()
            os.fsync(fh.fileno())

        if opts.no_run:
            return

        renode_bin = resolve_renode_bin(opts, app)
        log.debug("Using renode bin '%s'", renode_bin)
        command = renode_command(renode_bin, script_path, config.cli)
        env = {**os.environ, **dict(app.environment_variables)}
        try:
            subprocess.run(command, env=env)
        except OSError as exc:
            raise _RunError(f"Failed to start renode process: {exc}") from exc


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``renode-run`` command."""
    opts = parse_opts(argv)
    logging.basicConfig(level=logging.WARNING)
    try:
        _run(opts)
    except (
        _RunError,
        ConfigError,
        EnvSubError,
        RescDefinitionError,
        OSError,
    ) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())