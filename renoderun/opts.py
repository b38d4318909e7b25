"""Command line options."""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

_VERSION = "0.2.0"

ENV_RENODE_BIN = "RENODE_RUN_RENODE_BIN"
ENV_CONFIG_FILE = "RENODE_RUN_CONFIG_FILE"
ENV_OUTPUT_DIR = "RENODE_RUN_OUTPUT_DIR"


@dataclass(frozen=True)
class Opts:
    """Parsed command line options."""

    input: Path
    renode_bin: Path | None = None
    config: Path | None = None
    output_dir: Path | None = None
    no_run: bool = False


def _env_path(name: str) -> Path | None:
    value = os.environ.get(name)
    return Path(value) if value else None


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="renode-run", description="Run embedded programs in the renode emulator"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_VERSION}")
    parser.add_argument(
        "--renode",
        dest="renode_bin",
        type=Path,
        default=_env_path(ENV_RENODE_BIN),
        help="Path to renode binary. Useful if not on the user's $PATH.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=_env_path(ENV_CONFIG_FILE),
        help="Path to toml configuration file. "
        "Defaults to resolving the current cargo workspace's Cargo.toml.",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_dir",
        type=Path,
        default=_env_path(ENV_OUTPUT_DIR),
        help="Generate output artifacts in this directory instead of a temporary directory",
    )
    parser.add_argument(
        "--no-run",
        action="store_true",
        help="Generate, but don't run the Renode script",
    )
    parser.add_argument("input", type=Path, help="Input ELF executable")
    return parser


def parse_opts(argv: Sequence[str] | None = None) -> Opts:
    """Parse ``argv`` (or the process arguments), falling back to environment variables."""
    ns = _parser().parse_args(argv)
    return Opts(
        input=ns.input,
        renode_bin=ns.renode_bin,
        config=ns.config,
        output_dir=ns.output_dir,
        no_run=ns.no_run,
    )