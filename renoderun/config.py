"""Configuration read from the ``package.metadata.renode`` table of a manifest."""

from __future__ import annotations

import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from os import PathLike
from typing import Any


class ConfigError(ValueError):
    """Raised when the configuration table is malformed."""


def _string(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"invalid type for '{key}': expected a string")
    return value


def _boolean(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"invalid type for '{key}': expected a boolean")
    return value


def _port(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"invalid type for '{key}': expected an integer")
    if not 0 <= value <= 0xFFFF:
        raise ConfigError(f"invalid value for '{key}': {value} is not a valid port")
    return value


def _strings(key: str, value: Any) -> list[str]:
    if not isinstance(value, list):
        raise ConfigError(f"invalid type for '{key}': expected a list of strings")
    return [_string(key, item) for item in value]


def _pairs(key: str, value: Any) -> list[tuple[str, str]]:
    if not isinstance(value, list):
        raise ConfigError(f"invalid type for '{key}': expected a list of pairs")
    pairs = []
    for item in value:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise ConfigError(f"invalid value for '{key}': expected [name, value] pairs")
        pairs.append((_string(key, item[0]), _string(key, item[1])))
    return pairs


_Converter = Callable[[str, Any], Any]


def _optional(convert: _Converter) -> Any:
    return field(default=None, metadata={"convert": convert})


def _flag() -> Any:
    return field(default=False, metadata={"convert": _boolean})


def _many(convert: _Converter) -> Any:
    return field(default_factory=list, metadata={"convert": convert})


@dataclass
class RenodeScriptConfig:
    """Settings that shape the generated Renode script."""

    name: str | None = _optional(_string)
    description: str | None = _optional(_string)
    machine_name: str | None = _optional(_string)
    init_commands: list[str] = _many(_strings)
    variables: list[str] = _many(_strings)
    platform_description: str | None = _optional(_string)
    platform_descriptions: list[str] = _many(_strings)
    reset: str | None = _optional(_string)
    start: str | None = _optional(_string)
    pre_start_commands: list[str] = _many(_strings)
    post_start_commands: list[str] = _many(_strings)


@dataclass
class RenodeCliConfig:
    """Command line switches passed to the Renode process."""

    plain: bool = _flag()
    port: int | None = _optional(_port)
    disable_xwt: bool = _flag()
    hide_monitor: bool = _flag()
    hide_log: bool = _flag()
    hide_analyzers: bool = _flag()
    console: bool = _flag()
    keep_temporary_files: bool = _flag()

    def to_args(self) -> list[str]:
        """Return the Renode command line arguments for these settings."""
        args = []
        if self.plain:
            args.append("--plain")
        if self.port is not None:
            args.extend(["--port", str(self.port)])
        if self.disable_xwt:
            args.append("--disable-xwt")
        if self.hide_monitor:
            args.append("--hide-monitor")
        if self.hide_log:
            args.append("--hide-log")
        if self.hide_analyzers:
            args.append("--hide-analyzers")
        if self.console:
            args.append("--console")
        if self.keep_temporary_files:
            args.append("--keep-temporary-files")
        return args


@dataclass
class AppConfig:
    """Settings for the runner itself."""

    use_relative_paths: bool = _flag()
    resc_file_name: str | None = _optional(_string)
    disable_envsub: bool = _flag()
    using_sysbus: bool = _flag()
    omit_start: bool = _flag()
    environment_variables: list[tuple[str, str]] = _many(_pairs)
    renode: str | None = _optional(_string)
    omit_out_dir_path: bool = _flag()


@dataclass
class RenodeRunConfig:
    """The complete configuration, a flat table split into three sections."""

    resc: RenodeScriptConfig = field(default_factory=RenodeScriptConfig)
    cli: RenodeCliConfig = field(default_factory=RenodeCliConfig)
    app: AppConfig = field(default_factory=AppConfig)


_SECTIONS = (RenodeScriptConfig, RenodeCliConfig, AppConfig)


def _keys(cls: type) -> dict[str, Any]:
    return {f.name.replace("_", "-"): f for f in fields(cls)}


def _build(cls: type, data: Mapping[str, Any]) -> Any:
    values = {
        f.name: f.metadata["convert"](key, data[key])
        for key, f in _keys(cls).items()
        if key in data
    }
    return cls(**values)


def parse_config(data: Mapping[str, Any]) -> RenodeRunConfig:
    """Build a configuration from a kebab-case table, rejecting unknown keys."""
    if not isinstance(data, Mapping):
        raise ConfigError("the renode configuration must be a table")
    known = set().union(*(_keys(cls) for cls in _SECTIONS))
    for key in data:
        if key not in known:
            raise ConfigError(f"unknown field '{key}'")
    return RenodeRunConfig(
        resc=_build(RenodeScriptConfig, data),
        cli=_build(RenodeCliConfig, data),
        app=_build(AppConfig, data),
    )


def load_manifest_config(path: str | PathLike[str]) -> RenodeRunConfig:
    """Read ``package.metadata.renode`` from a TOML manifest, defaulting when absent."""
    with open(path, "rb") as fh:
        try:
            manifest = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid manifest '{path}': {exc}") from exc
    package = manifest.get("package")
    if not isinstance(package, dict):
        return RenodeRunConfig()
    metadata = package.get("metadata")
    if not isinstance(metadata, dict):
        return RenodeRunConfig()
    renode = metadata.get("renode")
    if renode is None:
        return RenodeRunConfig()
    return parse_config(renode)