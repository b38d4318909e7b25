from pathlib import Path
from unittest import mock

import pytest

from renoderun.cli import main, renode_command, resolve_renode_bin
from renoderun.config import AppConfig, RenodeCliConfig
from renoderun.envsub import EnvVarNotPresentError
from renoderun.opts import Opts

PLATFORM = "@platforms/boards/board.repl"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("RENODE_RUN_RENODE_BIN", "RENODE_RUN_CONFIG_FILE", "RENODE_RUN_OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def elf(tmp_path):
    path = tmp_path / "app.elf"
    path.write_bytes(b"\x7fELF")
    return path


def _manifest(tmp_path, extra=""):
    path = tmp_path / "Cargo.toml"
    path.write_text(
        '[package]\nname = "app"\nversion = "0.1.0"\n\n'
        "[package.metadata.renode]\n"
        f'platform-description = "{PLATFORM}"\n' + extra
    )
    return path


def test_resolve_prefers_command_line():
    opts = Opts(input=Path("a.elf"), renode_bin=Path("/cli/renode"))
    assert resolve_renode_bin(opts, AppConfig(renode="/cfg/renode")) == Path("/cli/renode")


def test_resolve_uses_config_with_envsub(monkeypatch):
    monkeypatch.setenv("RR_RENODE_HOME", "/opt/r")
    opts = Opts(input=Path("a.elf"))
    app = AppConfig(renode="${RR_RENODE_HOME}/renode")
    assert resolve_renode_bin(opts, app) == Path("/opt/r/renode")


def test_resolve_default():
    assert resolve_renode_bin(Opts(input=Path("a.elf")), AppConfig()) == Path("renode")


def test_resolve_config_envsub_error(monkeypatch):
    monkeypatch.delenv("RR_UNSET_BIN", raising=False)
    with pytest.raises(EnvVarNotPresentError):
        resolve_renode_bin(Opts(input=Path("a.elf")), AppConfig(renode="${RR_UNSET_BIN}"))


def test_renode_command():
    cli = RenodeCliConfig(plain=True, port=1234, console=True)
    cmd = renode_command(Path("renode"), Path("out/emulate.resc"), cli)
    assert cmd == ["renode", str(Path("out/emulate.resc")), "--plain", "--port", "1234", "--console"]


def test_main_no_run_writes_script(tmp_path, elf):
    manifest = _manifest(tmp_path)
    out = tmp_path / "out"
    assert main(["-c", str(manifest), "-o", str(out), "--no-run", str(elf)]) == 0
    text = (out / "emulate.resc").read_text()
    assert f"$bin = @{elf}\n" in text
    assert f"machine LoadPlatformDescription {PLATFORM}\n" in text
    assert f"path add @{out}\n" in text


def test_main_sets_environment_variables(tmp_path, elf, monkeypatch):
    monkeypatch.setenv("RR_SYSTEM_NAME", "old")
    manifest = _manifest(
        tmp_path,
        'name = "${RR_SYSTEM_NAME}"\nenvironment-variables = [["RR_SYSTEM_NAME", "board"]]\n',
    )
    out = tmp_path / "out"
    assert main(["-c", str(manifest), "-o", str(out), "--no-run", str(elf)]) == 0
    assert (out / "emulate.resc").read_text().startswith(":name: board\n")


def test_main_resc_file_name(tmp_path, elf):
    script = tmp_path / "custom.resc"
    manifest = _manifest(tmp_path, f'resc-file-name = "{script.as_posix()}"\n')
    out = tmp_path / "out"
    assert main(["-c", str(manifest), "-o", str(out), "--no-run", str(elf)]) == 0
    assert script.read_text().startswith(":name: renode-system\n")
    assert not (out / "emulate.resc").exists()


def test_main_missing_executable(tmp_path, capsys):
    manifest = _manifest(tmp_path)
    missing = tmp_path / "nope.elf"
    assert main(["-c", str(manifest), "-o", str(tmp_path / "o"), "--no-run", str(missing)]) == 1
    assert f"The application executable file '{missing}' could not be found" in capsys.readouterr().err


def test_main_runs_renode(tmp_path, elf):
    manifest = _manifest(tmp_path, "plain = true\n")
    out = tmp_path / "out"
    with mock.patch("renoderun.cli.subprocess.run") as run:
        code = main(["-c", str(manifest), "-o", str(out), "--renode", "/x/renode", str(elf)])
    assert code == 0
    command = run.call_args.args[0]
    assert command == [str(Path("/x/renode")), str(out / "emulate.resc"), "--plain"]


def test_main_renode_not_startable(tmp_path, elf, capsys):
    manifest = _manifest(tmp_path)
    with mock.patch("renoderun.cli.subprocess.run", side_effect=FileNotFoundError("gone")):
        code = main(["-c", str(manifest), "-o", str(tmp_path / "out"), str(elf)])
    assert code == 1
    assert "Failed to start renode process" in capsys.readouterr().err