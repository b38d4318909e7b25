import io

import pytest

from renoderun.config import AppConfig
from renoderun.resc_gen import generate_resc, write_generated_platforms
from renoderun.types import (
    PlatformDescription,
    PlatformDescriptionKind,
    RescDefinition,
)

INTERNAL = PlatformDescription(
    "@platforms/boards/board.repl", PlatformDescriptionKind.INTERNAL
)


def _definition(**kwargs):
    kwargs.setdefault("platform_descriptions", [INTERNAL])
    kwargs.setdefault("variables", ["$bin = @/tmp/app"])
    return RescDefinition(**kwargs)


def _render(tmp_path, resc, app=None):
    buf = io.StringIO()
    generate_resc(buf, tmp_path, app or AppConfig(), resc)
    return buf.getvalue()


def test_default_script(tmp_path):
    text = _render(tmp_path, _definition())
    expected = (
        ":name: renode-system\n"
        ":description: Renode script generated by renode-run\n"
        "\n"
        f"path add @{tmp_path}\n"
        "\n"
        'mach create "default-machine"\n'
        "\n"
        "$bin = @/tmp/app\n"
        "\n"
        "machine LoadPlatformDescription @platforms/boards/board.repl\n"
        "\n"
        'macro reset\n"""\n    sysbus LoadELF $bin\n"""\n'
        "\n"
        "runMacro $reset\n"
        "\n"
        "start\n"
        "\n"
    )
    assert text == expected


def test_omit_out_dir_path(tmp_path):
    text = _render(tmp_path, _definition(), AppConfig(omit_out_dir_path=True))
    assert "path add" not in text
    assert text.startswith(":name: renode-system\n")


def test_using_sysbus_precedes_machine(tmp_path):
    text = _render(tmp_path, _definition(), AppConfig(using_sysbus=True))
    assert "using sysbus\n\n" in text
    assert text.index("using sysbus") < text.index("mach create")


def test_omit_start_drops_start_and_post_commands(tmp_path):
    resc = _definition(post_start_commands=["showAnalyzer sysbus.uart"])
    text = _render(tmp_path, resc, AppConfig(omit_start=True))
    assert text.endswith("runMacro $reset\n\n")
    assert "showAnalyzer" not in text


def test_custom_start_and_post_commands(tmp_path):
    resc = _definition(start="emulation RunFor", post_start_commands=["a", "b"])
    text = _render(tmp_path, resc)
    assert text.endswith("runMacro $reset\n\nemulation RunFor\n\na\nb\n")


def test_init_commands_followed_by_blank_line(tmp_path):
    resc = _definition(init_commands=["logLevel 3"], machine_name="m")
    text = _render(tmp_path, resc)
    assert 'mach create "m"\n\nlogLevel 3\n\n$bin = @/tmp/app\n' in text


def test_no_init_commands_no_extra_blank(tmp_path):
    text = _render(tmp_path, _definition(machine_name="m"))
    assert 'mach create "m"\n\n$bin = @/tmp/app\n' in text


def test_pre_start_commands_before_reset(tmp_path):
    resc = _definition(pre_start_commands=["cmd"])
    text = _render(tmp_path, resc)
    assert "cmd\n\nmacro reset" in text


def test_string_platform(tmp_path):
    content = "using sysbus\ncpu: CPU"
    platform = PlatformDescription(content, PlatformDescriptionKind.STRING)
    text = _render(tmp_path, _definition(platform_descriptions=[platform]))
    assert f'machine LoadPlatformDescriptionFromString\n"""\n{content}\n"""\n' in text


def test_local_file_platform(tmp_path):
    platform = PlatformDescription("dir/board.repl", PlatformDescriptionKind.LOCAL_FILE)
    text = _render(tmp_path, _definition(platform_descriptions=[platform]))
    assert "machine LoadPlatformDescription @dir/board.repl\n" in text


def test_generated_platform_written(tmp_path):
    platform = PlatformDescription(
        "cpu: CPU", PlatformDescriptionKind.GENERATED_LOCAL_FILE, "board.repl"
    )
    text = _render(tmp_path, _definition(platform_descriptions=[platform]))
    assert (tmp_path / "board.repl").read_text() == "cpu: CPU"
    assert "machine LoadPlatformDescription @board.repl\n" in text


def test_write_generated_platforms_skips_others(tmp_path):
    generated = PlatformDescription(
        "x: y", PlatformDescriptionKind.GENERATED_LOCAL_FILE, "gen.repl"
    )
    resc = _definition(platform_descriptions=[INTERNAL, generated])
    written = write_generated_platforms(tmp_path, resc)
    assert written == [tmp_path / "gen.repl"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["gen.repl"]


def test_write_generated_platforms_missing_dir(tmp_path):
    generated = PlatformDescription(
        "x: y", PlatformDescriptionKind.GENERATED_LOCAL_FILE, "gen.repl"
    )
    resc = _definition(platform_descriptions=[generated])
    with pytest.raises(FileNotFoundError):
        write_generated_platforms(tmp_path / "missing", resc)