import pytest

from conftest import make_script, posix_only
from winbundle import tools
from winbundle.errors import ToolFailedError, ToolUnavailableError
from winbundle.tools import ExecutableLocator, ToolInvoker, build_arguments, resolve_tool


def test_build_arguments_substitutes_each_token():
    args = build_arguments("/N <%exe_file%> <%ini_file%>",
                           {"exe_file": "C:\\a.exe", "ini_file": "C:\\a.ini"})
    assert args == ["/N", "C:\\a.exe", "C:\\a.ini"]


def test_build_arguments_keeps_spaced_values_whole():
    args = build_arguments("/I <%exe_file%> <%ico_file%>",
                           {"exe_file": "C:\\Program Files\\Foo.exe", "ico_file": "icon.ico"})
    assert args == ["/I", "C:\\Program Files\\Foo.exe", "icon.ico"]


def test_build_arguments_substitutes_inside_a_token():
    assert build_arguments("-Dgoal=<%goal%>", {"goal": "package"}) == ["-Dgoal=package"]


def test_build_arguments_unbound_placeholder():
    with pytest.raises(KeyError):
        build_arguments("/N <%exe_file%> <%ini_file%>", {"exe_file": "a.exe"})


def test_locator_prefers_registered(tmp_path):
    tool = tmp_path / "bin" / "tool.exe"
    tool.parent.mkdir()
    tool.write_bytes(b"x")
    tool.chmod(0o755)
    other = tmp_path / "other.exe"

    locator = ExecutableLocator([tool.parent])
    assert locator.find("tool") == tool
    locator.register("tool", other)
    assert locator.find("tool") == other


def test_locator_search_path_order(tmp_path):
    first, second = tmp_path / "first", tmp_path / "second"
    for d in (first, second):
        d.mkdir()
        (d / "ffmpeg.exe").write_bytes(b"x")
        (d / "ffmpeg.exe").chmod(0o755)
    locator = ExecutableLocator([first])
    locator.add_path(second)
    assert locator.find("ffmpeg") == first / "ffmpeg.exe"


def test_locator_not_found(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(ToolUnavailableError):
        ExecutableLocator([tmp_path]).find("definitely-not-a-tool")


def test_resolve_tool_extracts_bundled_fallback(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    bundled = tmp_path / "resources" / "RCEDIT64.exe"
    bundled.parent.mkdir()
    bundled.write_bytes(b"MZ bundled")
    monkeypatch.setattr(tools, "bundled_resource",
                        lambda name: bundled if name == "RCEDIT64.exe" else None)

    locator = ExecutableLocator()
    extracted = resolve_tool(locator, "RCEDIT64")
    assert extracted != bundled
    assert extracted.read_bytes() == b"MZ bundled"
    assert locator.find("RCEDIT64") == extracted
    extracted.unlink()


def test_resolve_tool_without_fallback(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(ToolUnavailableError):
        resolve_tool(ExecutableLocator(), "NoSuchTool64")


def test_launcher_license_is_bundled():
    assert tools.bundled_resource("WinRun4J-About.txt") is not None
    assert tools.bundled_resource("missing.txt") is None


@posix_only
def test_invoker_returns_output(tmp_path):
    make_script(tmp_path / "echo-args", """
        import sys
        print("|".join(sys.argv[1:]))
    """)
    locator = ExecutableLocator([tmp_path])
    out = ToolInvoker(locator).invoke("echo-args", "/N <%a%> <%b%>", {"a": "x y", "b": "z"})
    assert out.strip() == "/N|x y|z"


@posix_only
def test_invoker_merges_stderr_and_raises_on_failure(tmp_path):
    make_script(tmp_path / "failing", """
        import sys
        print("to stdout")
        sys.stdout.flush()
        print("to stderr", file=sys.stderr)
        sys.exit(3)
    """)
    locator = ExecutableLocator([tmp_path])
    with pytest.raises(ToolFailedError) as info:
        ToolInvoker(locator).invoke("failing", "--go")
    assert info.value.returncode == 3
    assert "to stdout" in info.value.output
    assert "to stderr" in info.value.output
    assert info.value.command.endswith("failing --go")


@posix_only
def test_invoker_runs_in_cwd(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    make_script(tmp_path / "pwd-tool", """
        import os
        print(os.getcwd())
    """)
    locator = ExecutableLocator([tmp_path])
    out = ToolInvoker(locator).invoke("pwd-tool", "", cwd=work)
    assert out.strip() == str(work.resolve())
