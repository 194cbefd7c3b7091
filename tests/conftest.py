import json
import os
import shutil
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from winbundle.models import AppMetadata, BuildArtifacts
from winbundle.tools import ExecutableLocator

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake tools are shebang scripts")


def make_script(path: Path, body: str) -> Path:
    """Write an executable Python script at path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(0o755)
    return path


def read_calls(calls_file: Path) -> list:
    if not calls_file.exists():
        return []
    return [json.loads(line) for line in calls_file.read_text().splitlines() if line]


class FakeTools:
    """A locator with WinRun4J64 and RCEDIT64 stand-ins registered.

    The rcedit stand-in records each argv to calls.jsonl and keeps a copy of
    the INI it was given in captured.ini.
    """

    def __init__(self, root: Path, rcedit_exit: int = 0):
        self.root = root
        root.mkdir(parents=True, exist_ok=True)
        self.calls_file = root / "calls.jsonl"
        self.ini_file = root / "captured.ini"
        self.base_exec = root / "WinRun4J64.exe"
        self.base_exec.write_bytes(b"MZ fake launcher")
        self.base_exec.chmod(0o755)
        self.rcedit = make_script(root / "RCEDIT64", f"""
            import json, shutil, sys
            args = sys.argv[1:]
            with open({str(self.calls_file)!r}, "a") as f:
                f.write(json.dumps(args) + "\\n")
            if args and args[0] == "/N":
                shutil.copyfile(args[2], {str(self.ini_file)!r})
            print("rcedit " + " ".join(args))
            sys.exit({rcedit_exit})
        """)
        self.locator = ExecutableLocator()
        self.locator.register("WinRun4J64", self.base_exec)
        self.locator.register("RCEDIT64", self.rcedit)

    @property
    def calls(self) -> list:
        return read_calls(self.calls_file)

    def ini_lines(self) -> list:
        return self.ini_file.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def fake_tools(tmp_path):
    return FakeTools(tmp_path / "tools")


@pytest.fixture
def metadata():
    return AppMetadata(
        name="Foo",
        version="1.2.3",
        revision="abc123",
        main_class="com.x.Main",
        min_runtime_version="11",
    )


@pytest.fixture
def artifacts(tmp_path):
    target = tmp_path / "project" / "target"
    (target / "dependency").mkdir(parents=True)
    jar = target / "foo-1.2.3.jar"
    jar.write_bytes(b"main jar")
    deps = []
    for name in ("a.jar", "b.jar"):
        dep = target / "dependency" / name
        dep.write_bytes(name.encode())
        deps.append(dep)
    license_file = target / "THIRD-PARTY.txt"
    license_file.write_text("List of third-party dependencies\n")
    return BuildArtifacts(jar=jar, dependencies=tuple(deps), third_party_licenses=license_file)


def fake_mvn(tools_dir: Path, artifact: str = "foo-1.2.3", produce_jar: bool = True) -> Path:
    """An mvn stand-in that writes each goal's output under ./target.

    Returns the file its argv (prefixed with the working directory) is
    recorded to.
    """
    calls = tools_dir / "mvn-calls.jsonl"
    make_script(tools_dir / "mvn", f"""
        import json, os, sys
        args = sys.argv[1:]
        with open({str(calls)!r}, "a") as f:
            f.write(json.dumps([os.getcwd()] + args) + "\\n")
        goal = args[-1]
        os.makedirs("target", exist_ok=True)
        if goal == "package" and {produce_jar!r}:
            open("target/{artifact}.jar", "w").write("jar")
        elif goal == "dependency:copy-dependencies":
            os.makedirs("target/dependency", exist_ok=True)
            for name in ("z.jar", "a.jar", ".hidden.jar", "notes.txt"):
                open(os.path.join("target/dependency", name), "w").write(name)
        elif goal == "license:add-third-party":
            os.makedirs("target/generated-sources/license", exist_ok=True)
            open("target/generated-sources/license/THIRD-PARTY.txt", "w").write("3rd")
        print("[INFO] BUILD SUCCESS")
    """)
    return calls


GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
}

needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(cwd: Path, *args: str):
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True,
                   env={**os.environ, **GIT_ENV})


def init_repo(root: Path) -> Path:
    git(root, "init", "-q")
    git(root, "add", ".")
    git(root, "commit", "-q", "-m", "initial")
    return root
