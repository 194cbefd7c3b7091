"""Runs the Maven goals whose outputs feed the packager."""

from pathlib import Path
from typing import List

from .errors import MissingInputError
from .models import BuildArtifacts
from .tools import ToolInvoker

MVN_EXEC = "mvn"
MVN_GOAL = "-Dmaven.test.skip=true <%goal%>"


def _assert_exists(path: Path) -> Path:
    if not path.exists():
        raise MissingInputError(f"Expected file not exists: {path}")
    return path


class MavenBuild:

    def __init__(self, app_root: Path, invoker: ToolInvoker, artifact_id: str, version: str):
        self.app_root = Path(app_root)
        self.invoker = invoker
        self.artifact_id = artifact_id
        self.version = version
        self.target_dir = self.app_root / "target"

    def run(self, goal: str) -> str:
        return self.invoker.invoke(MVN_EXEC, MVN_GOAL, {"goal": goal}, cwd=self.app_root)

    def package(self) -> Path:
        self.run("package")
        return _assert_exists(self.target_dir / f"{self.artifact_id}-{self.version}.jar")

    def copy_dependencies(self) -> List[Path]:
        self.run("dependency:copy-dependencies")
        dep_dir = self.target_dir / "dependency"
        if not dep_dir.is_dir():
            return []
        return sorted(
            f for f in dep_dir.rglob("*.jar")
            if f.is_file() and not f.name.startswith(".")
        )

    def third_party_licenses(self) -> Path:
        self.run("license:add-third-party")
        return _assert_exists(self.target_dir / "generated-sources" / "license" / "THIRD-PARTY.txt")

    def build(self) -> BuildArtifacts:
        jar = self.package()
        dependencies = tuple(self.copy_dependencies())
        licenses = self.third_party_licenses()
        return BuildArtifacts(jar=jar, dependencies=dependencies, third_party_licenses=licenses)
