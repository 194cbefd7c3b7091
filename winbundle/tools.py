"""
External tools: locating executables and running them with templated
command lines.

Templates are plain argument strings with <%name%> placeholders, e.g.
"/N <%exe_file%> <%ini_file%>". Tokens are split first and substituted after,
so a bound value containing spaces or backslashes stays one argument.
"""

import logging
import os
import re
import shlex
import shutil
import subprocess
import tempfile
from importlib import resources
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .errors import ToolFailedError, ToolUnavailableError
from .runtime import WINDOWS_EXEC_EXTENSIONS

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"<%(\w+)%>")
RESOURCE_PACKAGE = "winbundle"


# ─── Lookup ──────────────────────────────────────────────────────────────────

class ExecutableLocator:
    """Find executables by base name: registered first, then search paths, then PATH."""

    def __init__(self, search_paths=()):
        self.search_paths: List[Path] = [Path(p) for p in search_paths]
        self.registered: Dict[str, Path] = {}

    def add_path(self, directory: Path):
        self.search_paths.append(Path(directory))

    def register(self, name: str, path: Path):
        self.registered[name] = Path(path)

    def _candidates(self, directory: Path, name: str):
        yield directory / name
        for ext in WINDOWS_EXEC_EXTENSIONS:
            yield directory / f"{name}.{ext}"

    def find(self, name: str) -> Path:
        if name in self.registered:
            return self.registered[name]

        path_dirs = [Path(p) for p in os.environ.get("PATH", "").split(os.pathsep) if p]
        for directory in self.search_paths + path_dirs:
            for candidate in self._candidates(directory, name):
                if candidate.is_file() and os.access(candidate, os.X_OK):
                    return candidate
        raise ToolUnavailableError(f"Can't find executable \"{name}\"")


def bundled_resource(file_name: str):
    """Traversable for a file shipped in winbundle/resources, or None."""
    item = resources.files(RESOURCE_PACKAGE) / "resources" / file_name
    return item if item.is_file() else None


def resolve_tool(locator: ExecutableLocator, name: str, log: logging.Logger = None) -> Path:
    """Locate name, falling back to a bundled <name>.exe.

    A bundled copy is written to a temp file and registered with the locator
    so later lookups in the same run reuse it.
    """
    log = log or logger
    try:
        return locator.find(name)
    except ToolUnavailableError:
        bundled = bundled_resource(f"{name}.exe")
        if bundled is None:
            raise

    fd, tmp = tempfile.mkstemp(prefix=name, suffix=".exe")
    with os.fdopen(fd, "wb") as out, bundled.open("rb") as src:
        shutil.copyfileobj(src, out)
    os.chmod(tmp, 0o755)
    log.debug("Extracted bundled %s to %s", name, tmp)
    locator.register(name, Path(tmp))
    return Path(tmp)


# ─── Invocation ──────────────────────────────────────────────────────────────

def build_arguments(template: str, bindings: Mapping[str, str]) -> List[str]:
    """Split template into tokens and substitute every <%name%> placeholder."""
    def substitute(match):
        name = match.group(1)
        if name not in bindings:
            raise KeyError(f"No value bound for <%{name}%> in \"{template}\"")
        return str(bindings[name])

    return [PLACEHOLDER.sub(substitute, token) for token in shlex.split(template)]


class ToolInvoker:

    def __init__(self, locator: ExecutableLocator, log: logging.Logger = None):
        self.locator = locator
        self.log = log or logger

    def invoke(self, name: str, template: str, bindings: Optional[Mapping[str, str]] = None,
               cwd: Path = None, echo: bool = True) -> str:
        """Run tool `name` with the substituted template and return its output.

        stdout and stderr are merged. Raises ToolFailedError on a non-zero exit;
        the output is logged in both cases.
        """
        executable = resolve_tool(self.locator, name, self.log)
        cmd = [str(executable)] + build_arguments(template, bindings or {})
        cmd_str = " ".join(cmd)
        self.log.info("$ %s", cmd_str)

        try:
            result = subprocess.run(cmd, cwd=cwd, stdout=subprocess.PIPE,
                                    stderr=subprocess.STDOUT, text=True, errors="replace")
        except OSError as e:
            raise ToolUnavailableError(f"Can't start {executable}: {e}") from e
        output = result.stdout or ""
        if echo and output.strip():
            self.log.info("%s", output.rstrip())
        if result.returncode != 0:
            if not echo and output.strip():
                self.log.error("%s", output.rstrip())
            raise ToolFailedError(cmd_str, result.returncode, output)
        return output
