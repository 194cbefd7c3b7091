"""Git lookups: the revision string and the set of ignored files."""

from pathlib import Path

from .tools import ToolInvoker

GIT_EXEC = "git"


def git_revision(app_root: Path, invoker: ToolInvoker) -> str:
    return invoker.invoke(GIT_EXEC, "describe --always --dirty", cwd=app_root, echo=False).strip()


class GitIgnored:
    """Predicate: is this file ignored by git in app_root's work tree?"""

    def __init__(self, app_root: Path, invoker: ToolInvoker):
        root = Path(app_root).resolve()
        output = invoker.invoke(GIT_EXEC, "ls-files --others --ignored --exclude-standard -z",
                                cwd=root, echo=False)
        self.ignored = {(root / rel).resolve() for rel in output.split("\0") if rel}
        invoker.log.debug("Found %d git-ignored files", len(self.ignored))

    def __call__(self, path: Path) -> bool:
        return Path(path).resolve() in self.ignored
