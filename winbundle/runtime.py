"""
JVM staging: full copy of a JRE/JDK into the bundle, then pruned.

The launcher only needs bin/server/jvm.dll and the class libraries; headers,
jmods, the JDK source archive and the command-line launchers in bin/ are
removed from the staged copy.
"""

import logging
import shutil
from pathlib import Path

from .errors import MissingInputError, PackagingIOError
from .tree import DestinationTree

logger = logging.getLogger(__name__)

WINDOWS_EXEC_EXTENSIONS = ("exe", "com", "cmd", "bat")
RUNTIME_LIBRARY = "jvm.dll"

PRUNE_DIRS = ("include", "jmods")
PRUNE_FILES = (("lib", "src.zip"),)


def runtime_library_path(staged_dir_name: str) -> str:
    """Launcher-relative path of the JVM library inside a staged runtime."""
    return f"{staged_dir_name}/bin/server/{RUNTIME_LIBRARY}"


def _prune(path: Path, log: logging.Logger):
    if not path.exists():
        return
    try:
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()
        log.debug("Pruned %s", path)
    except OSError as e:
        log.warning("Can't remove %s: %s", path, e)


def stage_runtime(tree: DestinationTree, source_dir: Path, log: logging.Logger = None) -> str:
    """Copy source_dir into the bundle's jvm/ area and prune it.

    Returns the staged directory name. Copy failures propagate, prune failures
    are only logged.
    """
    log = log or logger
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise MissingInputError(f"Can't find JVM dir {source_dir}")

    jvm_dir = tree.jvm_dir()
    log.info("Copy JRE/JDK %s to current %s dir", source_dir, jvm_dir.name)
    try:
        shutil.copytree(source_dir, jvm_dir, dirs_exist_ok=True)
    except OSError as e:
        raise PackagingIOError(f"Can't copy {source_dir} to {jvm_dir}") from e

    for name in PRUNE_DIRS:
        _prune(jvm_dir / name, log)
    for parts in PRUNE_FILES:
        _prune(jvm_dir.joinpath(*parts), log)

    bin_dir = jvm_dir / "bin"
    if bin_dir.is_dir():
        for entry in sorted(bin_dir.iterdir()):
            if entry.is_file() and entry.suffix.lstrip(".").lower() in WINDOWS_EXEC_EXTENSIONS:
                _prune(entry, log)

    return jvm_dir.name
