"""
Destination tree for one packaging run.

Everything lands under a single root directory; callers address sub-areas by
name ("lib", "bin", "config", "licenses", ...) and the tree creates them on
demand.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from .errors import MissingInputError, PackagingIOError

logger = logging.getLogger(__name__)

LICENSES_DIR = "licenses"
JVM_DIR = "jvm"
VERSION_FILE = "VERSION.TXT"


def _never_ignored(path: Path) -> bool:
    return False


class DestinationTree:

    def __init__(self, root: Path, ignored: Optional[Callable[[Path], bool]] = None,
                 log: logging.Logger = None):
        self.root = Path(root)
        self.ignored = ignored or _never_ignored
        self.log = log or logger

    def ensure_root(self) -> Path:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PackagingIOError(f"Can't prepare destination dir {self.root}") from e
        return self.root

    def resolve(self, *sub_path: str, file_name: str = "") -> Path:
        """Return root/sub_path.../file_name, creating missing parent directories.

        An empty file_name addresses (and creates) the directory itself.
        """
        directory = self.root.joinpath(*(p for p in sub_path if p))
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PackagingIOError(f"Can't create directory {directory}") from e
        return directory / file_name if file_name else directory

    # ─── Named locations ─────────────────────────────────────────────────────

    def exec_file(self, app_name: str) -> Path:
        return self.root / f"{app_name}.exe"

    def jvm_dir(self) -> Path:
        return self.root / JVM_DIR

    def licenses_dir(self) -> Path:
        return self.resolve(LICENSES_DIR)

    def version_file(self) -> Path:
        return self.root / VERSION_FILE

    # ─── Staging ─────────────────────────────────────────────────────────────

    def move_into(self, source: Path, *sub_path: str) -> Path:
        source = Path(source)
        if not source.is_file():
            raise MissingInputError(f"Expected file not exists: {source}")
        dest = self.resolve(*sub_path, file_name=source.name)
        self.log.debug("Move file \"%s\" to destination \"%s\"", source, dest)
        try:
            shutil.move(str(source), str(dest))
        except OSError as e:
            raise PackagingIOError(f"Can't move {source} to {dest}") from e
        return dest

    def copy_into(self, source: Path, *sub_path: str, filter_file: bool = True) -> Optional[Path]:
        """Copy a file or a whole directory tree under root/sub_path.

        Files matched by the ignore predicate are left out. For a single file
        the predicate only applies when filter_file is set.
        """
        source = Path(source)
        if not source.exists():
            raise MissingInputError(f"Expected file not exists: {source}")

        if not source.is_dir():
            if filter_file and self.ignored(source):
                self.log.debug("Ignore copy file \"%s\"", source)
                return None
            dest = self.resolve(*sub_path, file_name=source.name)
            self.log.debug("Copy file \"%s\" to destination \"%s\"", source, dest)
            try:
                shutil.copy2(source, dest)
            except OSError as e:
                raise PackagingIOError(f"Can't copy {source} to {dest}") from e
            return dest

        dest_dir = self.resolve(*sub_path)
        self.log.info("Copy dir \"%s\" to destination \"%s\"", source, dest_dir)
        for item in source.rglob("*"):
            if not item.is_file():
                continue
            if self.ignored(item):
                self.log.debug("Ignore copy file \"%s\"", item)
                continue
            dest = dest_dir / item.relative_to(source)
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(item, dest)
            except OSError as e:
                raise PackagingIOError(f"Can't copy to {dest}") from e
        return dest_dir
