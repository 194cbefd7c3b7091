"""
WinRun4J launcher: copy the base executable, then embed the INI (and icon)
with RCEDIT.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from .descriptor import LauncherDescriptor
from .errors import PackagingIOError
from .tools import ToolInvoker, bundled_resource, resolve_tool

logger = logging.getLogger(__name__)

WINRUN4J_EXEC = "WinRun4J64"
RCEDIT_EXEC = "RCEDIT64"
RCEDIT_INI = "/N <%exe_file%> <%ini_file%>"
RCEDIT_ICON = "/I <%exe_file%> <%ico_file%>"
LICENSE_FILE = "WinRun4J-About.txt"


class Launcher:

    def __init__(self, invoker: ToolInvoker, log: logging.Logger = None):
        self.invoker = invoker
        self.log = log or logger
        # Resolve both up front so a missing tool fails before anything is written.
        self.base_exec = resolve_tool(invoker.locator, WINRUN4J_EXEC, self.log)
        resolve_tool(invoker.locator, RCEDIT_EXEC, self.log)

    def make_exec_file(self, target: Path, descriptor: LauncherDescriptor,
                       icon: Optional[Path] = None) -> Path:
        target = Path(target)
        try:
            shutil.copyfile(self.base_exec, target)
        except OSError as e:
            raise PackagingIOError(f"Can't copy {self.base_exec} to {target}") from e

        fd, ini_file = tempfile.mkstemp(prefix=target.stem, suffix=".ini")
        os.close(fd)
        try:
            descriptor.write(Path(ini_file))
            self.invoker.invoke(RCEDIT_EXEC, RCEDIT_INI,
                                {"exe_file": str(target), "ini_file": ini_file})
        finally:
            Path(ini_file).unlink(missing_ok=True)

        if icon is not None:
            self.log.info("Embed icon %s", icon)
            self.invoker.invoke(RCEDIT_EXEC, RCEDIT_ICON,
                                {"exe_file": str(target), "ico_file": str(icon)})
        return target

    def copy_license_to(self, dest_dir: Path) -> Path:
        dest = Path(dest_dir) / LICENSE_FILE
        try:
            dest.write_bytes(bundled_resource(LICENSE_FILE).read_bytes())
        except OSError as e:
            raise PackagingIOError(f"Can't write {dest}") from e
        return dest
