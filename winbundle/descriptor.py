"""
WinRun4J launcher INI.

An ordered key=value model. The order keys are first written in is the order
they are serialized in; overwriting a key keeps its slot.
"""

import os
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import MalformedMetadataError
from .models import AppMetadata
from .runtime import runtime_library_path

CLASSPATH_PREFIX = "classpath"
ARGUMENT_PREFIX = "arg"
SINGLE_INSTANCE_KEY = "single.instance"


def parse_version(value: str) -> Decimal:
    """Parse a minimum JVM version such as "11" or "1.8"."""
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        raise MalformedMetadataError(f"Invalid minimum JVM version: {value!r}") from None
    if not parsed.is_finite():
        raise MalformedMetadataError(f"Invalid minimum JVM version: {value!r}")
    return parsed


class LauncherDescriptor:
    """Plain entries plus the launcher settings.

    The settings are kept aside and only expanded into keys when the
    descriptor is read or serialized, after every plain entry: main.class,
    vm.version.min, classpath.N, arg.N, single.instance, vm.location.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries = {}
        self._main_class: Optional[str] = None
        self._min_version: Optional[str] = None
        self._classpath: Optional[List[str]] = None
        self._arguments: Optional[List[str]] = None
        self._single_instance: Optional[bool] = None
        self._runtime_dir: Optional[str] = None
        for key, value in (entries or {}).items():
            self.set(key, value)

    @classmethod
    def for_app(cls, metadata: AppMetadata, entries: Optional[Mapping[str, str]] = None):
        """Descriptor with the keys every bundle carries, then any pre-seeded entries."""
        descriptor = cls({
            "ini.override": "true",
            "log": f"%LOCALAPPDATA%\\{metadata.name}\\startup.log",
            "log.level": "warning",
            "log.roll.size": "2",
            "vmarg.1": f"-Dwinbundle.appname=\"{metadata.name}\"",
            "vmarg.2": f"-Dwinbundle.appversion=\"{metadata.version}\"",
            "vmarg.3": f"-Dwinbundle.gitversion=\"{metadata.revision}\"",
        })
        for key, value in (entries or {}).items():
            descriptor.set(key, value)
        return descriptor

    # ─── Raw access ──────────────────────────────────────────────────────────

    def set(self, key: str, value: str):
        self._entries[key] = str(value)

    def set_if_absent(self, key: str, value: str):
        if key not in self._entries:
            self._entries[key] = str(value)

    def remove(self, key: str):
        self._entries.pop(key, None)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._rendered().get(key, default)

    def items(self):
        return list(self._rendered().items())

    def __contains__(self, key) -> bool:
        return key in self._rendered()

    def __len__(self) -> int:
        return len(self._rendered())

    # ─── Launcher settings ───────────────────────────────────────────────────

    def set_classpath(self, entries: Iterable[str]):
        self._classpath = [str(e) for e in entries]

    def set_arguments(self, entries: Iterable[str]):
        self._arguments = [str(e) for e in entries]

    def set_main_class(self, value: str):
        self._main_class = value

    def set_minimum_version(self, value: str):
        self._min_version = str(parse_version(value))

    def set_single_instance(self, flag: bool):
        self._single_instance = bool(flag)

    def set_runtime_location(self, staged_dir_name: str):
        self._runtime_dir = staged_dir_name

    def _rendered(self) -> Dict[str, str]:
        entries = dict(self._entries)
        if self._main_class is not None:
            entries.setdefault("main.class", str(self._main_class))
        if self._min_version is not None:
            entries.setdefault("vm.version.min", self._min_version)
        if self._classpath is not None:
            entries = _with_indexed(entries, CLASSPATH_PREFIX, self._classpath)
        if self._arguments is not None:
            entries = _with_indexed(entries, ARGUMENT_PREFIX, self._arguments)
        if self._single_instance:
            entries[SINGLE_INSTANCE_KEY] = "process"
        elif self._single_instance is not None:
            entries.pop(SINGLE_INSTANCE_KEY, None)
        if self._runtime_dir is not None:
            entries.setdefault("vm.location", runtime_library_path(self._runtime_dir))
        return entries

    # ─── Output ──────────────────────────────────────────────────────────────

    def serialize(self) -> bytes:
        """key=value lines, platform line endings, no escaping."""
        return "".join(f"{k}={v}{os.linesep}" for k, v in self._rendered().items()).encode("utf-8")

    def write(self, path: Path) -> Path:
        path = Path(path)
        path.write_bytes(self.serialize())
        return path


def _with_indexed(entries: Dict[str, str], prefix: str, values: List[str]) -> Dict[str, str]:
    # Existing prefix.N keys are dropped; the new block takes the slot of the
    # first old one, or goes at the end.
    pattern = re.compile(rf"^{re.escape(prefix)}\.\d+$")
    block = {f"{prefix}.{pos}": v for pos, v in enumerate(values, start=1)}

    rebuilt = {}
    for key, value in entries.items():
        if pattern.match(key):
            if block:
                rebuilt.update(block)
                block = {}
            continue
        rebuilt[key] = value
    rebuilt.update(block)
    return rebuilt
