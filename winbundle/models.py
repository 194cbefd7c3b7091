"""Records passed between the collaborators and the packager."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class Organization:
    name: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class License:
    name: Optional[str] = None
    url: Optional[str] = None
    comments: Optional[str] = None


@dataclass(frozen=True)
class IssueTracker:
    system: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class AppMetadata:
    """What the packager knows about the application being bundled.

    ``min_runtime_version`` is kept as text; it is checked as a decimal when it
    lands in the launcher descriptor. The trailing fields only feed the
    generated license file.
    """

    name: str
    version: str
    revision: str
    main_class: str
    min_runtime_version: str
    icon: Optional[Path] = None
    external_deps: Tuple[str, ...] = ()
    artifact_id: Optional[str] = None
    url: Optional[str] = None
    organization: Optional[Organization] = None
    licenses: Tuple[License, ...] = ()
    scm_url: Optional[str] = None
    issue_tracker: Optional[IssueTracker] = None


@dataclass(frozen=True)
class BuildArtifacts:
    jar: Path
    dependencies: Tuple[Path, ...]
    third_party_licenses: Path


@dataclass(frozen=True)
class PackageOptions:
    """Per-run switches for package().

    runtime_home set means "copy this JVM into the bundle".
    descriptor_entries are written into the launcher INI before anything else,
    so keys the packager only sets when absent keep the configured value.
    """

    config_dir: Optional[Path] = None
    runtime_home: Optional[Path] = None
    arguments: Tuple[str, ...] = ()
    single_instance: bool = False
    descriptor_entries: Mapping[str, str] = field(default_factory=dict)
