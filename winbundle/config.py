"""
Project configuration.

  winbundle.config.json   application identity (JSONC: // line comments allowed)
  winbundle.build.yaml    build-time packaging settings (optional)

Example winbundle.config.json:

  {
    "name": "Foo",
    "version": "1.2.3",
    "artifactId": "foo",
    "mainClass": "com.x.Main",
    "javaVersion": "11",
    "icon": "src/main/resources/foo.ico",
    "externalDeps": ["ffmpeg"],
    "url": "https://example.com/foo",
    "organization": {"name": "Example", "url": "https://example.com"},
    "licenses": [{"name": "LGPL v3", "url": "https://www.gnu.org/licenses/lgpl-3.0.txt"}],
    "scm": {"url": "https://github.com/example/foo"},
    "issueManagement": {"system": "GitHub", "url": "https://github.com/example/foo/issues"}
  }
"""

import json
import os
import re
from pathlib import Path
from typing import Optional

import yaml

from .descriptor import parse_version
from .errors import MalformedMetadataError, MissingInputError
from .models import AppMetadata, IssueTracker, License, Organization, PackageOptions

CONFIG_NAMES = ["winbundle.config.json", "winbundle.json"]
BUILD_YAML = "winbundle.build.yaml"
DEFAULT_CONFIG_DIR = "src/main/config"
DEFAULT_RESOURCE_DIR = "src/main/resources"
DEFAULT_OUT_DIR = "target/winbundle"


# ─── Loading ─────────────────────────────────────────────────────────────────

def load_config(app_root: Path) -> dict:
    """Load winbundle.config.json (or winbundle.json fallback) with JSONC support."""
    for name in CONFIG_NAMES:
        path = app_root / name
        if path.exists():
            text = path.read_text(encoding="utf-8")
            text = re.sub(r'^\s*//.*$', '', text, flags=re.MULTILINE)
            try:
                return json.loads(text)
            except ValueError as e:
                raise MalformedMetadataError(f"Can't parse {path}: {e}") from e
    raise MissingInputError(f"No {CONFIG_NAMES[0]} or {CONFIG_NAMES[1]} found in {app_root}")


def load_build_yaml(app_root: Path) -> dict:
    """Load winbundle.build.yaml. Returns empty dict if absent."""
    path = app_root / BUILD_YAML
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise MalformedMetadataError(f"Can't parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise MalformedMetadataError(f"{path} must contain a mapping")
    return data


# ─── Metadata ────────────────────────────────────────────────────────────────

def _required(config: dict, key: str) -> str:
    value = config.get(key)
    if value is None or not str(value).strip():
        raise MalformedMetadataError(f"You must provide at least \"{key}\" in the project config")
    return str(value).strip()


def _section(config: dict, key: str) -> dict:
    value = config.get(key)
    return value if isinstance(value, dict) else {}


def _external_deps(value) -> tuple:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(" ")
    return tuple(dep.strip() for dep in value if dep and dep.strip())


def metadata_from_config(config: dict, revision: str, app_root: Path) -> AppMetadata:
    name = _required(config, "name")
    version = _required(config, "version")
    main_class = _required(config, "mainClass")
    java_version = _required(config, "javaVersion")
    parse_version(java_version)

    icon = None
    if config.get("icon"):
        icon = app_root / config["icon"]
        if not icon.is_file():
            raise MissingInputError(f"Can't find icon file {icon}")

    org = _section(config, "organization")
    issues = _section(config, "issueManagement")
    licenses = tuple(
        License(lic.get("name"), lic.get("url"), lic.get("comments"))
        for lic in config.get("licenses") or [] if isinstance(lic, dict)
    )

    return AppMetadata(
        name=name,
        version=version,
        revision=revision,
        main_class=main_class,
        min_runtime_version=java_version,
        icon=icon,
        external_deps=_external_deps(config.get("externalDeps")),
        artifact_id=config.get("artifactId"),
        url=config.get("url"),
        organization=Organization(org.get("name"), org.get("url")) if org else None,
        licenses=licenses,
        scm_url=_section(config, "scm").get("url"),
        issue_tracker=IssueTracker(issues.get("system"), issues.get("url")) if issues else None,
    )


# ─── Build settings ──────────────────────────────────────────────────────────

def _ini_value(value) -> str:
    # YAML turns true/false into bools; WinRun4J expects lowercase.
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def options_from_build(build_cfg: dict, app_root: Path, copy_jvm: Optional[bool] = None,
                       jvm_home: Optional[str] = None) -> PackageOptions:
    """Packaging options (CLI overrides > build yaml > defaults)."""
    config_dir = app_root / build_cfg.get("configDir", DEFAULT_CONFIG_DIR)

    if copy_jvm is None:
        copy_jvm = bool(build_cfg.get("copyJvm", False))
    runtime_home = None
    if copy_jvm:
        home = jvm_home or build_cfg.get("jvmHome") or os.environ.get("JAVA_HOME")
        if not home:
            raise MissingInputError("JVM copy requested but no --jvm, jvmHome or JAVA_HOME is set")
        runtime_home = Path(home)
        if not runtime_home.is_dir():
            raise MissingInputError(f"Can't find JVM dir {runtime_home}")

    launcher = build_cfg.get("launcher") or {}
    if not isinstance(launcher, dict):
        raise MalformedMetadataError("\"launcher\" in the build config must be a mapping")
    return PackageOptions(
        config_dir=config_dir if config_dir.is_dir() else None,
        runtime_home=runtime_home,
        arguments=tuple(str(a) for a in build_cfg.get("arguments") or []),
        single_instance=bool(build_cfg.get("singleInstance", False)),
        descriptor_entries={str(k): _ini_value(v) for k, v in launcher.items()},
    )


def search_dirs(build_cfg: dict, app_root: Path) -> list:
    """Extra directories searched for external tools and native dependencies."""
    names = [build_cfg.get("configDir", DEFAULT_CONFIG_DIR),
             build_cfg.get("resourceDir", DEFAULT_RESOURCE_DIR)]
    return [app_root / n for n in names if (app_root / n).is_dir()]


def out_dir(build_cfg: dict, app_root: Path) -> Path:
    return app_root / build_cfg.get("outDir", DEFAULT_OUT_DIR)
