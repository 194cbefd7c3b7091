"""
winbundle: App Packager

Takes the outputs of a Maven build and assembles the Windows bundle:

  <root>/
    <AppName>.exe     WinRun4J launcher, INI (+ icon) embedded
    VERSION.TXT       version and git revision
    lib/              main jar + dependency jars
    bin/              external native dependencies
    config/           optional configuration tree
    licenses/         third-party, launcher and application licenses
    jvm/              optional pruned JRE/JDK copy

Stages run in order and stop at the first failure. Nothing already staged is
rolled back.
"""

import logging
from pathlib import Path

from .descriptor import LauncherDescriptor
from .errors import MissingInputError, PackagingIOError, ToolUnavailableError
from .launcher import Launcher
from .models import AppMetadata, BuildArtifacts, PackageOptions
from .runtime import stage_runtime
from .tools import ExecutableLocator, ToolInvoker
from .tree import DestinationTree

logger = logging.getLogger(__name__)

CLASSPATH = ("lib/*.jar", "lib", "bin", "config")


# ─── Text files ──────────────────────────────────────────────────────────────

def app_license_text(metadata: AppMetadata) -> str:
    """License summary for the application itself. Absent fields are skipped."""
    lines = []
    head = metadata.name
    if metadata.url:
        head += f" - {metadata.url}"
    lines += [head, ""]

    org = metadata.organization
    if org and (org.name or org.url):
        parts = []
        if org.name:
            parts.append(f"Copyright (C) {org.name}")
        if org.url:
            parts.append(org.url)
        lines.append(" - ".join(parts))

    for lic in metadata.licenses:
        lines.append("")
        lines += [v for v in (lic.name, lic.url, lic.comments) if v]
        lines.append("")

    if metadata.scm_url:
        lines.append(f"Sources available on {metadata.scm_url}")

    tracker = metadata.issue_tracker
    if tracker and (tracker.system or tracker.url):
        where = ": ".join(v for v in (tracker.system, tracker.url) if v)
        lines.append(f"Please report bugs on {where}")

    return "\n".join(lines) + "\n"


def write_app_license(tree: DestinationTree, metadata: AppMetadata) -> Path:
    path = tree.licenses_dir() / f"{metadata.name.upper()}.TXT"
    try:
        path.write_text(app_license_text(metadata), encoding="utf-8")
    except OSError as e:
        raise PackagingIOError(f"Can't write {path}") from e
    return path


def write_version_file(tree: DestinationTree, metadata: AppMetadata) -> Path:
    path = tree.version_file()
    try:
        path.write_text(f"{metadata.version}\n{metadata.revision}\n", encoding="utf-8")
    except OSError as e:
        raise PackagingIOError(f"Can't write {path}") from e
    return path


# ─── Packager ────────────────────────────────────────────────────────────────

def package(metadata: AppMetadata, artifacts: BuildArtifacts, tree: DestinationTree,
            locator: ExecutableLocator, options: PackageOptions = None,
            log: logging.Logger = None) -> Path:
    """Assemble the bundle under tree.root and return it."""
    log = log or logger
    options = options or PackageOptions()
    invoker = ToolInvoker(locator, log)

    log.info("=" * 60)
    log.info("  Packaging %s v%s (%s)", metadata.name, metadata.version, metadata.revision)
    log.info("  Bundle: %s", tree.root)
    log.info("=" * 60)

    # ── 1-3. Build outputs ───────────────────────────────────────────────────

    log.info("Move main jar to lib dir")
    tree.move_into(artifacts.jar, "lib")

    log.info("Move dependencies to lib dir")
    for dep in artifacts.dependencies:
        log.debug("Move %s to lib dir", dep)
        tree.move_into(dep, "lib")

    log.info("Move dependencies licenses to licenses dir")
    tree.move_into(artifacts.third_party_licenses, "licenses")

    # ── 4. External native dependencies ──────────────────────────────────────

    for name in metadata.external_deps:
        try:
            dep = locator.find(name)
        except ToolUnavailableError as e:
            raise MissingInputError(f"Can't find dependency {name}") from e
        log.info("Copy %s to bin dir", dep)
        tree.copy_into(dep, "bin", filter_file=False)

    # ── 5. Config ────────────────────────────────────────────────────────────

    if options.config_dir is not None and Path(options.config_dir).is_dir():
        log.info("Copy %s to config dir", options.config_dir)
        tree.copy_into(options.config_dir, "config")

    # ── 6. Launcher INI ──────────────────────────────────────────────────────

    # Locate WinRun4J and RCEDIT before the JVM copy.
    launcher = Launcher(invoker, log)
    descriptor = LauncherDescriptor.for_app(metadata, options.descriptor_entries)
    descriptor.set_classpath(CLASSPATH)
    descriptor.set_main_class(metadata.main_class)
    descriptor.set_minimum_version(metadata.min_runtime_version)
    descriptor.set_arguments(options.arguments)
    descriptor.set_single_instance(options.single_instance)

    # ── 7. JVM ───────────────────────────────────────────────────────────────

    if options.runtime_home is not None:
        staged = stage_runtime(tree, options.runtime_home, log)
        descriptor.set_runtime_location(staged)

    # ── 8-9. Executable ──────────────────────────────────────────────────────

    log.info("Starts rcedit to prepare final exe file")
    exec_file = launcher.make_exec_file(tree.exec_file(metadata.name), descriptor, metadata.icon)
    log.info("  Executable: %s", exec_file.name)

    # ── 10-12. Licenses and version ──────────────────────────────────────────

    launcher.copy_license_to(tree.licenses_dir())
    write_app_license(tree, metadata)
    write_version_file(tree, metadata)

    log.info("You can find package here: %s", tree.root)
    return tree.root
