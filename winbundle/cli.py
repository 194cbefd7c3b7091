#!/usr/bin/env python3
"""
winbundle: Build CLI

Builds a Maven project and packages it as a Windows application directory
started by <AppName>.exe.

Usage:
  winbundle /path/to/app                  # Package with config defaults
  winbundle /path/to/app --copy-jvm       # Also ship $JAVA_HOME, pruned, in jvm/
  winbundle /path/to/app --jvm /path/jdk  # Explicit JVM to ship
  winbundle /path/to/app --debug          # Verbose output
"""

import argparse
import logging
import shutil
import sys
from pathlib import Path

from . import __version__
from .config import (load_build_yaml, load_config, metadata_from_config, options_from_build,
                     out_dir, search_dirs)
from .errors import MalformedMetadataError, PackagingError, PackagingIOError
from .maven import MavenBuild
from .package import package
from .tools import ExecutableLocator, ToolInvoker
from .tree import DestinationTree
from .vcs import GitIgnored, git_revision

log = logging.getLogger("winbundle")


def configure_logging(debug=False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
    )


def clean(target_dir: Path):
    if target_dir.exists():
        try:
            shutil.rmtree(target_dir)
        except OSError as e:
            raise PackagingIOError(f"Can't remove {target_dir}") from e
        log.info("  Removed %s/", target_dir.name)


def run(app_root: Path, copy_jvm=None, jvm_home=None) -> Path:
    config = load_config(app_root)
    build_cfg = load_build_yaml(app_root)

    locator = ExecutableLocator(search_dirs(build_cfg, app_root))
    invoker = ToolInvoker(locator, log)

    revision = git_revision(app_root, invoker)
    metadata = metadata_from_config(config, revision, app_root)
    options = options_from_build(build_cfg, app_root, copy_jvm=copy_jvm, jvm_home=jvm_home)
    log.info("Operate on %s-%s / git %s", metadata.name, metadata.version, revision)

    bundle_dir = out_dir(build_cfg, app_root)
    if app_root.resolve().is_relative_to(bundle_dir.resolve()):
        raise MalformedMetadataError(f"outDir {bundle_dir} would remove the app root")
    clean(app_root / "target")
    clean(bundle_dir)
    ignored = GitIgnored(app_root, invoker)

    log.info("\n=== Building with Maven ===")
    maven = MavenBuild(app_root, invoker, metadata.artifact_id or metadata.name, metadata.version)
    artifacts = maven.build()

    tree = DestinationTree(bundle_dir, ignored, log)
    tree.ensure_root()
    return package(metadata, artifacts, tree, locator, options, log)


def main():
    parser = argparse.ArgumentParser(
        description="Package a Maven Java app for Windows startup")
    parser.add_argument("root_dir", type=str,
                        help="App root directory (with pom file and winbundle.config.json)")
    parser.add_argument("--copy-jvm", action="store_true", default=None,
                        help="Copy a JRE/JDK into the package (overrides copyJvm)")
    parser.add_argument("--jvm", type=str,
                        help="JRE/JDK to copy (default: jvmHome or JAVA_HOME)")
    parser.add_argument("--debug", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()
    app_root = Path(args.root_dir).resolve()

    if not app_root.is_dir():
        print(f"ERROR: App directory not found: {app_root}")
        sys.exit(1)

    configure_logging(args.debug)
    copy_jvm = True if (args.copy_jvm or args.jvm) else None

    try:
        run(app_root, copy_jvm=copy_jvm, jvm_home=args.jvm)
    except PackagingError as e:
        log.error("ERROR: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
