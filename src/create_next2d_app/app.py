from __future__ import annotations

import platform
import shutil
import sys
from pathlib import Path

from create_next2d_app import __version__
from create_next2d_app.config import Settings
from create_next2d_app.console import error
from create_next2d_app.manifest import initial_manifest, write_gitignore, write_manifest
from create_next2d_app.naming import validate_app_name
from create_next2d_app.package_manager import PackageManager
from create_next2d_app.pipeline import InstallRequest, run_install_pipeline
from create_next2d_app.preflight import (
    check_package_manager_version,
    verify_working_directory_consistency,
    warn_if_outdated,
)


def print_success(*, app_name: str, root: Path, settings: Settings) -> None:
    print()
    print(f"Success! Created {app_name} at {root}")
    print()
    print("you can run several commands:")
    for step in settings.next_steps:
        print()
        print(f"  {step.command}")
        print(f"    {step.description}")
    print()
    print("We suggest that you begin by typing:")
    print(f"  cd {app_name}")
    print(f"  {settings.start_command}")
    print()


def create_app(
    project_directory: str,
    *,
    settings: Settings,
    template: str | None = None,
    base_dir: Path | None = None,
) -> int:
    """
    Scaffold a new project in `project_directory` and return the process exit code.

    Raises `InvalidProjectName` before anything is written when the directory's basename is not a usable
    package name.
    """

    root = ((base_dir or Path.cwd()) / project_directory).resolve()
    app_name = root.name
    validate_app_name(app_name, settings.reserved_names)

    root.mkdir(parents=True, exist_ok=True)

    print()
    print(f"Creating a new Next2D app in {root}.")
    print()

    write_manifest(root, initial_manifest(app_name, settings.manifest))

    pm_settings = settings.package_manager
    if not verify_working_directory_consistency(command=pm_settings.command, root=root):
        return 1

    version_info = check_package_manager_version(
        command=pm_settings.command,
        minimum_version=pm_settings.minimum_version,
    )
    warn_if_outdated(
        version_info,
        command=pm_settings.command,
        minimum_version=pm_settings.minimum_version,
    )

    write_gitignore(root, settings.gitignore)

    request = InstallRequest(
        root=root,
        app_name=app_name,
        template=template or settings.template,
        dependencies=settings.dependencies,
        dev_dependencies=settings.dev_dependencies,
        reset_dependencies=settings.reset_dependencies,
    )
    pm = PackageManager(command=pm_settings.command, install_flags=pm_settings.install_flags)
    result = run_install_pipeline(request, pm)

    failure = result.failure
    if failure is not None:
        print()
        error(failure.message or f"{failure.stage} failed")
        return 1

    print_success(app_name=app_name, root=root, settings=settings)
    return 0


def collect_env_info(settings: Settings) -> list[str]:
    command = settings.package_manager.command
    pm_version = check_package_manager_version(
        command=command,
        minimum_version=settings.package_manager.minimum_version,
    )
    return [
        "Environment Info:",
        "",
        "  System:",
        f"    OS: {platform.platform()}",
        f"    Python: {sys.version.split()[0]} ({sys.executable})",
        "  Binaries:",
        f"    {command}: {pm_version.version or 'Not Found'} - {shutil.which(command) or 'Not Found'}",
        "  Packages:",
        f"    create-next2d-app: {__version__}",
        f"    default template: {settings.template}",
    ]
