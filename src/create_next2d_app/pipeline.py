from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from create_next2d_app.errors import CreateAppError
from create_next2d_app.manifest import load_manifest, write_manifest
from create_next2d_app.package_manager import PackageManager, dedup_preserve_order, format_command
from create_next2d_app.template import (
    InstallLists,
    copy_template_payload,
    load_template_descriptor,
    merge_template_dependencies,
    package_name,
    resolve_template_dir,
)

STAGE_TEMPLATE_INSTALL = "template-install"
STAGE_MERGE_AND_COPY = "merge-and-copy"
STAGE_FINAL_INSTALL = "final-install"


@dataclass(frozen=True)
class InstallRequest:
    root: Path
    app_name: str
    template: str
    dependencies: tuple[str, ...]
    dev_dependencies: tuple[str, ...] = ()
    reset_dependencies: bool = True


@dataclass(frozen=True)
class StageResult:
    stage: str
    ok: bool
    command: str | None = None
    message: str | None = None
    install_lists: InstallLists | None = None

    @classmethod
    def success(cls, stage: str, *, install_lists: InstallLists | None = None) -> StageResult:
        return cls(stage=stage, ok=True, install_lists=install_lists)

    @classmethod
    def failed_command(cls, stage: str, argv: list[str]) -> StageResult:
        command = format_command(argv)
        return cls(stage=stage, ok=False, command=command, message=command)

    @classmethod
    def failed(cls, stage: str, message: str) -> StageResult:
        return cls(stage=stage, ok=False, message=message)


@dataclass(frozen=True)
class PipelineResult:
    stages: tuple[StageResult, ...]

    @property
    def ok(self) -> bool:
        return bool(self.stages) and all(stage.ok for stage in self.stages)

    @property
    def failure(self) -> StageResult | None:
        for stage in self.stages:
            if not stage.ok:
                return stage
        return None


def install_template(request: InstallRequest, pm: PackageManager) -> StageResult:
    argv = pm.install_argv([request.template])
    if pm.run(argv, cwd=request.root) != 0:
        return StageResult.failed_command(STAGE_TEMPLATE_INSTALL, argv)
    return StageResult.success(STAGE_TEMPLATE_INSTALL)


def merge_and_copy(request: InstallRequest, pm: PackageManager) -> StageResult:
    print()
    print(f"Installing template: {request.template}")

    template_dir = resolve_template_dir(request.root, request.template)
    descriptor = load_template_descriptor(template_dir)

    manifest = load_manifest(request.root)
    lists = merge_template_dependencies(
        manifest,
        descriptor,
        dependencies=request.dependencies,
        dev_dependencies=request.dev_dependencies,
        reset=request.reset_dependencies,
    )
    write_manifest(request.root, manifest)

    copy_template_payload(template_dir, request.root)

    argv = pm.uninstall_argv([package_name(request.template)])
    if pm.run(argv, cwd=request.root) != 0:
        return StageResult.failed_command(STAGE_MERGE_AND_COPY, argv)
    return StageResult.success(STAGE_MERGE_AND_COPY, install_lists=lists)


def install_dependencies(request: InstallRequest, pm: PackageManager, lists: InstallLists) -> StageResult:
    argv = pm.install_argv(dedup_preserve_order(lists.dependencies))
    if pm.run(argv, cwd=request.root) != 0:
        return StageResult.failed_command(STAGE_FINAL_INSTALL, argv)

    dev = dedup_preserve_order(lists.dev_dependencies)
    if dev:
        argv = pm.install_argv(dev, dev=True)
        if pm.run(argv, cwd=request.root) != 0:
            return StageResult.failed_command(STAGE_FINAL_INSTALL, argv)
    return StageResult.success(STAGE_FINAL_INSTALL)


def _guarded(stage: str, fn: Callable[[], StageResult]) -> StageResult:
    try:
        return fn()
    except CreateAppError as exc:
        return StageResult.failed(stage, str(exc))


def run_install_pipeline(request: InstallRequest, pm: PackageManager) -> PipelineResult:
    """
    Run template install, merge-and-copy, then the final install, strictly in order.

    Stops at the first failed stage; nothing already written to disk is rolled back.
    """

    print("Installing packages. This may take a few minutes.")

    results: list[StageResult] = []

    first = _guarded(STAGE_TEMPLATE_INSTALL, lambda: install_template(request, pm))
    results.append(first)
    if not first.ok:
        return PipelineResult(stages=tuple(results))

    second = _guarded(STAGE_MERGE_AND_COPY, lambda: merge_and_copy(request, pm))
    results.append(second)
    if not second.ok:
        return PipelineResult(stages=tuple(results))

    lists = second.install_lists or InstallLists(
        dependencies=list(request.dependencies),
        dev_dependencies=list(request.dev_dependencies),
    )
    results.append(_guarded(STAGE_FINAL_INSTALL, lambda: install_dependencies(request, pm, lists)))
    return PipelineResult(stages=tuple(results))
