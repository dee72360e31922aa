"""
Applies prepare or restore across every package of the dependency matrix.

By default every manifest is read and rewritten in memory before anything is
saved, so a missing or broken manifest aborts the run with the workspace
untouched. With ``buffer_writes=False`` each manifest is saved as soon as it
is rewritten and a failure leaves earlier packages in their new state.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .dependency import DEPENDENCY_MATRIX, DependencyEdge, DependencyMatrix
from .error_handling import MalformedManifest
from .manifests import Manifest, ManifestAccessor
from .mutations import ChangeKind, ManifestChange, prepare_manifest, restore_manifest
from .structured_logging import (
    log_dependency_moved,
    log_dependency_set,
    log_manifest_written,
    log_run_complete,
    log_run_start,
)


class Command(Enum):
    PREPARE = "prepare"
    RESTORE = "restore"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Command"]:
        """Return the matching command, or None for anything unrecognised."""
        for command in cls:
            if command.value == value:
                return command
        return None


@dataclass
class PackageResult:
    """Outcome of rewriting one package manifest."""

    package_name: str
    path: Path
    changes: List[ManifestChange] = field(default_factory=list)
    written: bool = False

    @property
    def moved(self) -> List[ManifestChange]:
        return [c for c in self.changes if c.kind is ChangeKind.MOVED]


@dataclass
class PublishResult:
    """Outcome of a full prepare or restore run."""

    command: Command
    dry_run: bool
    packages: List[PackageResult] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def total_changes(self) -> int:
        return sum(len(p.changes) for p in self.packages)

    @property
    def packages_written(self) -> int:
        return sum(1 for p in self.packages if p.written)


PackageCallback = Callable[[Command, PackageResult], None]


class WorkspacePublisher:
    """Runs a command over every package of a dependency matrix."""

    def __init__(
        self,
        accessor: ManifestAccessor,
        matrix: DependencyMatrix = DEPENDENCY_MATRIX,
        buffer_writes: bool = True,
        dry_run: bool = False,
        on_package: Optional[PackageCallback] = None,
    ):
        self.accessor = accessor
        self.matrix = matrix
        self.buffer_writes = buffer_writes
        self.dry_run = dry_run
        self.on_package = on_package

    def run(self, command: Command) -> PublishResult:
        start_time = time.time()
        result = PublishResult(command=command, dry_run=self.dry_run)
        log_run_start(command.value, self.dry_run, len(self.matrix))

        pending: List[Tuple[PackageResult, Manifest]] = []
        for package_name, edges in self.matrix.items():
            package_result, manifest = self._rewrite(command, package_name, edges)
            result.packages.append(package_result)

            if self.buffer_writes:
                pending.append((package_result, manifest))
            else:
                self._save(package_result, manifest)
                self._notify(command, package_result)

        for package_result, manifest in pending:
            self._save(package_result, manifest)
            self._notify(command, package_result)

        result.duration_ms = int((time.time() - start_time) * 1000)
        log_run_complete(result.packages_written, result.total_changes, result.duration_ms)
        return result

    def prepare(self) -> PublishResult:
        return self.run(Command.PREPARE)

    def restore(self) -> PublishResult:
        return self.run(Command.RESTORE)

    def _rewrite(
        self,
        command: Command,
        package_name: str,
        edges: Tuple[DependencyEdge, ...],
    ) -> Tuple[PackageResult, Manifest]:
        manifest = self.accessor.read(package_name)

        try:
            if command is Command.PREPARE:
                changes = prepare_manifest(
                    manifest, edges, self.accessor.current_version, package_name
                )
            else:
                changes = restore_manifest(manifest, edges, package_name)
        except MalformedManifest as e:
            # Errors from the accessor already carry a path and were reported
            if e.path is None:
                e.package_name = package_name
                e.path = self.accessor.manifest_path(package_name)
                self.accessor.report_error(e, "mutations", command.value)
            raise

        for change in changes:
            if change.kind is ChangeKind.MOVED:
                log_dependency_moved(
                    package_name, change.dependency_name, change.from_field, change.field
                )
            else:
                log_dependency_set(
                    package_name, change.dependency_name, change.field, change.specifier
                )

        package_result = PackageResult(
            package_name=package_name,
            path=self.accessor.manifest_path(package_name),
            changes=changes,
        )
        return package_result, manifest

    def _save(self, package_result: PackageResult, manifest: Manifest) -> None:
        if self.dry_run:
            return
        path = self.accessor.write(package_result.package_name, manifest)
        package_result.written = True
        log_manifest_written(package_result.package_name, str(path))

    def _notify(self, command: Command, package_result: PackageResult) -> None:
        if self.on_package:
            self.on_package(command, package_result)
