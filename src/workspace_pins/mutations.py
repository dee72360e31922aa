"""
In-memory rewrites of a single manifest.

``prepare_manifest`` swaps workspace references for caret ranges (moving the
entry to its publish-time section when needed); ``restore_manifest`` puts the
workspace references back. Both mutate the manifest in place and return the
list of changes they made.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from .dependency import DependencyEdge
from .error_handling import MalformedManifest

WORKSPACE_SPECIFIER = "workspace:*"
RANGE_PREFIX = "^"

VersionLookup = Callable[[str], str]


class ChangeKind(Enum):
    MOVED = "moved"
    SET = "set"


@dataclass(frozen=True)
class ManifestChange:
    """One observable edit to a manifest."""

    kind: ChangeKind
    dependency_name: str
    field: str
    specifier: Optional[str] = None
    from_field: Optional[str] = None

    def describe(self) -> str:
        if self.kind is ChangeKind.MOVED:
            return f"Moved {self.dependency_name} from {self.from_field} to {self.field}"
        if self.specifier == WORKSPACE_SPECIFIER:
            return f"Set {self.dependency_name} to {self.specifier}"
        return f"Set {self.dependency_name} to version {self.specifier}"


def pinned_range(version: str) -> str:
    return f"{RANGE_PREFIX}{version}"


def _section(
    manifest: Dict[str, Any], field: str, package_name: Optional[str]
) -> Optional[Dict[str, Any]]:
    section = manifest.get(field)
    if section is not None and not isinstance(section, dict):
        owner = package_name or "manifest"
        raise MalformedManifest(
            f"Section {field} of {owner} must be an object, "
            f"got {type(section).__name__}",
            package_name,
        )
    return section


def set_dependency(
    manifest: Dict[str, Any],
    field: str,
    dependency_name: str,
    specifier: str,
    package_name: Optional[str] = None,
) -> None:
    """Set ``manifest[field][dependency_name]``, creating the section if absent."""
    section = _section(manifest, field, package_name)
    if section is None:
        section = manifest[field] = {}
    section[dependency_name] = specifier


def remove_dependency(
    manifest: Dict[str, Any],
    field: str,
    dependency_name: str,
    package_name: Optional[str] = None,
) -> bool:
    """
    Remove a dependency from a section, dropping the section once it is empty.

    Returns:
        bool: True if the dependency was present and removed
    """
    section = _section(manifest, field, package_name)
    if not section or dependency_name not in section:
        return False

    del section[dependency_name]
    if not section:
        del manifest[field]
    return True


def prepare_manifest(
    manifest: Dict[str, Any],
    edges: Iterable[DependencyEdge],
    version_lookup: VersionLookup,
    package_name: Optional[str] = None,
) -> List[ManifestChange]:
    """
    Replace workspace references with caret ranges for publishing.

    Args:
        manifest: Manifest to mutate in place
        edges: Dependency edges of the package, applied in order
        version_lookup: Returns the current version of a workspace package
        package_name: Owning package, used in error messages

    Returns:
        List[ManifestChange]: Changes in the order they were applied
    """
    changes: List[ManifestChange] = []

    for edge in edges:
        specifier = pinned_range(version_lookup(edge.version_from))

        if edge.moves_section and remove_dependency(
            manifest, edge.source_field, edge.dependency_name, package_name
        ):
            changes.append(
                ManifestChange(
                    ChangeKind.MOVED,
                    edge.dependency_name,
                    edge.target_field,
                    from_field=edge.source_field,
                )
            )

        set_dependency(
            manifest, edge.target_field, edge.dependency_name, specifier, package_name
        )
        changes.append(
            ManifestChange(
                ChangeKind.SET, edge.dependency_name, edge.target_field, specifier
            )
        )

    return changes


def restore_manifest(
    manifest: Dict[str, Any],
    edges: Iterable[DependencyEdge],
    package_name: Optional[str] = None,
) -> List[ManifestChange]:
    """Put workspace references back in each dependency's development section."""
    changes: List[ManifestChange] = []

    for edge in edges:
        if edge.moves_section and remove_dependency(
            manifest, edge.target_field, edge.dependency_name, package_name
        ):
            changes.append(
                ManifestChange(
                    ChangeKind.MOVED,
                    edge.dependency_name,
                    edge.source_field,
                    from_field=edge.target_field,
                )
            )

        set_dependency(
            manifest,
            edge.source_field,
            edge.dependency_name,
            WORKSPACE_SPECIFIER,
            package_name,
        )
        changes.append(
            ManifestChange(
                ChangeKind.SET,
                edge.dependency_name,
                edge.source_field,
                WORKSPACE_SPECIFIER,
            )
        )

    return changes
