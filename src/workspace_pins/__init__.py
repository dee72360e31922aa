"""Swap workspace dependency references for caret ranges around a publish."""

from .dependency import DEPENDENCY_MATRIX, DependencyEdge
from .error_handling import (
    MalformedManifest,
    ManifestError,
    ManifestNotFound,
    MissingVersionField,
    WriteError,
)
from .manifests import ManifestAccessor
from .mutations import prepare_manifest, restore_manifest
from .publisher import Command, WorkspacePublisher

__all__ = [
    "DEPENDENCY_MATRIX",
    "DependencyEdge",
    "ManifestAccessor",
    "ManifestError",
    "ManifestNotFound",
    "MalformedManifest",
    "MissingVersionField",
    "WriteError",
    "Command",
    "WorkspacePublisher",
    "prepare_manifest",
    "restore_manifest",
]
