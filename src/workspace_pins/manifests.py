"""
Reading and writing package manifests inside the workspace.

Manifests live at ``<root>/<packages_dir>/<package>/<manifest_name>``. They are
parsed as JSON objects and written back with two-space indentation and a
single trailing newline, preserving key order.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .error_handling import (
    ErrorCallback,
    MalformedManifest,
    ManifestError,
    ManifestNotFound,
    MissingVersionField,
    WriteError,
    report_manifest_error,
)

Manifest = Dict[str, Any]


class ManifestAccessor:
    """Loads and saves manifests for packages of one workspace."""

    def __init__(
        self,
        root: Union[str, Path],
        packages_dir: str = "packages",
        manifest_name: str = "package.json",
        indent: int = 2,
        error_callback: Optional[ErrorCallback] = None,
    ):
        self.root = Path(root)
        self.packages_dir = packages_dir
        self.manifest_name = manifest_name
        self.indent = indent
        self.error_callback = error_callback

    def manifest_path(self, package_name: str) -> Path:
        return self.root / self.packages_dir / package_name / self.manifest_name

    def report_error(
        self,
        error: ManifestError,
        module: str,
        function: str,
        cause: Optional[Exception] = None,
    ) -> ManifestError:
        """Report to the global handler, then to this accessor's own callback."""
        context = report_manifest_error(error, module, function, exception=cause)
        if self.error_callback:
            self.error_callback(context)
        return error

    def _fail(
        self, error: ManifestError, function: str, cause: Optional[Exception] = None
    ) -> ManifestError:
        return self.report_error(error, "manifests", function, cause)

    def read(self, package_name: str) -> Manifest:
        """
        Parse the manifest of a package.

        Raises:
            ManifestNotFound: If the manifest file does not exist
            MalformedManifest: If it is not valid JSON or not a JSON object
        """
        path = self.manifest_path(package_name)

        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise self._fail(
                ManifestNotFound(
                    f"Manifest not found for {package_name}: {path}",
                    package_name,
                    path,
                ),
                "read",
                e,
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise self._fail(
                MalformedManifest(
                    f"Cannot read manifest for {package_name}: {e}", package_name, path
                ),
                "read",
                e,
            ) from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise self._fail(
                MalformedManifest(
                    f"Invalid JSON in manifest for {package_name}: {e}",
                    package_name,
                    path,
                ),
                "read",
                e,
            ) from e

        if not isinstance(data, dict):
            raise self._fail(
                MalformedManifest(
                    f"Manifest for {package_name} must contain a JSON object",
                    package_name,
                    path,
                ),
                "read",
            )

        return data

    def serialize(self, manifest: Manifest) -> str:
        return json.dumps(manifest, indent=self.indent, ensure_ascii=False) + "\n"

    def write(self, package_name: str, manifest: Manifest) -> Path:
        """
        Overwrite the manifest of a package. No backup is kept.

        Raises:
            WriteError: On any I/O failure
        """
        path = self.manifest_path(package_name)
        content = self.serialize(manifest)

        try:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
        except OSError as e:
            raise self._fail(
                WriteError(
                    f"Failed to write manifest for {package_name}: {e}",
                    package_name,
                    path,
                ),
                "write",
                e,
            ) from e

        return path

    def current_version(self, package_name: str) -> str:
        """
        Return the declared ``version`` of a package.

        Raises:
            MissingVersionField: If the manifest has no non-empty string version
        """
        manifest = self.read(package_name)
        version = manifest.get("version")

        if not isinstance(version, str) or not version.strip():
            raise self._fail(
                MissingVersionField(
                    f"Manifest for {package_name} has no version field",
                    package_name,
                    self.manifest_path(package_name),
                ),
                "current_version",
            )

        return version
