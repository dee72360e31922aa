"""
Dependency edges and the built-in workspace dependency matrix.

Each edge says where a sibling dependency lives while developing
(``source_field``) and where it has to live in the published manifest
(``target_field``).
"""

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

SCOPE = "@ai-sdk-tools"


@dataclass(frozen=True)
class DependencyEdge:
    """A single intra-workspace dependency of one package."""

    dependency_name: str
    version_from: str
    source_field: str = "dependencies"
    target_field: str = "dependencies"

    @property
    def moves_section(self) -> bool:
        return self.source_field != self.target_field

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DependencyMatrix = Mapping[str, Tuple[DependencyEdge, ...]]


def _scoped(package_name: str) -> str:
    return f"{SCOPE}/{package_name}"


def _runtime(*package_names: str) -> Tuple[DependencyEdge, ...]:
    """Edges for sibling packages already declared as runtime dependencies."""
    return tuple(DependencyEdge(_scoped(name), name) for name in package_names)


def _dev_to_runtime(package_name: str) -> DependencyEdge:
    return DependencyEdge(
        _scoped(package_name),
        package_name,
        source_field="devDependencies",
        target_field="dependencies",
    )


def build_matrix(
    entries: Mapping[str, Tuple[DependencyEdge, ...]],
) -> DependencyMatrix:
    """Freeze a mapping of package name to edges, keeping definition order."""
    return MappingProxyType({name: tuple(edges) for name, edges in entries.items()})


DEPENDENCY_MATRIX: DependencyMatrix = build_matrix(
    {
        "artifacts": (_dev_to_runtime("store"),),
        "devtools": (_dev_to_runtime("store"),),
        "agents": _runtime("debug", "memory"),
        "memory": _runtime("debug"),
        "ai-sdk-tools": _runtime(
            "agents",
            "artifacts",
            "cache",
            "devtools",
            "memory",
            "store",
        ),
    }
)


def matrix_to_dict(matrix: DependencyMatrix) -> Dict[str, List[Dict[str, Any]]]:
    """Plain JSON-serializable view of a matrix."""
    return {name: [edge.to_dict() for edge in edges] for name, edges in matrix.items()}
