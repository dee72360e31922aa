"""
Shared fixtures: a throwaway monorepo laid out the way the publish scripts
expect (``packages/<name>/package.json``).
"""

import json
from pathlib import Path

import pytest

from workspace_pins.cli_config import reset_config
from workspace_pins.error_handling import setup_error_handling

VERSIONS = {
    "store": "0.4.0",
    "debug": "1.2.3",
    "memory": "0.9.0",
    "agents": "2.0.0",
    "artifacts": "0.3.1",
    "devtools": "0.5.0",
    "cache": "1.1.0",
    "ai-sdk-tools": "3.0.0",
}

DEV_MANIFESTS = {
    "store": {"name": "@ai-sdk-tools/store", "version": VERSIONS["store"]},
    "debug": {"name": "@ai-sdk-tools/debug", "version": VERSIONS["debug"]},
    "cache": {"name": "@ai-sdk-tools/cache", "version": VERSIONS["cache"]},
    "memory": {
        "name": "@ai-sdk-tools/memory",
        "version": VERSIONS["memory"],
        "dependencies": {"@ai-sdk-tools/debug": "workspace:*"},
    },
    "agents": {
        "name": "@ai-sdk-tools/agents",
        "version": VERSIONS["agents"],
        "scripts": {"build": "tsup"},
        "dependencies": {
            "@ai-sdk-tools/debug": "workspace:*",
            "@ai-sdk-tools/memory": "workspace:*",
            "zod": "^3.23.8",
        },
    },
    "artifacts": {
        "name": "@ai-sdk-tools/artifacts",
        "version": VERSIONS["artifacts"],
        "peerDependencies": {"react": ">=18"},
        "devDependencies": {"@ai-sdk-tools/store": "workspace:*"},
    },
    "devtools": {
        "name": "@ai-sdk-tools/devtools",
        "version": VERSIONS["devtools"],
        "devDependencies": {
            "typescript": "^5.4.0",
            "@ai-sdk-tools/store": "workspace:*",
        },
    },
    "ai-sdk-tools": {
        "name": "ai-sdk-tools",
        "version": VERSIONS["ai-sdk-tools"],
        "description": "Outils pour l'écosystème AI SDK",
        "dependencies": {
            "@ai-sdk-tools/agents": "workspace:*",
            "@ai-sdk-tools/artifacts": "workspace:*",
            "@ai-sdk-tools/cache": "workspace:*",
            "@ai-sdk-tools/devtools": "workspace:*",
            "@ai-sdk-tools/memory": "workspace:*",
            "@ai-sdk-tools/store": "workspace:*",
        },
    },
}


def write_manifest(root: Path, package_name: str, data) -> Path:
    path = root / "packages" / package_name / "package.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def read_manifest(root: Path, package_name: str):
    path = root / "packages" / package_name / "package.json"
    return json.loads(path.read_text(encoding="utf-8"))


def snapshot(root: Path):
    """Raw text of every manifest under the workspace."""
    return {
        path.parent.name: path.read_text(encoding="utf-8")
        for path in sorted((root / "packages").glob("*/package.json"))
    }


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config discovery and env overrides away from the developer's machine."""
    for key in [
        "WORKSPACE_PINS_ROOT",
        "WORKSPACE_PINS_DRY_RUN",
        "WORKSPACE_PINS_BUFFER_WRITES",
        "WORKSPACE_PINS_LOG_LEVEL",
    ]:
        monkeypatch.delenv(key, raising=False)
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    reset_config()
    setup_error_handling()
    yield
    reset_config()


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for test files."""
    path = tmp_path / "files"
    path.mkdir()
    return path


@pytest.fixture
def workspace(tmp_path):
    """A monorepo root with every package of the dependency matrix in dev mode."""
    root = tmp_path / "repo"
    for package_name, data in DEV_MANIFESTS.items():
        write_manifest(root, package_name, data)
    return root
