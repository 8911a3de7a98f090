"""Shared fixtures: an in-memory registry and an isolated config environment."""

from __future__ import annotations

import pytest

import repo_tree.registry as registry_module
from data_factory import SAMPLE_REPOSITORIES, SAMPLE_TAGS, sample_manifest
from repo_tree.errors import RegistryError
from repo_tree.registry import RegistryConfig


class FakeRegistry:
    """Stands in for ``RegistryClient`` with canned catalog and manifests."""

    def __init__(
        self,
        repositories: list[str] | None = None,
        tags: dict[str, list[str]] | None = None,
        manifests: dict[tuple[str, str], object] | None = None,
        config: RegistryConfig | None = None,
    ) -> None:
        self.config = config or RegistryConfig(url="http://registry.test")
        self.repositories = list(SAMPLE_REPOSITORIES if repositories is None else repositories)
        self.tags = dict(SAMPLE_TAGS if tags is None else tags)
        self.manifests = manifests if manifests is not None else {("b/z", "2.0"): sample_manifest()}
        self.fetches: list[tuple[str, str]] = []
        self.closed = False

    def __enter__(self) -> FakeRegistry:
        return self

    def __exit__(self, *exc) -> None:
        self.closed = True

    def list_repositories(self) -> list[str]:
        return list(self.repositories)

    def list_tags(self, repository: str) -> list[str]:
        return list(self.tags.get(repository, []))

    def fetch_manifest(self, image: str, tag: str):
        self.fetches.append((image, tag))
        try:
            return self.manifests[(image, tag)]
        except KeyError:
            raise RegistryError(f"manifest {image}:{tag} not found", status_code=404) from None


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at an empty temp dir and clear REPO_TREE_* env vars."""
    config_path = tmp_path / "repo-tree.yaml"
    monkeypatch.setattr(registry_module, "CONFIG_FILE", config_path)
    for env_key in registry_module.ENV_VAR_MAP:
        monkeypatch.delenv(env_key, raising=False)
    monkeypatch.chdir(tmp_path)
    return config_path


@pytest.fixture
def fake_registry():
    return FakeRegistry()
