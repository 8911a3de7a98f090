"""Registry connection, configuration and catalog loading."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx
import yaml

from repo_tree import __version__
from repo_tree.errors import RegistryError
from repo_tree.tree import group_repositories, join_path
from repo_tree.utils import normalize_registry_url

log = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".repo-tree.yaml"

DEFAULT_REGISTRY_URL = "http://igloo.airgap.registry"

ENV_VAR_MAP: dict[str, str] = {
    "REPO_TREE_REGISTRY": "registry",
    "REPO_TREE_TIMEOUT": "timeout",
}

# schema1 first: only it carries the v1Compatibility history
MANIFEST_ACCEPT = ", ".join(
    [
        "application/vnd.docker.distribution.manifest.v1+prettyjws",
        "application/vnd.docker.distribution.manifest.v1+json",
        "application/vnd.docker.distribution.manifest.v2+json;q=0.5",
        "application/vnd.oci.image.manifest.v1+json;q=0.5",
    ]
)


@dataclass(frozen=True)
class RegistryConfig:
    """Resolved registry connection settings."""

    url: str = DEFAULT_REGISTRY_URL
    timeout: float | None = None

    @property
    def api_url(self) -> str:
        return f"{normalize_registry_url(self.url)}/v2/"


def load_config_file() -> dict[str, Any]:
    """Load ~/.repo-tree.yaml if it exists."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ValueError(f"Config file {CONFIG_FILE} contains invalid YAML:\n  {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {CONFIG_FILE} must be a YAML mapping, got {type(data).__name__}"
        )
    return data


def _resolve_placeholders(value: str) -> str:
    """Expand ``${VAR_NAME}`` tokens in *value* using the environment."""

    def _replacer(match: re.Match[str]) -> str:
        var = match.group(1)
        env_val = os.environ.get(var)
        if env_val is None:
            raise ValueError(f"Environment variable ${{{var}}} referenced in config but not set")
        return env_val

    return re.sub(r"\$\{(\w+)\}", _replacer, value)


def _parse_timeout(value: Any, source: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid timeout {value!r} in {source}") from None
    return timeout if timeout > 0 else None


def resolve_registry_config(
    registry_url: str | None = None,
    timeout: float | None = None,
) -> RegistryConfig:
    """Resolve registry settings.

    Priority: CLI flags > env vars > ~/.repo-tree.yaml > built-in default.
    """
    settings: dict[str, Any] = {}

    for key, value in load_config_file().items():
        if key in ("registry", "timeout"):
            settings[key] = _resolve_placeholders(value) if isinstance(value, str) else value

    for env_key, key in ENV_VAR_MAP.items():
        value = os.environ.get(env_key)
        if value:
            settings[key] = value

    if registry_url:
        settings["registry"] = registry_url
    if timeout is not None:
        settings["timeout"] = timeout

    return RegistryConfig(
        url=normalize_registry_url(str(settings.get("registry") or DEFAULT_REGISTRY_URL)),
        timeout=_parse_timeout(settings.get("timeout"), "registry settings"),
    )


class RegistryClient:
    """Read-only client for the Docker Registry HTTP API v2.

    Listing calls degrade to an empty list on any failure; manifest
    fetches raise ``RegistryError`` so the caller can decide what to show.
    """

    def __init__(self, config: RegistryConfig, transport: httpx.BaseTransport | None = None):
        self.config = config
        self._http = httpx.Client(
            base_url=config.api_url,
            timeout=config.timeout,
            follow_redirects=True,
            transport=transport,
            headers={"User-Agent": f"repo-tree/{__version__}"},
        )

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def _get_json(self, path: str, **kwargs: Any) -> tuple[Any, httpx.Response]:
        try:
            response = self._http.get(path, **kwargs)
        except httpx.HTTPError as exc:
            raise RegistryError(f"Request to {path} failed: {exc}", url=path) from exc
        if response.status_code != 200:
            raise RegistryError(
                f"Registry returned HTTP {response.status_code} for {response.url}",
                url=str(response.url),
                status_code=response.status_code,
            )
        try:
            return response.json(), response
        except ValueError as exc:
            raise RegistryError(
                f"Registry returned invalid JSON for {response.url}", url=str(response.url)
            ) from exc

    def _string_list(self, data: Any, key: str) -> list[str]:
        """The string entries of ``data[key]``; any other shape is a RegistryError."""
        if not isinstance(data, dict):
            raise RegistryError(f"Registry response is not a JSON object (expected '{key}')")
        values = data.get(key)
        if values is None:
            return []
        if not isinstance(values, list):
            raise RegistryError(f"Registry field '{key}' is not a list: {values!r}")
        return [v for v in values if isinstance(v, str)]

    def list_repositories(self) -> list[str]:
        """All repository paths in catalog order, following pagination links."""
        repositories: list[str] = []
        path: str | None = "_catalog"
        try:
            while path:
                data, response = self._get_json(path)
                repositories.extend(self._string_list(data, "repositories"))
                next_link = response.links.get("next", {}).get("url")
                path = next_link.lstrip("/").removeprefix("v2/") if next_link else None
        except RegistryError as exc:
            log.warning("Could not list repositories from %s: %s", self.config.api_url, exc)
            return []
        return repositories

    def list_tags(self, repository: str) -> list[str]:
        try:
            data, _ = self._get_json(f"{repository}/tags/list")
            return self._string_list(data, "tags")
        except RegistryError as exc:
            log.warning("Could not list tags for %s: %s", repository, exc)
            return []

    def fetch_manifest(self, image: str, tag: str) -> Any:
        """Return the decoded manifest document for ``image:tag``."""
        data, _ = self._get_json(
            f"{image}/manifests/{quote(tag, safe='')}",
            headers={"Accept": MANIFEST_ACCEPT},
        )
        return data


def load_catalog(client: RegistryClient) -> dict[str, dict[str, list[str]]]:
    """Return ``{namespace: {repository: [tag, ...]}}`` in registry order."""
    catalog: dict[str, dict[str, list[str]]] = {}
    for namespace, repositories in group_repositories(client.list_repositories()).items():
        catalog[namespace] = {
            repository: client.list_tags(join_path(namespace, repository))
            for repository in repositories
        }
    return catalog
