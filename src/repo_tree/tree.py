"""Flatten a registry catalog into indented tree rows."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "

NAMESPACE = 1
REPOSITORY = 2
TAG = 3

# namespace -> repository -> tags
Catalog = Mapping[str, Mapping[str, Sequence[str]]]


@dataclass(frozen=True)
class DisplayRow:
    depth: int
    label: str
    full_path: str

    @property
    def openable(self) -> bool:
        """Only tag rows point at a fetchable ``image:tag`` pair."""
        return self.depth == TAG


def split_repository(path: str) -> tuple[str, str]:
    """Split ``"team/app/api"`` into ``("team", "app/api")``.

    A path without a slash is its own namespace with an empty repository.
    """
    namespace, _, repository = path.partition("/")
    return namespace, repository


def group_repositories(paths: Iterable[str]) -> dict[str, list[str]]:
    """Group repository paths by namespace, keeping first-seen order."""
    grouped: dict[str, list[str]] = {}
    for path in paths:
        namespace, repository = split_repository(path)
        grouped.setdefault(namespace, []).append(repository)
    return grouped


def join_path(*parts: str) -> str:
    return "/".join(part for part in parts if part)


def _branch(is_last: bool) -> str:
    return LAST_BRANCH if is_last else BRANCH


def _indent(is_last: bool) -> str:
    return SPACE if is_last else PIPE


def flatten_catalog(catalog: Catalog) -> list[DisplayRow]:
    """Walk the catalog depth-first and emit one row per node.

    Each row's label carries its tree-drawing prefix; the continuation
    column of every ancestor is blank below a last sibling.
    """
    rows: list[DisplayRow] = []
    namespaces = list(catalog.items())
    for i, (namespace, repositories) in enumerate(namespaces):
        last_namespace = i == len(namespaces) - 1
        rows.append(DisplayRow(NAMESPACE, _branch(last_namespace) + namespace, namespace))

        repo_indent = _indent(last_namespace)
        repo_items = list(repositories.items())
        for j, (repository, tags) in enumerate(repo_items):
            last_repository = j == len(repo_items) - 1
            repo_path = join_path(namespace, repository)
            rows.append(
                DisplayRow(
                    REPOSITORY,
                    repo_indent + _branch(last_repository) + (repository or "."),
                    repo_path,
                )
            )

            tag_indent = repo_indent + _indent(last_repository)
            for k, tag in enumerate(tags):
                last_tag = k == len(tags) - 1
                rows.append(
                    DisplayRow(TAG, tag_indent + _branch(last_tag) + tag, f"{repo_path}/{tag}")
                )
    return rows
