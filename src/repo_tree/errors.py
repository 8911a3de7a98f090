"""Exception types raised by repo-tree."""

from __future__ import annotations


class RepoTreeError(Exception):
    """Base class for repo-tree errors."""


class RegistryError(RepoTreeError):
    """A registry request failed or returned something unusable."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ManifestError(RepoTreeError):
    """A manifest document does not have the expected shape."""
