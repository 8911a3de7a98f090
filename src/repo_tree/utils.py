"""Small string helpers shared across modules."""

from __future__ import annotations


def line_count(text: str) -> int:
    """Number of lines in *text*; a trailing newline does not start a new one."""
    return len(text.splitlines())


def split_image_reference(full_path: str) -> tuple[str, str]:
    """Split ``"team/app/1.0"`` at the last slash into ``("team/app", "1.0")``."""
    image, sep, tag = full_path.rpartition("/")
    if not sep:
        raise ValueError(f"Not an image/tag path: {full_path!r}")
    return image, tag


def normalize_registry_url(url: str) -> str:
    """Strip trailing slashes and default to http:// when no scheme is given."""
    url = url.strip().rstrip("/")
    if "://" not in url:
        url = f"http://{url}"
    return url
