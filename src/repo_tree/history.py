"""Parse the layer history of a registry manifest into display rows."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Union

from repo_tree.errors import ManifestError

log = logging.getLogger(__name__)

ID_WIDTH = 8


@dataclass(frozen=True)
class CompatibilityRow:
    """One build step summarised from a ``v1Compatibility`` history entry."""

    id: str
    parent: str
    os: str
    created: str
    cmd: str
    config: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class Parsed:
    row: CompatibilityRow


@dataclass(frozen=True)
class Skipped:
    reason: str


EntryOutcome = Union[Parsed, Skipped]

HistoryParser = Callable[[Any], tuple[list[CompatibilityRow], str]]


def _string_field(doc: dict[str, Any], key: str) -> str:
    value = doc.get(key)
    return value if isinstance(value, str) else ""


def _container_cmd(doc: dict[str, Any]) -> str:
    container_config = doc.get("container_config")
    if not isinstance(container_config, dict):
        return ""
    cmd = container_config.get("Cmd")
    if not isinstance(cmd, list):
        return ""
    return "\n".join(part for part in cmd if isinstance(part, str))


def parse_history_entry(entry: Any) -> EntryOutcome:
    """Parse a single ``history`` entry.

    Never raises: anything that cannot be turned into a row comes back as
    ``Skipped`` with a short reason.
    """
    if not isinstance(entry, dict):
        return Skipped("entry is not an object")
    raw = entry.get("v1Compatibility")
    if not isinstance(raw, str):
        return Skipped("missing v1Compatibility")
    try:
        doc = json.loads(raw)
    except ValueError as exc:
        return Skipped(f"invalid v1Compatibility JSON: {exc}")
    if not isinstance(doc, dict):
        return Skipped("v1Compatibility is not an object")

    return Parsed(
        CompatibilityRow(
            id=_string_field(doc, "id")[:ID_WIDTH],
            parent=_string_field(doc, "parent")[:ID_WIDTH],
            os=_string_field(doc, "os"),
            created=_string_field(doc, "created"),
            cmd=_container_cmd(doc),
            config=json.dumps(doc["config"], separators=(",", ":"), ensure_ascii=False)
            if "config" in doc
            else "",
        )
    )


def collect_rows(outcomes: list[EntryOutcome]) -> list[CompatibilityRow]:
    """Keep the ``Parsed`` rows, in order."""
    rows: list[CompatibilityRow] = []
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, Parsed):
            rows.append(outcome.row)
        else:
            log.debug("Skipping history entry %d: %s", index, outcome.reason)
    return rows


def parse_manifest_history(manifest: Any) -> tuple[list[CompatibilityRow], str]:
    """Return the compatibility rows and the pretty-printed manifest.

    A manifest without a ``history`` list yields no rows; the full text is
    produced regardless of how many entries were skipped.
    """
    if not isinstance(manifest, dict):
        raise ManifestError(f"Manifest must be a JSON object, got {type(manifest).__name__}")

    history = manifest.get("history")
    entries = history if isinstance(history, list) else []
    rows = collect_rows([parse_history_entry(entry) for entry in entries])
    full_text = json.dumps(manifest, indent=2, ensure_ascii=False)
    return rows, full_text
