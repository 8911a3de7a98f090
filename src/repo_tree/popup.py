"""State of the tag details overlay."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from repo_tree.formatters import build_details_text
from repo_tree.history import HistoryParser, parse_manifest_history
from repo_tree.tree import DisplayRow
from repo_tree.utils import line_count, split_image_reference

log = logging.getLogger(__name__)

LINE_STEP = 3
COLUMN_STEP = 10

ManifestFetcher = Callable[[str, str], Any]


class ScrollDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    LEFT = "left"
    RIGHT = "right"


class PopupController:
    """Overlay visibility, text content and its two scroll offsets."""

    def __init__(self) -> None:
        self.is_open = False
        self.content = ""
        self.v_scroll = 0
        self.h_scroll = 0

    def _set_content(self, content: str) -> None:
        self.content = content
        self.v_scroll = 0
        self.h_scroll = 0

    def max_v_scroll(self, viewport_lines: int) -> int:
        return max(0, line_count(self.content) - viewport_lines)

    def open(
        self,
        row: DisplayRow | None,
        fetch_fn: ManifestFetcher,
        parse_fn: HistoryParser = parse_manifest_history,
    ) -> bool:
        """Fetch the manifest behind a tag row and show its details.

        Returns False, leaving the state untouched, when the row is not a
        tag or when fetching or parsing fails.
        """
        if row is None or not row.openable:
            return False

        image, tag = split_image_reference(row.full_path)
        try:
            manifest = fetch_fn(image, tag)
            rows, full_text = parse_fn(manifest)
        except Exception:
            log.debug("Could not load details for %s:%s", image, tag, exc_info=True)
            return False

        self._set_content(build_details_text(rows, full_text))
        self.is_open = True
        return True

    def close(self) -> None:
        self.is_open = False
        self._set_content("")

    def toggle(self, row: DisplayRow | None, fetch_fn: ManifestFetcher) -> bool:
        """Enter key: close an open overlay, otherwise try to open one."""
        if self.is_open:
            self.close()
            return False
        return self.open(row, fetch_fn)

    def scroll(self, direction: ScrollDirection, viewport_lines: int) -> None:
        upper = self.max_v_scroll(viewport_lines)
        if direction == ScrollDirection.DOWN:
            self.v_scroll = min(self.v_scroll + LINE_STEP, upper)
        elif direction == ScrollDirection.UP:
            self.v_scroll = max(self.v_scroll - LINE_STEP, 0)
        elif direction == ScrollDirection.PAGE_DOWN:
            self.v_scroll = min(self.v_scroll + viewport_lines, upper)
        elif direction == ScrollDirection.PAGE_UP:
            self.v_scroll = max(self.v_scroll - viewport_lines, 0)
        elif direction == ScrollDirection.RIGHT:
            self.h_scroll += COLUMN_STEP
        elif direction == ScrollDirection.LEFT:
            self.h_scroll = max(self.h_scroll - COLUMN_STEP, 0)
        # content may have shrunk since the last scroll
        self.v_scroll = min(self.v_scroll, upper)

    def visible_lines(self, viewport_lines: int, width: int | None = None) -> list[str]:
        """Slice of the content shown through the current offsets."""
        lines = self.content.splitlines()[self.v_scroll : self.v_scroll + max(0, viewport_lines)]
        end = None if width is None else self.h_scroll + width
        return [line[self.h_scroll : end] for line in lines]
