"""Selection and scrolling over the flattened tree rows."""

from __future__ import annotations

from collections.abc import Sequence

from repo_tree.tree import DisplayRow


class NavigationController:
    """Track the selected row and the first visible row.

    The viewport height ``h`` is passed to each call because it follows the
    terminal size. After every operation the selected row lies inside
    ``[scroll_offset, scroll_offset + h)``. All operations are no-ops when
    there are no rows.
    """

    def __init__(self, rows: Sequence[DisplayRow]) -> None:
        self.rows: tuple[DisplayRow, ...] = tuple(rows)
        self.selected_index = 0
        self.scroll_offset = 0

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def last_index(self) -> int:
        return len(self.rows) - 1

    @property
    def selected_row(self) -> DisplayRow | None:
        if not self.rows:
            return None
        return self.rows[self.selected_index]

    def visible_rows(self, height: int) -> list[tuple[int, DisplayRow]]:
        """Return ``(index, row)`` pairs for the rows inside the window."""
        height = max(1, height)
        end = min(self.scroll_offset + height, len(self.rows))
        return [(i, self.rows[i]) for i in range(self.scroll_offset, end)]

    def move_next(self, height: int) -> None:
        height = max(1, height)
        if self.selected_index >= self.last_index:
            return
        self.selected_index += 1
        if self.selected_index >= self.scroll_offset + height:
            self.scroll_offset += 1

    def move_previous(self) -> None:
        if not self.rows or self.selected_index == 0:
            return
        self.selected_index -= 1
        if self.selected_index < self.scroll_offset:
            self.scroll_offset = max(0, self.scroll_offset - 1)

    def page_down(self, height: int) -> None:
        if not self.rows:
            return
        height = max(1, height)
        self.selected_index = min(self.selected_index + height, self.last_index)
        # new selection becomes the bottom-most visible row
        self.scroll_offset = max(0, self.selected_index - (height - 1))

    def page_up(self, height: int) -> None:
        if not self.rows:
            return
        height = max(1, height)
        self.selected_index = max(self.selected_index - height, 0)
        self.scroll_offset = self.selected_index

    def ensure_visible(self, height: int) -> None:
        """Pull the window back over the selection after a resize."""
        if not self.rows:
            return
        height = max(1, height)
        if self.selected_index < self.scroll_offset:
            self.scroll_offset = self.selected_index
        elif self.selected_index >= self.scroll_offset + height:
            self.scroll_offset = self.selected_index - height + 1
        # don't leave blank space at the bottom when the list could fill it
        self.scroll_offset = min(self.scroll_offset, max(0, len(self.rows) - height))
