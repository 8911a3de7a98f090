"""Widgets for the repo-tree TUI."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.binding import Binding
from textual.events import Resize
from textual.widget import Widget

from repo_tree.formatters import style_for_depth
from repo_tree.navigation import NavigationController
from repo_tree.popup import PopupController
from repo_tree.tree import DisplayRow

SELECTED_STYLE = "bold italic on yellow"

USAGE = (
    "[bold]Usage[/bold]\n"
    "  [cyan]↑/↓[/cyan]        move          [cyan]PgUp/PgDn[/cyan]  page\n"
    "  [cyan]Enter[/cyan]      open details  [cyan]Esc[/cyan]        close details\n"
    "  [cyan]q / Ctrl+C[/cyan] quit"
)


class RegistryTree(Widget, can_focus=True):
    """Scrolling namespace > repository > tag list driven by a NavigationController."""

    BINDINGS = [  # noqa: RUF012
        Binding("down", "cursor_down", "Down", show=False),
        Binding("up", "cursor_up", "Up", show=False),
        Binding("pagedown", "page_down", "Page down", show=False),
        Binding("pageup", "page_up", "Page up", show=False),
        Binding("enter", "open_details", "Details"),
    ]

    def __init__(self, rows: list[DisplayRow], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.navigation = NavigationController(rows)

    @property
    def viewport_height(self) -> int:
        return max(1, self.size.height)

    def on_mount(self) -> None:
        self.border_title = "Docker Images Tree"

    def on_resize(self, event: Resize) -> None:
        self.navigation.ensure_visible(self.viewport_height)

    def render(self) -> Text:
        text = Text(no_wrap=True, overflow="ellipsis")
        if not self.navigation.rows:
            text.append("(no repositories)", style="dim")
            return text
        visible = self.navigation.visible_rows(self.viewport_height)
        for n, (index, row) in enumerate(visible):
            style = style_for_depth(row.depth)
            if index == self.navigation.selected_index:
                style = f"{style} {SELECTED_STYLE}"
            if n:
                text.append("\n")
            text.append(row.label, style=style)
        return text

    def action_cursor_down(self) -> None:
        self.navigation.move_next(self.viewport_height)
        self.refresh()

    def action_cursor_up(self) -> None:
        self.navigation.move_previous()
        self.refresh()

    def action_page_down(self) -> None:
        self.navigation.page_down(self.viewport_height)
        self.refresh()

    def action_page_up(self) -> None:
        self.navigation.page_up(self.viewport_height)
        self.refresh()

    async def action_open_details(self) -> None:
        # awaited here so no further keys reach the tree while the fetch runs
        await self.app.open_details(self.navigation.selected_row)


class DetailsView(Widget):
    """Window onto the overlay text at the popup's scroll offsets."""

    def __init__(self, popup: PopupController, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.popup = popup

    @property
    def viewport_lines(self) -> int:
        return max(1, self.size.height)

    def render(self) -> Text:
        lines = self.popup.visible_lines(self.viewport_lines, self.size.width or None)
        return Text("\n".join(lines), no_wrap=True, overflow="crop")
