"""Modal screens for the repo-tree TUI."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen

from repo_tree.popup import PopupController, ScrollDirection
from repo_tree.tui.widgets import DetailsView


class TagDetailsScreen(ModalScreen[None]):
    """Overlay with the history table and the raw manifest of one tag."""

    BINDINGS = [  # noqa: RUF012
        Binding("escape", "close", "Close"),
        Binding("enter", "close", "Close", show=False),
        Binding("down", "scroll_details('down')", "Scroll", show=False),
        Binding("up", "scroll_details('up')", "Scroll", show=False),
        Binding("pagedown", "scroll_details('page_down')", "Page", show=False),
        Binding("pageup", "scroll_details('page_up')", "Page", show=False),
        Binding("right", "scroll_details('right')", "Right", show=False),
        Binding("left", "scroll_details('left')", "Left", show=False),
    ]

    def __init__(self, popup: PopupController, reference: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.popup = popup
        self.reference = reference

    def compose(self) -> ComposeResult:
        with Vertical(id="details-container") as container:
            container.border_title = f"Tag Details  [dim]│[/dim]  {self.reference}"
            yield DetailsView(self.popup, id="details-view")

    def action_scroll_details(self, direction: str) -> None:
        view = self.query_one("#details-view", DetailsView)
        self.popup.scroll(ScrollDirection(direction), view.viewport_lines)
        view.refresh()

    def action_close(self) -> None:
        self.popup.close()
        self.dismiss()
