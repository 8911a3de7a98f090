"""repo-tree interactive terminal UI."""

from __future__ import annotations

import asyncio
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Static

from repo_tree.popup import PopupController
from repo_tree.registry import RegistryClient
from repo_tree.tree import DisplayRow
from repo_tree.tui.screens import TagDetailsScreen
from repo_tree.tui.widgets import USAGE, RegistryTree

CSS_PATH = Path(__file__).parent / "app.tcss"


class RepoTreeApp(App):
    """Interactive TUI for browsing a container registry."""

    TITLE = "repo-tree"
    SUB_TITLE = "Docker Registry Tree Viewer"
    CSS_PATH = CSS_PATH

    BINDINGS = [  # noqa: RUF012
        ("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, client: RegistryClient, rows: list[DisplayRow], **kwargs) -> None:
        super().__init__(**kwargs)
        self.client = client
        self.rows = rows
        self.popup = PopupController()

    def compose(self) -> ComposeResult:
        yield Static(
            f"[bold]repo-tree[/bold]  [dim]│[/dim]  {self.client.config.url}\n\n{USAGE}",
            id="banner",
        )
        yield RegistryTree(self.rows, id="tree")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#tree", RegistryTree).focus()

    async def open_details(self, row: DisplayRow | None) -> None:
        """Fetch and show the details overlay for a tag row.

        The blocking fetch runs in a worker thread; this coroutine is the
        one place a request is in flight, so cancelling it abandons the
        open and leaves the overlay closed.
        """
        if row is None or not row.openable:
            return
        opened = await asyncio.to_thread(self.popup.open, row, self.client.fetch_manifest)
        if not opened:
            self.notify(f"Could not load manifest for {row.full_path}", severity="error")
            return
        self.push_screen(TagDetailsScreen(self.popup, row.full_path))
