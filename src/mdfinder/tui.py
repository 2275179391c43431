"""Textual front end: three panes driven by the navigator."""

from pathlib import Path
from typing import List, Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from .config import Config
from .logger import get_logger
from .models import AppState, FocusState, Pane, Snippet
from .navigator import ListView, Navigator
from .render import ContentRenderer
from .storage.library import SnippetLibrary
from .styles import Styles
from .tools import copy_to_clipboard, launch_editor

logger = get_logger("tui")

GUTTER_WIDTH = 6

PANE_IDS = {
    Pane.SNIPPET: "snippet",
    Pane.SECTION: "section",
    Pane.CONTENT: "content",
}


def render_list(view: ListView, focus: FocusState, palette: Styles, height: int) -> Text:
    """Rows of a list pane, scrolled so the cursor row stays visible."""
    text = Text()
    if not view.items:
        text.append("  No items.", style=palette.subtitle)
        return text

    rows = view.items[0].height + view.items[0].spacing
    per_page = max((height + view.items[0].spacing) // rows, 1)
    start = max(0, view.selected - per_page + 1)

    for i, item in enumerate(view.items[start:start + per_page], start):
        if i > start:
            text.append("\n" * (1 + item.spacing))
        text.append_text(item.render(i == view.selected, focus, palette))
    return text


def window(lines: List[str], offset: int, height: int) -> str:
    return "\n".join(lines[offset:offset + max(height, 1)])


class FinderApp(App):
    """Snippet, section and content panes with a one-line help footer."""

    CSS = """
    Screen {
        layout: vertical;
    }
    #panes {
        height: 1fr;
    }
    .pane {
        height: 100%;
    }
    .bar {
        height: 1;
        margin-bottom: 1;
    }
    #content {
        width: 1fr;
    }
    #content-gutter {
        width: 6;
    }
    #content-text {
        width: 1fr;
    }
    #help {
        height: auto;
        padding: 0 2;
    }
    """

    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("ctrl+c", "quit_finder", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: Config,
        library: SnippetLibrary,
        snippets: List[Snippet],
        target: Optional[Snippet] = None,
    ):
        super().__init__()
        self.config = config
        self.palette = Styles.from_config(config)
        renderer = ContentRenderer(config, width=config.content_title_bar_width - GUTTER_WIDTH)
        self.navigator = Navigator(
            config,
            snippets,
            library=library,
            renderer=renderer,
            clipboard=copy_to_clipboard,
            editor=self._run_editor,
            scheduler=self._schedule,
            on_quit=self.exit,
            target=target,
        )

    def compose(self) -> ComposeResult:
        with Horizontal(id="panes"):
            for pane in (Pane.SNIPPET, Pane.SECTION):
                name = PANE_IDS[pane]
                with Vertical(id=name, classes="pane"):
                    yield Static(id=f"{name}-bar", classes="bar")
                    yield Static(id=f"{name}-list")
            with Vertical(id="content", classes="pane"):
                yield Static(id="content-bar", classes="bar")
                with Horizontal():
                    yield Static(id="content-gutter")
                    yield Static(id="content-text")
        yield Static(id="help")

    def on_mount(self) -> None:
        self.query_one("#panes").styles.margin = (self.config.base_margin_top, 0, 0, 0)
        self.query_one("#snippet").styles.width = self.config.snippet_title_bar_width + self.config.snippet_list_margin_left
        self.query_one("#section").styles.width = self.config.section_title_bar_width
        self.navigator.resize(self.size.height)
        self.refresh_view()

    def on_resize(self, event: events.Resize) -> None:
        self.navigator.resize(event.size.height)
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        key = event.character if event.is_printable and event.character else event.key
        if self.navigator.handle_key(key):
            event.stop()
            event.prevent_default()
        self.refresh_view()

    def action_quit_finder(self) -> None:
        self.navigator.quit()

    def _schedule(self, delay: float, callback):
        def fire() -> None:
            callback()
            self.refresh_view()

        return self.set_timer(delay, fire)

    def _run_editor(self, path: Path) -> int:
        with self.suspend():
            return launch_editor(path)

    def refresh_view(self) -> None:
        nav = self.navigator
        if nav.state is AppState.QUITTING or not self.query("#help"):
            return

        focus = nav.focus_states()
        height = nav.pane_height
        self.query_one("#snippet").display = not nav.hide_snippet_pane

        widths = {
            Pane.SNIPPET: self.config.snippet_title_bar_width,
            Pane.SECTION: self.config.section_title_bar_width,
            Pane.CONTENT: self.config.content_title_bar_width,
        }
        for pane, name in PANE_IDS.items():
            title = f" {nav.title_for(pane)} ".ljust(widths[pane])
            self.query_one(f"#{name}-bar", Static).update(Text(title, style=self.palette.bar(focus[pane])))

        for pane in (Pane.SNIPPET, Pane.SECTION):
            listing = render_list(nav.list_view(pane), focus[pane], self.palette, height)
            self.query_one(f"#{PANE_IDS[pane]}-list", Static).update(listing)

        content_lines = nav.content().split("\n")
        gutter_lines = nav.line_numbers().split("\n")
        offset = nav.content_offset
        self.query_one("#content-gutter", Static).update(
            Text(window(gutter_lines, offset, height), style=self.palette.line_number)
        )
        self.query_one("#content-text", Static).update(Text.from_ansi(window(content_lines, offset, height)))

        entries = nav.help_entries()
        help_text = Text("  ")
        for i, (keys, description) in enumerate(entries):
            if i:
                help_text.append(" • ", style=self.palette.subtitle)
            help_text.append(keys, style=self.palette.unselected_item)
            help_text.append(f" {description}", style=self.palette.subtitle)
        self.query_one("#help", Static).update(help_text)
