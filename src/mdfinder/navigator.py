"""Pane navigation state machine behind the interactive finder.

The navigator owns every piece of UI state (focused pane, application state,
selections, filters, caches) and reacts to normalized key names. It never
touches the terminal: the clipboard, the editor, the copy revert timer and
the quit signal are injected callables, so the whole machine can be driven
from tests one key at a time.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .config import (
    MOVE_SNIPPET_DOWN_KEYS,
    MOVE_SNIPPET_UP_KEYS,
    QUIT_KEYS,
    SEARCH_KEYS,
    TOGGLE_HELP_KEYS,
    Config,
)
from .items import UNTITLED_SECTION, ListItem, SectionItem, SnippetItem
from .locator import filter_items
from .logger import get_logger
from .models import AppState, FocusState, Pane, Section, Snippet, default_snippet
from .parser import parse_sections
from .render import ContentRenderer, line_numbers
from .storage.library import SnippetLibrary

logger = get_logger("navigator")

COPY_REVERT_DELAY = 1.0
CHROME_HEIGHT = 4
PAGE_STEP = 10
_FAR = 1 << 30

CURSOR_MOVES = {
    "j": 1,
    "down": 1,
    "k": -1,
    "up": -1,
    "pagedown": PAGE_STEP,
    "pageup": -PAGE_STEP,
    "home": -_FAR,
    "end": _FAR,
}

Scheduler = Callable[[float, Callable[[], None]], object]


@dataclass
class SectionList:
    sections: List[Section]
    index: int = 0

    @property
    def selected(self) -> Section:
        return self.sections[self.index]


@dataclass
class PaneFilter:
    query: str = ""
    typing: bool = False

    @property
    def applied(self) -> bool:
        return bool(self.query)


@dataclass
class ListView:
    """What a list pane shows: items in display order and the cursor row."""

    items: List[ListItem] = field(default_factory=list)
    selected: int = 0


class Navigator:
    def __init__(
        self,
        config: Config,
        snippets: List[Snippet],
        *,
        library: SnippetLibrary,
        renderer: ContentRenderer,
        clipboard: Callable[[str], None],
        editor: Callable[[object], int],
        scheduler: Scheduler,
        on_quit: Callable[[], None],
        target: Optional[Snippet] = None,
    ):
        self.config = config
        self.library = library
        self.renderer = renderer
        self._clipboard = clipboard
        self._editor = editor
        self._scheduler = scheduler
        self._on_quit = on_quit

        self.state = AppState.NAVIGATING
        self.pane = Pane.from_name(config.default_pane)
        self.show_help = False
        self.hide_snippet_pane = False
        self.height = 0
        self.content_offset = 0

        self._folders: Dict[str, List[Snippet]] = {}
        for snippet in snippets or [default_snippet()]:
            self._folders.setdefault(snippet.folder, []).append(snippet)
        self._cursors: Dict[str, int] = {name: 0 for name in self._folders}
        self._sections: Dict[str, SectionList] = {}
        self._rendered: Dict[str, Dict[int, str]] = {}
        self._filters = {Pane.SNIPPET: PaneFilter(), Pane.SECTION: PaneFilter()}

        self.folder = self._initial_folder(target)
        if target is not None:
            folder_list = self._folders.get(target.folder, [])
            for i, snippet in enumerate(folder_list):
                if snippet.path == target.path:
                    self._cursors[target.folder] = i
                    self.hide_snippet_pane = not config.always_show_snippet_pane
                    break
        if self.hide_snippet_pane and self.pane is Pane.SNIPPET:
            self.pane = Pane.SECTION

    def _initial_folder(self, target: Optional[Snippet]) -> str:
        if target is not None and target.folder in self._folders:
            return target.folder
        if self.config.folder_name in self._folders:
            return self.config.folder_name
        return self.folders()[0]

    # Views

    def folders(self) -> List[str]:
        return sorted(self._folders)

    def visible_snippets(self) -> List[Snippet]:
        return self._folders.get(self.folder, [])

    def all_snippets(self) -> List[Snippet]:
        """Every snippet in index order: folders sorted, list order within."""
        return [snippet for name in self.folders() for snippet in self._folders[name]]

    def selected_snippet(self) -> Optional[Snippet]:
        snippets = self.visible_snippets()
        if not snippets:
            return None
        return snippets[self._cursors[self.folder]]

    def _section_list(self, snippet: Snippet) -> SectionList:
        cached = self._sections.get(snippet.path)
        if cached is not None:
            return cached

        try:
            body = self.library.read(snippet)
            sections = parse_sections(body, snippet.folder, snippet.file)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Unable to read snippet {snippet.path}: {e}")
            hint = f"Unable to read `{snippet.path}`. Edit the snippet to create it."
            sections = [Section(folder=snippet.folder, file=snippet.file, content=hint)]

        section_list = SectionList(sections)
        self._sections[snippet.path] = section_list
        return section_list

    def sections(self) -> List[Section]:
        snippet = self.selected_snippet()
        if snippet is None:
            return []
        return self._section_list(snippet).sections

    def selected_section(self) -> Optional[Section]:
        snippet = self.selected_snippet()
        if snippet is None:
            return None
        return self._section_list(snippet).selected

    def content(self) -> str:
        """Rendered text of the selected section, memoized per snippet."""
        snippet = self.selected_snippet()
        if snippet is None:
            return ""
        section_list = self._section_list(snippet)
        rendered = self._rendered.setdefault(snippet.path, {})
        if section_list.index not in rendered:
            rendered[section_list.index] = self.renderer.render(section_list.selected)
        return rendered[section_list.index]

    def content_line_count(self) -> int:
        return self.content().count("\n") + 1

    def line_numbers(self) -> str:
        return line_numbers(self.content_line_count())

    @property
    def pane_height(self) -> int:
        return self.height - 1 if self.show_help else self.height

    def focus_states(self) -> Dict[Pane, FocusState]:
        """Exactly one pane is focused (or showing the copied banner)."""
        states = {}
        for pane in Pane:
            if pane is not self.pane:
                states[pane] = FocusState.BLURRED
            elif self.state is AppState.COPYING:
                states[pane] = FocusState.COPIED
            else:
                states[pane] = FocusState.FOCUSED
        return states

    def filter_for(self, pane: Pane) -> Optional[PaneFilter]:
        return self._filters.get(pane)

    @property
    def filtering(self) -> bool:
        return self._typing_filter() is not None

    def title_for(self, pane: Pane) -> str:
        if pane is Pane.SNIPPET:
            title = self.folder
        elif pane is Pane.SECTION:
            snippet = self.selected_snippet()
            title = snippet.name if snippet else ""
        else:
            section = self.selected_section()
            title = section.title if section and section.title else UNTITLED_SECTION

        pane_filter = self._filters.get(pane)
        if pane_filter is not None and (pane_filter.typing or pane_filter.applied):
            title = f"{title} /{pane_filter.query}"
        return title

    def _labels(self, pane: Pane) -> List[str]:
        if pane is Pane.SNIPPET:
            return [snippet.name for snippet in self.visible_snippets()]
        return [SectionItem(section).label for section in self.sections()]

    def _visible_indexes(self, pane: Pane) -> List[int]:
        labels = self._labels(pane)
        pane_filter = self._filters[pane]
        if not pane_filter.applied:
            return list(range(len(labels)))
        return filter_items(pane_filter.query, labels)

    def _cursor(self, pane: Pane) -> int:
        if pane is Pane.SNIPPET:
            return self._cursors.get(self.folder, 0)
        snippet = self.selected_snippet()
        return self._section_list(snippet).index if snippet else 0

    def _set_cursor(self, pane: Pane, index: int) -> None:
        if pane is Pane.SNIPPET:
            if self._cursors.get(self.folder) != index:
                self.content_offset = 0
            self._cursors[self.folder] = index
            self._filters[Pane.SECTION] = PaneFilter()
            return
        snippet = self.selected_snippet()
        if snippet is None:
            return
        section_list = self._section_list(snippet)
        if section_list.index != index:
            self.content_offset = 0
        section_list.index = index

    def list_view(self, pane: Pane) -> ListView:
        """Items of a list pane after filtering, with the cursor row."""
        if pane is Pane.SNIPPET:
            source = [SnippetItem(snippet) for snippet in self.visible_snippets()]
        elif pane is Pane.SECTION:
            source = [SectionItem(section) for section in self.sections()]
        else:
            return ListView()

        indexes = self._visible_indexes(pane)
        cursor = self._cursor(pane)
        selected = indexes.index(cursor) if cursor in indexes else 0
        return ListView(items=[source[i] for i in indexes], selected=selected)

    def help_entries(self) -> List[Tuple[str, str]]:
        c = self.config
        short = [
            ("/".join(c.next_pane_keys[:1] + c.prev_pane_keys[:1]), "pane"),
            ("j/k", "move"),
            ("/".join(c.copy_content_keys[:2]), "copy"),
            ("/".join(c.edit_snippet_keys[:1]), "edit"),
            ("?", "more" if not self.show_help else "less"),
            ("q", "quit"),
        ]
        if not self.show_help:
            return short
        return short[:-2] + [
            ("/".join(c.copy_exit_keys[:2]), "copy & exit"),
            ("/".join(c.toggle_snippet_pane_keys), "toggle snippet pane"),
            ("/".join(MOVE_SNIPPET_DOWN_KEYS + MOVE_SNIPPET_UP_KEYS), "reorder"),
            ("/", "filter"),
            ("esc", "clear filter"),
        ] + short[-2:]

    # Input

    def handle_key(self, key: str) -> bool:
        """Apply one key press. Returns False when the key was not used."""
        if self.state is AppState.QUITTING:
            return False

        pane_filter = self._typing_filter()
        if pane_filter is not None:
            return self._handle_filter_key(pane_filter, key)

        if self.state is AppState.COPYING:
            self.state = AppState.NAVIGATING
            return True

        c = self.config
        if key in c.next_pane_keys:
            self.next_pane()
        elif key in c.prev_pane_keys:
            self.prev_pane()
        elif key in QUIT_KEYS:
            self.quit()
        elif key in MOVE_SNIPPET_DOWN_KEYS:
            self.move_snippet(1)
        elif key in MOVE_SNIPPET_UP_KEYS:
            self.move_snippet(-1)
        elif key in TOGGLE_HELP_KEYS:
            self.toggle_help()
        elif key in c.copy_content_keys:
            self.copy(key)
        elif key in c.copy_exit_keys:
            self.copy(key, exit_after=True)
        elif key in c.edit_snippet_keys:
            self.edit()
        elif key in c.toggle_snippet_pane_keys:
            self.toggle_snippet_pane()
        elif key in SEARCH_KEYS:
            return self.start_filter()
        elif key == "escape":
            return self.clear_filter()
        else:
            return self._move(key)
        return True

    def resize(self, terminal_height: int) -> None:
        self.height = max(terminal_height - CHROME_HEIGHT - self.config.base_margin_top, 1)

    # Actions

    def next_pane(self) -> None:
        self.pane = Pane((self.pane + 1) % len(Pane))
        if self.hide_snippet_pane and self.pane is Pane.SNIPPET:
            self.pane = Pane.SECTION

    def prev_pane(self) -> None:
        self.pane = Pane((self.pane - 1) % len(Pane))
        if self.hide_snippet_pane and self.pane is Pane.SNIPPET:
            self.pane = Pane.CONTENT

    def quit(self) -> None:
        self.state = AppState.QUITTING
        self._on_quit()

    def move_snippet(self, delta: int) -> None:
        """Swap the selected snippet with its neighbour; edges are no-ops."""
        if self._filters[Pane.SNIPPET].applied:
            return
        snippets = self.visible_snippets()
        current = self._cursors.get(self.folder, 0)
        target = current + delta
        if not snippets or not 0 <= target < len(snippets):
            return
        snippets[current], snippets[target] = snippets[target], snippets[current]
        self._cursors[self.folder] = target

    def toggle_help(self) -> None:
        self.show_help = not self.show_help

    def toggle_snippet_pane(self) -> None:
        self.hide_snippet_pane = not self.hide_snippet_pane
        if self.hide_snippet_pane and self.pane is Pane.SNIPPET:
            self.pane = Pane.SECTION

    def _content_to_copy(self, key: str) -> Optional[str]:
        if self.pane is Pane.SNIPPET:
            snippet = self.selected_snippet()
            if snippet is None:
                return None
            try:
                return self.library.read(snippet)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Unable to read snippet {snippet.path}: {e}")
                return None

        pressed = key.lower()
        key_index = next(
            (i for i, copy_key in enumerate(self.config.copy_content_keys) if copy_key.lower() == pressed),
            -1,
        )
        section = self.selected_section()
        if key_index < 0 or section is None:
            return None
        blocks = section.copyable_blocks()
        if key_index >= len(blocks):
            return None
        return blocks[key_index].content

    def _write_clipboard(self, text: str) -> bool:
        try:
            self._clipboard(text)
        except Exception as e:
            logger.error(f"Clipboard write failed: {e}")
            return False
        return True

    def copy(self, key: str, exit_after: bool = False) -> None:
        content = self._content_to_copy(key)

        if exit_after or self.config.exit_after_copy:
            if content is not None:
                self._write_clipboard(content)
            self.quit()
            return

        if content is None or not self._write_clipboard(content):
            self.state = AppState.NAVIGATING
            return

        self.state = AppState.COPYING
        self._scheduler(COPY_REVERT_DELAY, self._revert_copy)

    def _revert_copy(self) -> None:
        if self.state is AppState.COPYING:
            self.state = AppState.NAVIGATING

    def edit(self) -> None:
        """Open the selected snippet in the editor, then re-parse it."""
        snippet = self.selected_snippet()
        if snippet is None or self.state is AppState.EDITING or self.filtering:
            return

        cached = self._sections.get(snippet.path)
        previous_index = cached.index if cached else 0

        self.state = AppState.EDITING
        try:
            self._editor(self.library.file_path(snippet))
        except Exception as e:
            logger.error(f"Editing {snippet.path} failed: {e}")
        finally:
            self.state = AppState.NAVIGATING

        self._sections.pop(snippet.path, None)
        self._rendered.pop(snippet.path, None)
        fresh = self._section_list(snippet)
        if 0 <= previous_index < len(fresh.sections):
            fresh.index = previous_index
        self.content_offset = 0

    # Filtering

    def _typing_filter(self) -> Optional[PaneFilter]:
        for pane_filter in self._filters.values():
            if pane_filter.typing:
                return pane_filter
        return None

    def start_filter(self) -> bool:
        pane_filter = self._filters.get(self.pane)
        if pane_filter is None:
            return False
        pane_filter.query = ""
        pane_filter.typing = True
        return True

    def clear_filter(self) -> bool:
        pane_filter = self._filters.get(self.pane)
        if pane_filter is None or not pane_filter.applied:
            return False
        pane_filter.query = ""
        return True

    def _handle_filter_key(self, pane_filter: PaneFilter, key: str) -> bool:
        if key == "escape":
            pane_filter.query = ""
            pane_filter.typing = False
        elif key == "enter":
            pane_filter.typing = False
        elif key == "backspace":
            pane_filter.query = pane_filter.query[:-1]
        elif key in ("up", "down"):
            return self._move(key)
        elif len(key) == 1 and key.isprintable():
            pane_filter.query += key
        else:
            return True
        self._snap_cursor()
        return True

    def _snap_cursor(self) -> None:
        """Keep the cursor on a visible row after the filter changes."""
        indexes = self._visible_indexes(self.pane)
        if indexes and self._cursor(self.pane) not in indexes:
            self._set_cursor(self.pane, indexes[0])

    # Cursor

    def _move(self, key: str) -> bool:
        delta = CURSOR_MOVES.get(key)
        if delta is None:
            return False

        if self.pane is Pane.CONTENT:
            last = max(self.content_line_count() - 1, 0)
            self.content_offset = min(max(self.content_offset + delta, 0), last)
            return True

        indexes = self._visible_indexes(self.pane)
        if not indexes:
            return True
        cursor = self._cursor(self.pane)
        position = indexes.index(cursor) if cursor in indexes else 0
        position = min(max(position + delta, 0), len(indexes) - 1)
        self._set_cursor(self.pane, indexes[position])
        return True
