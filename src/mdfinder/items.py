"""List item views for the snippet, section and folder lists."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from rich.text import Text

from .models import Folder, FocusState, Section, Snippet
from .styles import Styles

NAME_MAX_LEN = 30
UNTITLED_SECTION = "Untitled Section"

_DAY = timedelta(days=1)
_WEEK = 7 * _DAY
_MONTH = 30 * _DAY
_YEAR = 12 * _MONTH

# (upper bound, format, unit); a None unit means the format has no count.
# Anything older than the last bound uses the last format.
_MAGNITUDES = [
    (timedelta(seconds=5), "just now", None),
    (timedelta(minutes=1), "moments ago", None),
    (timedelta(hours=1), "{n}m {when}", timedelta(minutes=1)),
    (timedelta(hours=2), "1h {when}", None),
    (_DAY, "{n}h {when}", timedelta(hours=1)),
    (2 * _DAY, "1d {when}", None),
    (_WEEK, "{n}d {when}", _DAY),
    (2 * _WEEK, "1w {when}", None),
    (_MONTH, "{n}w {when}", _WEEK),
    (2 * _MONTH, "1mo {when}", None),
    (_YEAR, "{n}mo {when}", _MONTH),
    (18 * _MONTH, "1y {when}", None),
    (2 * _YEAR, "2y {when}", None),
]


def humanize_time(then: datetime, now: Optional[datetime] = None) -> str:
    """Short relative time such as ``3d ago`` or ``just now``."""
    now = now or datetime.now(timezone.utc)
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)

    diff = now - then
    when = "ago"
    if diff < timedelta(0):
        diff = -diff
        when = "from now"

    for bound, fmt, unit in _MAGNITUDES:
        if diff < bound:
            break
    n = diff // unit if unit else 0
    return fmt.format(n=n, when=when)


def truncate(value: str, limit: int = NAME_MAX_LEN, tail: str = "...") -> str:
    if len(value) <= limit:
        return value
    return value[: max(limit - len(tail), 0)] + tail


class ListItem:
    """Common interface of every list row."""

    height = 1
    spacing = 0

    @property
    def label(self) -> str:
        """Text the list filter matches against."""
        raise NotImplementedError

    def render(self, selected: bool, focus: FocusState, styles: Styles) -> Text:
        raise NotImplementedError


class SnippetItem(ListItem):
    height = 2
    spacing = 1

    def __init__(self, snippet: Snippet):
        self.snippet = snippet

    @property
    def label(self) -> str:
        return self.snippet.name

    def render(self, selected: bool, focus: FocusState, styles: Styles) -> Text:
        title_style = styles.item(selected, focus)
        text = Text("  ")
        text.append(truncate(self.snippet.name), style=title_style)
        text.append("\n  ")
        text.append(f"{self.snippet.folder} • {humanize_time(self.snippet.date)}", style=styles.subtitle)
        return text


class SectionItem(ListItem):
    def __init__(self, section: Section):
        self.section = section

    @property
    def label(self) -> str:
        return self.section.title or UNTITLED_SECTION

    def render(self, selected: bool, focus: FocusState, styles: Styles) -> Text:
        marker = "→ " if selected else "  "
        return Text("  " + marker + self.label, style=styles.item(selected, focus))


class FolderItem(ListItem):
    def __init__(self, folder: Folder):
        self.folder = folder

    @property
    def label(self) -> str:
        return self.folder.name

    def render(self, selected: bool, focus: FocusState, styles: Styles) -> Text:
        marker = "→ " if selected else "  "
        return Text("  " + marker + self.folder.name, style=styles.item(selected, focus))
