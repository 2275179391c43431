import pytest

from mdfinder.config import Config
from mdfinder.items import SectionItem
from mdfinder.models import AppState, FocusState, Pane, Section
from mdfinder.navigator import ListView
from mdfinder.styles import Styles
from mdfinder.tui import FinderApp, render_list, window

from conftest import write_snippet

BODY = """# First

```sh {copyable}
echo first
```

---

# Second

text
"""


@pytest.fixture
def snippets(repo, library):
    write_snippet(repo, "shell", "basics.md", BODY)
    write_snippet(repo, "shell", "more.md", "# More")
    return library.load()


@pytest.fixture
def copied(monkeypatch):
    values = []
    monkeypatch.setattr("mdfinder.tui.copy_to_clipboard", values.append)
    return values


def test_render_list_keeps_cursor_visible():
    view = ListView(items=[SectionItem(Section(title=f"S{i}")) for i in range(10)], selected=8)

    text = render_list(view, FocusState.FOCUSED, Styles.from_config(Config()), height=3)

    assert text.plain.splitlines() == ["    S6", "    S7", "  → S8"]


def test_window_slices_lines():
    assert window(["a", "b", "c", "d"], 1, 2) == "b\nc"


@pytest.mark.asyncio
async def test_keys_drive_navigator(library, snippets, copied):
    app = FinderApp(Config(), library, snippets)

    async with app.run_test() as pilot:
        assert app.navigator.pane is Pane.SECTION

        await pilot.press("j")
        assert app.navigator.selected_section().title == "Second"

        await pilot.press("k", "c")
        assert copied == ["echo first"]
        assert app.navigator.state is AppState.COPYING

        await pilot.press("n")
        assert app.navigator.state is AppState.NAVIGATING
        await pilot.press("n")
        assert app.navigator.pane is Pane.CONTENT


@pytest.mark.asyncio
async def test_quit_key_exits(library, snippets, copied):
    app = FinderApp(Config(), library, snippets)

    async with app.run_test() as pilot:
        await pilot.press("q")

    assert app.navigator.state is AppState.QUITTING


@pytest.mark.asyncio
async def test_target_hides_snippet_pane(library, snippets, copied):
    target = next(s for s in snippets if s.file == "more.md")
    app = FinderApp(Config(), library, snippets, target=target)

    async with app.run_test():
        assert app.navigator.hide_snippet_pane
        assert not app.query_one("#snippet").display
