import pytest

from mdfinder.config import Config
from mdfinder.models import AppState, FocusState, Pane, Snippet
from mdfinder.navigator import COPY_REVERT_DELAY, Navigator

from conftest import write_snippet


GUIDE = """## Install

```bash {copyable}
one
```

```bash
two
```

```bash {copyable}
three
```

---

## Usage

```sh {copyable}
mdf
```

---

## Config

Nothing to copy.
"""


class _PlainRenderer:
    def __init__(self):
        self.calls = 0

    def render(self, section):
        self.calls += 1
        return section.content


class _Harness:
    def __init__(self, navigator, copied, timers, quits, edits, renderer):
        self.nav = navigator
        self.copied = copied
        self.timers = timers
        self.quits = quits
        self.edits = edits
        self.renderer = renderer

    def press(self, *keys):
        return [self.nav.handle_key(key) for key in keys]


@pytest.fixture
def snippets(repo, library):
    write_snippet(repo, "a", "guide.md", GUIDE)
    write_snippet(repo, "a", "notes.md", "# Notes\n\nplain")
    write_snippet(repo, "b", "other.md", "# Other")
    return library.load()


def _make(library, snippets, config=None, target=None, clipboard=None, editor=None):
    copied, timers, quits, edits = [], [], [], []
    renderer = _PlainRenderer()

    def default_editor(path):
        edits.append(path)
        return 0

    navigator = Navigator(
        config or Config(),
        snippets,
        library=library,
        renderer=renderer,
        clipboard=clipboard or copied.append,
        editor=editor or default_editor,
        scheduler=lambda delay, callback: timers.append((delay, callback)),
        on_quit=lambda: quits.append(True),
        target=target,
    )
    navigator.resize(30)
    return _Harness(navigator, copied, timers, quits, edits, renderer)


def test_starts_in_section_pane_with_one_focus(library, snippets):
    h = _make(library, snippets)

    assert h.nav.pane is Pane.SECTION
    assert h.nav.state is AppState.NAVIGATING
    states = h.nav.focus_states()
    assert list(states.values()).count(FocusState.FOCUSED) == 1
    assert states[Pane.SECTION] is FocusState.FOCUSED


def test_default_pane_from_config(library, snippets):
    h = _make(library, snippets, Config(default_pane="content"))

    assert h.nav.pane is Pane.CONTENT


def test_pane_cycling(library, snippets):
    h = _make(library, snippets)

    h.press("n")
    assert h.nav.pane is Pane.CONTENT
    h.press("tab")
    assert h.nav.pane is Pane.SNIPPET
    h.press("right")
    assert h.nav.pane is Pane.SECTION
    h.press("N")
    assert h.nav.pane is Pane.SNIPPET
    h.press("shift+tab")
    assert h.nav.pane is Pane.CONTENT


def test_hidden_snippet_pane_is_skipped_both_ways(library, snippets):
    h = _make(library, snippets)
    h.press("s")

    seen = set()
    for _ in range(4):
        h.press("n")
        seen.add(h.nav.pane)
    for _ in range(4):
        h.press("N")
        seen.add(h.nav.pane)

    assert seen == {Pane.SECTION, Pane.CONTENT}


def test_toggle_moves_focus_off_hidden_pane(library, snippets):
    h = _make(library, snippets, Config(default_pane="snippet"))

    h.press("p")

    assert h.nav.hide_snippet_pane
    assert h.nav.pane is Pane.SECTION


def test_copy_keys_pick_copyable_blocks_by_position(library, snippets):
    h = _make(library, snippets, Config(copy_content_keys=["c", "d", "e"]))

    h.press("c")
    assert h.copied == ["one"]
    assert h.nav.state is AppState.COPYING

    h.press("x")
    h.press("d")
    assert h.copied == ["one", "three"]

    h.press("x")
    h.press("e")
    assert h.copied == ["one", "three"]
    assert h.nav.state is AppState.NAVIGATING


def test_key_while_copying_only_resets_state(library, snippets):
    h = _make(library, snippets)
    h.press("c")

    assert h.press("n") == [True]

    assert h.nav.state is AppState.NAVIGATING
    assert h.nav.pane is Pane.SECTION


def test_copy_revert_timer(library, snippets):
    h = _make(library, snippets)
    h.press("c")

    assert h.nav.focus_states()[Pane.SECTION] is FocusState.COPIED
    (delay, callback), = h.timers
    assert delay == COPY_REVERT_DELAY

    callback()
    assert h.nav.state is AppState.NAVIGATING

    h.press("c")
    h.press("j")
    h.timers[-1][1]()
    assert h.nav.state is AppState.NAVIGATING


def test_snippet_pane_copies_whole_file(library, snippets):
    h = _make(library, snippets, Config(default_pane="snippet"))

    h.press("f")

    assert h.copied == [GUIDE]


def test_exit_after_copy(library, snippets):
    h = _make(library, snippets, Config(exit_after_copy=True))

    h.press("c")

    assert h.copied == ["one"]
    assert h.nav.state is AppState.QUITTING
    assert h.quits == [True]


def test_capital_copy_key_copies_and_quits(library, snippets):
    h = _make(library, snippets)

    h.press("D")

    assert h.copied == ["three"]
    assert h.nav.state is AppState.QUITTING


def test_clipboard_failure_returns_to_navigating(library, snippets):
    def broken(_text):
        raise RuntimeError("no clipboard")

    h = _make(library, snippets, clipboard=broken)
    h.press("c")

    assert h.nav.state is AppState.NAVIGATING
    assert h.timers == []


def test_quit_is_terminal(library, snippets):
    h = _make(library, snippets)

    h.press("q")

    assert h.nav.state is AppState.QUITTING
    assert h.quits == [True]
    assert h.press("n") == [False]


def test_move_snippet_edges_are_noops(library, snippets):
    h = _make(library, snippets)
    before = [s.path for s in h.nav.visible_snippets()]

    h.press("K")
    assert [s.path for s in h.nav.visible_snippets()] == before
    assert h.nav.selected_snippet().path == "a/guide.md"

    h.press("J")
    assert [s.path for s in h.nav.visible_snippets()] == ["a/notes.md", "a/guide.md"]
    assert h.nav.selected_snippet().path == "a/guide.md"

    h.press("J")
    assert [s.path for s in h.nav.visible_snippets()] == ["a/notes.md", "a/guide.md"]
    assert [s.path for s in h.nav.all_snippets()] == ["a/notes.md", "a/guide.md", "b/other.md"]


def test_help_and_resize_adjust_height(library, snippets):
    h = _make(library, snippets)
    assert h.nav.height == 30 - 4 - 1

    h.press("?")
    assert h.nav.show_help
    assert h.nav.pane_height == h.nav.height - 1

    h.press("?")
    assert h.nav.pane_height == h.nav.height


def test_cursor_moves_through_sections(library, snippets):
    h = _make(library, snippets)

    h.press("j", "j", "j")
    assert h.nav.selected_section().title == "Config"

    h.press("home")
    assert h.nav.selected_section().title == "Install"


def test_snippet_cursor_changes_sections(library, snippets):
    h = _make(library, snippets, Config(default_pane="snippet"))

    h.press("down")

    assert h.nav.selected_snippet().path == "a/notes.md"
    assert [s.title for s in h.nav.sections()] == ["Notes"]


def test_content_is_memoized(library, snippets):
    h = _make(library, snippets)

    h.nav.content()
    h.nav.content()
    assert h.renderer.calls == 1

    h.press("j")
    h.nav.content()
    assert h.renderer.calls == 2


def test_edit_reparses_and_restores_section(library, snippets, repo):
    def rewrite(path):
        path.write_text("# A\n\n---\n\n# B changed\n\n---\n\n# C")
        return 0

    h = _make(library, snippets, editor=rewrite)
    h.press("j")
    h.nav.content()

    h.press("i")

    assert h.nav.state is AppState.NAVIGATING
    assert [s.title for s in h.nav.sections()] == ["A", "B changed", "C"]
    assert h.nav.selected_section().title == "B changed"
    assert "B changed" in h.nav.content()


def test_edit_resets_index_when_out_of_range(library, snippets):
    def shrink(path):
        path.write_text("# Only")
        return 0

    h = _make(library, snippets, editor=shrink)
    h.press("j", "j")

    h.press("i")

    assert h.nav.selected_section().title == "Only"


def test_filter_narrows_and_guards_actions(library, snippets):
    h = _make(library, snippets)

    h.press("/", "u", "s", "a", "i")

    assert h.nav.filtering
    assert h.edits == []
    assert h.nav.filter_for(Pane.SECTION).query == "usai"

    h.press("backspace", "enter")
    view = h.nav.list_view(Pane.SECTION)
    assert [item.label for item in view.items] == ["Usage"]
    assert h.nav.selected_section().title == "Usage"
    assert "/usa" in h.nav.title_for(Pane.SECTION)

    h.press("escape")
    assert len(h.nav.list_view(Pane.SECTION).items) == 3


def test_escape_while_typing_dismisses_filter(library, snippets):
    h = _make(library, snippets)

    h.press("/", "z", "escape", "c")

    assert not h.nav.filtering
    assert h.copied == ["one"]


def test_target_opens_two_pane_mode(library, snippets):
    target = next(s for s in snippets if s.path == "b/other.md")

    h = _make(library, snippets, target=target)

    assert h.nav.folder == "b"
    assert h.nav.selected_snippet().path == "b/other.md"
    assert h.nav.hide_snippet_pane


def test_always_show_snippet_pane(library, snippets):
    target = snippets[0]

    h = _make(library, snippets, Config(always_show_snippet_pane=True), target=target)

    assert not h.nav.hide_snippet_pane


def test_initial_folder_from_config(library, snippets):
    h = _make(library, snippets, Config(folder_name="b"))

    assert h.nav.folder == "b"


def test_unreadable_snippet_shows_hint(library, snippets):
    ghost = Snippet(folder="a", file="ghost.md", name="ghost", language="md")
    h = _make(library, [ghost], Config(default_pane="snippet"))

    assert "ghost.md" in h.nav.sections()[0].content

    h.press("c")
    assert h.copied == []
    assert h.nav.state is AppState.NAVIGATING


def test_binary_snippet_shows_hint(library, repo):
    (repo / "a").mkdir()
    (repo / "a" / "img.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")
    h = _make(library, library.load(), Config(default_pane="snippet"))

    assert "img.png" in h.nav.sections()[0].content
    assert "img.png" in h.nav.content()

    assert h.press("c") == [True]
    assert h.copied == []
    assert h.nav.state is AppState.NAVIGATING


def test_empty_index_uses_default_snippet(library):
    h = _make(library, [])

    assert h.nav.selected_snippet().path == "folder/Example.md"
    assert h.nav.folders() == ["folder"]
