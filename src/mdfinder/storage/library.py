"""Snippet files of the active repo: reading, saving and first-run seeding."""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple

from ..errors import SnippetNameError
from ..logger import get_logger
from ..models import (
    DEFAULT_FOLDER,
    DEFAULT_LANGUAGE,
    DEFAULT_SNIPPET_NAME,
    Snippet,
    default_snippet,
)
from .index import SnippetIndex

logger = get_logger("library")

DEFAULT_SNIPPET_CONTENT = """## Quick Start

* n/N - next/prev pane
* j/k - cursor down/up
* c/d - copy code block
* i - edit snippet
* s - toggle snippet pane
* use "---" to separate sections
* each section needs a title

```bash {copyable}
echo "Markdown finder rocks"
```

```bash {title="Custom Title"}
echo "Titled, but not copyable"
```

---

## GitHub Repository

Get repo from GitHub by SSH:

```bash {copyable}
mdf get repo user/snippets
```

HTTPS URL is also supported:

```bash {copyable}
mdf get repo https://github.com/user/snippets.git
```

Switch repo:

```bash {copyable}
mdf set repo
```

---

## More Commands

Switch folder:

```bash {copyable}
mdf set folder
```

Fuzzy find snippet:

```bash {copyable}
mdf examp
```

List folders:

```bash {copyable}
mdf list folder
```

Save a snippet from stdin:

```bash {copyable}
cat notes.md | mdf save folder/notes.md
```
"""


def parse_name(value: str) -> Tuple[str, str, str]:
    """Split ``folder/name.ext`` into its parts, defaulting what is missing."""
    value = value.strip()
    parts = value.split("/") if value else []
    if len(parts) > 2:
        raise SnippetNameError(f"Snippet names are folder/name.ext, got: {value}")

    folder = DEFAULT_FOLDER
    remaining = ""
    if len(parts) == 2:
        folder = parts[0].strip() or DEFAULT_FOLDER
        remaining = parts[1]
    elif parts:
        remaining = parts[0]

    name, _, language = remaining.strip().partition(".")
    return folder, name or DEFAULT_SNIPPET_NAME, language or DEFAULT_LANGUAGE


def seed_default_repo(root: Path) -> None:
    """Create the default folder and example snippet if they are missing."""
    snippet = default_snippet()
    path = root / snippet.folder / snippet.file
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        logger.info(f"Seeding example snippet at {path}")
        path.write_text(DEFAULT_SNIPPET_CONTENT, encoding="utf-8")


class SnippetLibrary:
    """Snippet files and index of a single repo directory."""

    def __init__(self, root: Path, index_file: str = "snippet-config.json"):
        self.root = Path(root)
        self.index = SnippetIndex(self.root / index_file)

    def file_path(self, snippet: Snippet) -> Path:
        return self.root / snippet.folder / snippet.file

    def read(self, snippet: Snippet) -> str:
        """Full text of a snippet. Raises OSError or UnicodeDecodeError when unreadable."""
        return self.file_path(snippet).read_text(encoding="utf-8")

    def load(self) -> List[Snippet]:
        """Reconciled snippet list; the default snippet when nothing exists."""
        snippets = self.index.reconcile(self.root)
        return snippets or [default_snippet()]

    def flush(self, snippets: List[Snippet]) -> None:
        self.index.save(snippets)

    def save(self, content: str, name: str, snippets: List[Snippet]) -> Tuple[Snippet, List[Snippet]]:
        """Write ``content`` as a new snippet and put it first in the index."""
        folder, stem, language = parse_name(name)
        snippet = Snippet(
            folder=folder,
            name=stem,
            file=f"{stem}.{language}",
            language=language,
            date=datetime.now(timezone.utc),
        )
        path = self.file_path(snippet)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Saved snippet {snippet.path}")

        updated = [snippet] + [s for s in snippets if s.path != snippet.path]
        self.flush(updated)
        return snippet, updated
