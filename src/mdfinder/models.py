"""Core data types: snippets, sections, code blocks and UI enums."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FOLDER = "folder"
DEFAULT_SNIPPET_NAME = "Example"
DEFAULT_LANGUAGE = "md"


class Snippet(BaseModel):
    """One snippet file tracked by the index."""

    model_config = ConfigDict(populate_by_name=True)

    folder: str = DEFAULT_FOLDER
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    name: str = Field(default=DEFAULT_SNIPPET_NAME, alias="title")
    file: str = f"{DEFAULT_SNIPPET_NAME}.{DEFAULT_LANGUAGE}"
    language: str = DEFAULT_LANGUAGE

    @property
    def path(self) -> str:
        """folder/file, unique across the index."""
        return f"{self.folder}/{self.file}"

    @property
    def display(self) -> str:
        return f"{self.folder}/{self.name}.{self.language}"

    @property
    def search_key(self) -> str:
        return f"{self.folder}/{self.name}"

    def to_record(self) -> dict:
        """JSON-ready mapping in index file field order."""
        return {
            "folder": self.folder,
            "date": self.date.isoformat(),
            "title": self.name,
            "file": self.file,
            "language": self.language,
        }

    def __str__(self) -> str:
        return self.display


def default_snippet() -> Snippet:
    return Snippet()


@dataclass
class CodeBlock:
    content: str
    language: str = ""
    meta: Dict[str, str] = field(default_factory=dict)

    @property
    def copyable(self) -> bool:
        return "copyable" in self.meta

    @property
    def title(self) -> str:
        return self.meta.get("title", "").strip()


@dataclass
class Section:
    """A ``---`` delimited slice of a snippet body."""

    folder: str = ""
    file: str = ""
    title: str = ""
    content: str = ""
    code_blocks: List[CodeBlock] = field(default_factory=list)

    def copyable_blocks(self) -> List[CodeBlock]:
        return [block for block in self.code_blocks if block.copyable]


@dataclass(frozen=True)
class Folder:
    name: str


def folders_of(snippets: List[Snippet]) -> List[str]:
    """Sorted distinct folder names, or the default folder when empty."""
    names = sorted({snippet.folder for snippet in snippets})
    return names or [DEFAULT_FOLDER]


class Pane(int, Enum):
    SNIPPET = 0
    SECTION = 1
    CONTENT = 2

    @classmethod
    def from_name(cls, name: str) -> "Pane":
        return {"snippet": cls.SNIPPET, "content": cls.CONTENT}.get(name, cls.SECTION)


class AppState(str, Enum):
    NAVIGATING = "navigating"
    COPYING = "copying"
    QUITTING = "quitting"
    EDITING = "editing"


class FocusState(str, Enum):
    FOCUSED = "focused"
    BLURRED = "blurred"
    COPIED = "copied"
