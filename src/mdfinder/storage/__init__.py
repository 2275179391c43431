"""On-disk snippet storage: the JSON index, snippet files and repos."""

from .index import SnippetIndex, reconcile, scan_folders
from .library import SnippetLibrary
from .repos import Repo, RepoRegistry, parse_github_url

__all__ = [
    "SnippetIndex",
    "SnippetLibrary",
    "Repo",
    "RepoRegistry",
    "parse_github_url",
    "reconcile",
    "scan_folders",
]
