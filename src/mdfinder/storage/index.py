"""Snippet index persistence and reconciliation against the folder tree."""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple

from pydantic import ValidationError

from ..logger import get_logger
from ..models import Snippet

logger = get_logger("index")

INDEX_KEY = "snippet_list"


def scan_folders(root: Path) -> List[Tuple[str, str]]:
    """List ``(folder, file)`` pairs exactly two levels below ``root``.

    Hidden entries, loose files at the root and deeper nesting are ignored.
    Raises OSError when ``root`` itself cannot be listed.
    """
    found = []
    for folder in sorted(root.iterdir(), key=lambda p: p.name):
        if folder.name.startswith(".") or not folder.is_dir():
            continue
        try:
            entries = sorted(folder.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning(f"Could not scan {folder}: {e}")
            continue
        for entry in entries:
            if entry.name.startswith(".") or entry.is_dir():
                continue
            found.append((folder.name, entry.name))
    return found


def reconcile(known: List[Snippet], root: Path) -> Tuple[List[Snippet], bool]:
    """Bring an index in line with the files under ``root``.

    Unknown files are appended, then entries whose file is gone are dropped.
    Returns the new list and whether anything changed.
    """
    try:
        scanned = scan_folders(root)
    except OSError as e:
        logger.error(f"Could not scan snippet repo {root}: {e}")
        return list(known), False

    updated = list(known)
    paths = {snippet.path for snippet in updated}
    changed = False

    for folder, file in scanned:
        path = f"{folder}/{file}"
        if path in paths:
            continue
        stem, dot, ext = file.rpartition(".")
        if not dot or not stem:
            stem, ext = file, ""
        updated.append(Snippet(
            folder=folder,
            file=file,
            name=stem,
            language=ext,
            date=datetime.now(timezone.utc),
        ))
        paths.add(path)
        changed = True
        logger.debug(f"Indexed new snippet {path}")

    survivors = [snippet for snippet in updated if (root / snippet.folder / snippet.file).is_file()]
    if len(survivors) != len(updated):
        logger.debug(f"Pruned {len(updated) - len(survivors)} missing snippets")
        changed = True

    return survivors, changed


class SnippetIndex:
    """The ``snippet-config.json`` file of one repo."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[Snippet]:
        """Read the index. Missing file is created empty; corrupt data resets it."""
        if not self.path.exists():
            logger.info(f"Creating empty snippet index at {self.path}")
            self.save([])
            return []

        try:
            with open(self.path) as f:
                data = json.load(f)
            records = data.get(INDEX_KEY) or []
            return [Snippet.model_validate(record) for record in records]
        except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValidationError) as e:
            logger.warning(f"Snippet index {self.path} is unreadable, starting empty: {e}")
            return []

    def save(self, snippets: List[Snippet]) -> None:
        """Replace the index file in one step."""
        payload = json.dumps({INDEX_KEY: [s.to_record() for s in snippets]}, indent=2, ensure_ascii=False) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".snippets-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(payload)
                os.replace(tmp, self.path)
            except OSError:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            logger.error(f"Could not save snippet index {self.path}: {e}")

    def reconcile(self, root: Path) -> List[Snippet]:
        """Load, reconcile against ``root`` and persist only when changed."""
        snippets, changed = reconcile(self.load(), root)
        if changed:
            self.save(snippets)
        return snippets
