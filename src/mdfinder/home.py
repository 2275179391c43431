"""Home directory layout for mdfinder storage and configuration."""

import os
from pathlib import Path
from typing import Optional


class Home:
    """Manages the paths mdfinder reads and writes.

    The home directory is taken from the MDF_HOME environment variable (a
    leading ``~`` is expanded), defaulting to ``~/.mdf``. When the user home
    cannot be resolved, ``$XDG_DATA_HOME/mdf`` is used instead.
    """

    def __init__(self, root: Optional[Path] = None):
        """Initialize the home from an explicit root or the environment.

        Args:
            root: Home directory. If None, resolved from MDF_HOME.
        """
        self._root = Path(root) if root is not None else self._resolve_root()
        self._ensure_directories()

    @staticmethod
    def _resolve_root() -> Path:
        configured = os.getenv("MDF_HOME", "").strip()
        if configured:
            return Path(configured).expanduser()

        try:
            return Path.home() / ".mdf"
        except RuntimeError:
            xdg = os.getenv("XDG_DATA_HOME", "").strip()
            return Path(xdg or ".") / "mdf"

    def _ensure_directories(self) -> None:
        """Create home directories if they don't exist."""
        self.repos_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_file(self) -> Path:
        """Path to the YAML configuration file."""
        return self._root / "config.yaml"

    @property
    def repos_dir(self) -> Path:
        """Directory holding every snippet repo and the repo registry."""
        return self._root / "repos"

    @property
    def logs_dir(self) -> Path:
        return self._root / "logs"

    @property
    def log_file(self) -> Path:
        """Path to the main mdfinder log file."""
        return self.logs_dir / "mdf.log"

    @classmethod
    def current(cls) -> "Home":
        """Get the home for the current environment."""
        return cls()

    def __str__(self) -> str:
        return f"Home({self._root})"

    def __repr__(self) -> str:
        return f"Home(root={self._root!s})"
