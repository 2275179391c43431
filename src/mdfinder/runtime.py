"""Startup wiring shared by every CLI entry point.

Resolves the home directory, loads the configuration, makes sure the default
local repo exists and reconciles the active repo's snippet index. Tests can
build a context against a temporary home by passing it explicitly.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .config import DEFAULT_REPO_NAME, Config, load_config, save_config
from .home import Home
from .logger import get_logger
from .models import Snippet, folders_of
from .storage.library import SnippetLibrary, seed_default_repo
from .storage.repos import RepoRegistry

logger = get_logger("runtime")


@dataclass
class RuntimeContext:
    """Everything a command needs about the active repo."""

    home: Home
    config: Config
    registry: RepoRegistry
    library: SnippetLibrary
    snippets: List[Snippet] = field(default_factory=list)

    def folders(self) -> List[str]:
        return folders_of(self.snippets)

    def save_config(self) -> None:
        save_config(self.config, self.home)

    def select_repo(self, name: str) -> None:
        self.config.repo_name = name
        self.config.folder_name = ""
        self.save_config()

    def select_folder(self, name: str) -> None:
        self.config.folder_name = name
        self.save_config()


def _validate_repo_name(config: Config, registry: RepoRegistry) -> None:
    if not registry.exists(config.repo_name):
        logger.warning(f"Repo {config.repo_name} not found, using {DEFAULT_REPO_NAME}")
        config.repo_name = DEFAULT_REPO_NAME


def _init_folder_name(context: RuntimeContext) -> None:
    """Point folder_name at an existing folder, persisting any change."""
    folders = context.folders()
    if context.config.folder_name.strip() in folders:
        return
    context.config.folder_name = folders[0]
    context.save_config()


def bootstrap_runtime_context(home: Optional[Home] = None) -> RuntimeContext:
    home = home or Home.current()
    config = load_config(home)

    registry = RepoRegistry(home.repos_dir, config.repo_config_file)
    if registry.ensure_default():
        seed_default_repo(registry.repo_path(DEFAULT_REPO_NAME))

    _validate_repo_name(config, registry)

    library = SnippetLibrary(registry.repo_path(config.repo_name), config.snippet_config_file)
    context = RuntimeContext(
        home=home,
        config=config,
        registry=registry,
        library=library,
        snippets=library.load(),
    )
    _init_folder_name(context)
    logger.debug(f"Loaded {len(context.snippets)} snippets from {config.repo_name}")
    return context
