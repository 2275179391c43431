"""Snippet repo registry (``repo-config.json``) and GitHub cloning."""

import json
import shutil
import subprocess
from pathlib import Path
from typing import List, Tuple

from pydantic import BaseModel, ValidationError

from ..config import DEFAULT_REPO_NAME
from ..errors import RepoError
from ..logger import get_logger

logger = get_logger("repos")

GITHUB_HTTPS_PREFIX = "https://github.com/"
GITHUB_SSH_PREFIX = "git@github.com:"
GIT_SUFFIX = ".git"


class Repo(BaseModel):
    name: str
    url: str = ""


def parse_github_url(repo_url: str) -> Tuple[str, str]:
    """Extract ``(user, repo)`` from an HTTPS, SSH or ``user/repo`` reference."""
    value = repo_url.strip()
    if value.endswith(GIT_SUFFIX):
        value = value[: -len(GIT_SUFFIX)]

    for prefix in (GITHUB_SSH_PREFIX, GITHUB_HTTPS_PREFIX):
        if value.startswith(prefix):
            value = value[len(prefix):]
            break

    parts = value.split("/")
    if len(parts) != 2 or not all(parts):
        raise RepoError(f"Invalid GitHub repository URL: {repo_url}")
    return parts[0], parts[1]


def clone_url_for(repo_url: str) -> str:
    """Full URLs are cloned as given, ``user/repo`` goes over SSH."""
    if repo_url.startswith((GITHUB_SSH_PREFIX, GITHUB_HTTPS_PREFIX)):
        return repo_url
    user, name = parse_github_url(repo_url)
    return f"{GITHUB_SSH_PREFIX}{user}/{name}{GIT_SUFFIX}"


class RepoRegistry:
    """Known repos under ``<home>/repos``."""

    def __init__(self, repos_dir: Path, config_file: str = "repo-config.json"):
        self.repos_dir = Path(repos_dir)
        self.path = self.repos_dir / config_file

    def load(self) -> List[Repo]:
        """Read the registry, creating an empty one when missing."""
        self.repos_dir.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.save([])
            return []

        try:
            with open(self.path) as f:
                data = json.load(f)
            return [Repo.model_validate(item) for item in data.get("repo_list") or []]
        except (OSError, json.JSONDecodeError, AttributeError, ValidationError) as e:
            raise RepoError(f"Unable to parse repo config {self.path}: {e}") from e

    def save(self, repos: List[Repo]) -> None:
        payload = {"repo_list": [repo.model_dump() for repo in repos]}
        try:
            self.path.write_text(json.dumps(payload, indent=2) + "\n")
        except OSError as e:
            raise RepoError(f"Unable to write repo config {self.path}: {e}") from e

    def repo_path(self, name: str) -> Path:
        return self.repos_dir / name

    def exists(self, name: str) -> bool:
        return self.repo_path(name).is_dir()

    def ensure_default(self) -> bool:
        """Register ``local/repo`` if missing. Returns True when newly added."""
        repos = self.load()
        if any(repo.name == DEFAULT_REPO_NAME for repo in repos):
            return False
        logger.info("Registering default local repo")
        self.repo_path(DEFAULT_REPO_NAME).mkdir(parents=True, exist_ok=True)
        self.save(repos + [Repo(name=DEFAULT_REPO_NAME)])
        return True

    def get(self, repo_url: str) -> Repo:
        """Clone a GitHub repo into ``<repos>/<user>/<repo>`` and register it."""
        user, name = parse_github_url(repo_url)
        repo_name = f"{user}/{name}"
        clone_url = clone_url_for(repo_url)

        repos = self.load()
        if any(repo.name == repo_name for repo in repos):
            raise RepoError(f"Repo {repo_name} already exists")

        target = self.repo_path(repo_name)
        existed = target.exists()
        target.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Cloning {clone_url} into {target}")
        try:
            result = subprocess.run(["git", "clone", clone_url, str(target)])
        except FileNotFoundError as e:
            raise RepoError("git is not installed") from e
        if result.returncode != 0:
            if not existed:
                shutil.rmtree(target, ignore_errors=True)
            raise RepoError(f"Failed to clone repository: git exited with {result.returncode}")

        repo = Repo(name=repo_name, url=clone_url)
        self.save(repos + [repo])
        return repo
