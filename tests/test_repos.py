import json
from pathlib import Path

import pytest

from mdfinder.errors import RepoError
from mdfinder.storage.repos import RepoRegistry, clone_url_for, parse_github_url


class _FakeCompleted:
    def __init__(self, returncode):
        self.returncode = returncode


@pytest.fixture
def registry(tmp_path):
    return RepoRegistry(tmp_path / "repos")


@pytest.mark.parametrize(
    "url",
    [
        "user/snippets",
        "user/snippets.git",
        "https://github.com/user/snippets",
        "https://github.com/user/snippets.git",
        "git@github.com:user/snippets.git",
    ],
)
def test_parse_github_url_forms(url):
    assert parse_github_url(url) == ("user", "snippets")


@pytest.mark.parametrize("url", ["snippets", "a/b/c", "user/", "/snippets", ""])
def test_parse_github_url_rejects_bad_input(url):
    with pytest.raises(RepoError):
        parse_github_url(url)


def test_clone_url_for_short_form_uses_ssh():
    assert clone_url_for("user/snippets") == "git@github.com:user/snippets.git"
    assert clone_url_for("https://github.com/user/snippets.git") == "https://github.com/user/snippets.git"


def test_load_creates_empty_registry(registry):
    assert registry.load() == []
    assert json.loads(registry.path.read_text()) == {"repo_list": []}


def test_corrupt_registry_raises(registry):
    registry.repos_dir.mkdir(parents=True)
    registry.path.write_text("[oops")

    with pytest.raises(RepoError):
        registry.load()


def test_ensure_default_registers_once(registry):
    assert registry.ensure_default()
    assert not registry.ensure_default()

    assert [repo.name for repo in registry.load()] == ["local/repo"]
    assert registry.exists("local/repo")


def test_get_clones_and_registers(registry, monkeypatch):
    calls = []

    def fake_run(cmd):
        calls.append(cmd)
        return _FakeCompleted(0)

    monkeypatch.setattr("mdfinder.storage.repos.subprocess.run", fake_run)

    repo = registry.get("user/snippets")

    assert repo.name == "user/snippets"
    assert calls == [["git", "clone", "git@github.com:user/snippets.git", str(registry.repo_path("user/snippets"))]]
    assert [r.name for r in registry.load()] == ["user/snippets"]


def test_get_rejects_duplicate(registry, monkeypatch):
    monkeypatch.setattr("mdfinder.storage.repos.subprocess.run", lambda cmd: _FakeCompleted(0))
    registry.get("user/snippets")

    with pytest.raises(RepoError, match="already exists"):
        registry.get("https://github.com/user/snippets.git")


def test_failed_clone_is_not_registered(registry, monkeypatch):
    monkeypatch.setattr("mdfinder.storage.repos.subprocess.run", lambda cmd: _FakeCompleted(128))

    with pytest.raises(RepoError, match="128"):
        registry.get("user/snippets")

    assert registry.load() == []


def test_failed_clone_leaves_no_directory(registry, monkeypatch):
    def partial_clone(cmd):
        target = Path(cmd[-1])
        target.mkdir()
        (target / "partial").write_text("half")
        return _FakeCompleted(128)

    monkeypatch.setattr("mdfinder.storage.repos.subprocess.run", partial_clone)

    with pytest.raises(RepoError):
        registry.get("user/snippets")

    assert not registry.exists("user/snippets")
    assert registry.repo_path("user").is_dir()


def test_failed_clone_keeps_existing_directory(registry, monkeypatch):
    registry.repo_path("user/snippets").mkdir(parents=True)
    (registry.repo_path("user/snippets") / "notes.md").write_text("# mine")
    monkeypatch.setattr("mdfinder.storage.repos.subprocess.run", lambda cmd: _FakeCompleted(128))

    with pytest.raises(RepoError):
        registry.get("user/snippets")

    assert (registry.repo_path("user/snippets") / "notes.md").read_text() == "# mine"


def test_missing_git_is_reported(registry, monkeypatch):
    def no_git(cmd):
        raise FileNotFoundError("git")

    monkeypatch.setattr("mdfinder.storage.repos.subprocess.run", no_git)

    with pytest.raises(RepoError, match="git is not installed"):
        registry.get("user/snippets")
