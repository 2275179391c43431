import os
import tempfile

# Keep log files and config out of the real home before mdfinder is imported.
os.environ.setdefault("MDF_HOME", tempfile.mkdtemp(prefix="mdf-tests-"))

import pytest

from mdfinder.config import Config
from mdfinder.home import Home
from mdfinder.storage.library import SnippetLibrary


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("MDF_") and name != "MDF_HOME":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("mdfinder.config.load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture
def home(tmp_path):
    return Home(tmp_path / "home")


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def repo(tmp_path):
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def library(repo):
    return SnippetLibrary(repo)


def write_snippet(root, folder, file, body=""):
    path = root / folder / file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    return path
