import pytest
import yaml

from taskdock.env import EnvResolver


@pytest.fixture
def write_task_file(tmp_path):
    """Write a task file (dict or raw text) and return its path."""
    def _write(data, name=".taskdock.yaml", directory=None):
        directory = directory or tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        if isinstance(data, str):
            path.write_text(data)
        else:
            path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path
    return _write


@pytest.fixture
def make_resolver():
    """Build a resolver from explicit dotenv and host mappings."""
    def _make(dotenv=None, environ=None):
        return EnvResolver(dotenv or {}, environ=environ or {}, dotenv_file=".env")
    return _make


@pytest.fixture
def resolver(make_resolver):
    return make_resolver()
