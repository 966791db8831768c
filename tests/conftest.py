import pytest

from swapcache.config import hierarchy
from swapcache.errors.exceptions import MediumError


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class DictMedium:
    """Durable medium stand-in backed by a plain dict."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def read_raw(self, namespaced_key):
        return self.data.get(namespaced_key)

    def write_raw(self, namespaced_key, raw):
        self.data[namespaced_key] = raw

    def delete_raw(self, namespaced_key):
        self.data.pop(namespaced_key, None)

    def delete_prefix(self, prefix):
        keys = [k for k in self.data if k.startswith(prefix)]
        for k in keys:
            del self.data[k]
        return len(keys)

    def count_prefix(self, prefix):
        return sum(1 for k in self.data if k.startswith(prefix))


class FailingMedium:
    """Durable medium whose every operation raises."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or MediumError("disk unavailable", operation="read")
        self.calls = 0

    def _fail(self, *args):
        self.calls += 1
        raise self.error

    read_raw = _fail
    write_raw = _fail
    delete_raw = _fail
    delete_prefix = _fail
    count_prefix = _fail


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture
def dict_medium():
    return DictMedium()


@pytest.fixture
def failing_medium():
    return FailingMedium()


@pytest.fixture
def token_a():
    return "0xE30feDd158A2e3b13e9badaeABaFc5516e95e8C7"


@pytest.fixture
def token_b():
    return "0x3894085Ef7Ff0f0aeDf52E2A2704928d1Ec074F1"


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's global config, project config and SWAPCACHE_* env out of a test."""
    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml")
    for env_key in hierarchy._ENV_MAP:
        monkeypatch.delenv(env_key, raising=False)
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project
