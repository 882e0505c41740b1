import pytest

from contact_cli.utils import Config, SubmitResult, ACCESS_KEY_ENV


class FakeHttp:
    """Stands in for HttpClient: hands out queued results and records what was posted."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []
        self.closed = False

    def post_form(self, fields):
        self.calls.append(dict(fields))
        return self.results.pop(0)

    def close(self):
        self.closed = True


def relay_says(data, status_code=200):
    return SubmitResult(ok=True, status_code=status_code, text=str(data), data=data)


def unreachable(error="Connection refused"):
    return SubmitResult(ok=False, status_code=None, text="", error=error)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # keep a developer's real key or .env out of the tests
    monkeypatch.delenv(ACCESS_KEY_ENV, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def cfg():
    return Config(access_key="test-access-key")
