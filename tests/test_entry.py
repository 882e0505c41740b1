import pytest
from click.testing import CliRunner

from contact_cli import entry
from contact_cli.controller import CONFIG_ERROR, REQUIRED_ERROR, NETWORK_ERROR
from contact_cli.key_store import KeyStore
from contact_cli.utils import ACCESS_KEY_ENV

from conftest import FakeHttp, relay_says, unreachable


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def key_file(tmp_path):
    return str(tmp_path / "keys.toml")


@pytest.fixture
def fake_http(monkeypatch):
    http = FakeHttp()
    monkeypatch.setattr(entry, "HttpClient", lambda cfg: http)
    return http


SEND_ARGS = ["send", "--name", "Ada", "--email", "ada@example.com", "-m", "Hello there"]


def test_send_success(runner, key_file, fake_http):
    fake_http.results.append(relay_says({"success": True}))
    result = runner.invoke(entry.cli, ["--access-key", "k-123", "--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 0, result.output
    assert "Message sent successfully!" in result.output
    assert fake_http.calls[0]["access_key"] == "k-123"
    assert fake_http.calls[0]["botcheck"] == ""


def test_send_remote_rejection(runner, key_file, fake_http):
    fake_http.results.append(relay_says({"success": False, "message": "Spam detected"}))
    result = runner.invoke(entry.cli, ["--access-key", "k", "--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 1
    assert "Spam detected" in result.output


def test_send_network_failure(runner, key_file, fake_http):
    fake_http.results.append(unreachable())
    result = runner.invoke(entry.cli, ["--access-key", "k", "--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 1
    assert NETWORK_ERROR in result.output


def test_send_without_key_fails_closed(runner, key_file, fake_http):
    result = runner.invoke(entry.cli, ["--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 1
    assert CONFIG_ERROR in result.output
    assert fake_http.calls == []


def test_send_missing_message(runner, key_file, fake_http):
    result = runner.invoke(entry.cli, ["--access-key", "k", "--key-file", key_file,
                                       "send", "--name", "Ada", "--email", "ada@example.com"])

    assert result.exit_code == 1
    assert REQUIRED_ERROR in result.output
    assert fake_http.calls == []


def test_send_uses_key_from_environment(runner, key_file, fake_http, monkeypatch):
    monkeypatch.setenv(ACCESS_KEY_ENV, "env-key")
    fake_http.results.append(relay_says({"success": True}))
    result = runner.invoke(entry.cli, ["--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 0, result.output
    assert fake_http.calls[0]["access_key"] == "env-key"


def test_config_save_then_send_uses_stored_key(runner, key_file, fake_http):
    result = runner.invoke(entry.cli, ["--key-file", key_file, "config", "--access-key", "stored-key"])
    assert result.exit_code == 0, result.output
    assert KeyStore(key_file).load() == "stored-key"

    fake_http.results.append(relay_says({"success": True}))
    result = runner.invoke(entry.cli, ["--key-file", key_file] + SEND_ARGS)
    assert result.exit_code == 0, result.output
    assert fake_http.calls[0]["access_key"] == "stored-key"


def test_config_show_masks_key(runner, key_file):
    KeyStore(key_file).save("0123456789abcdef")
    result = runner.invoke(entry.cli, ["--key-file", key_file, "config", "--show"])

    assert result.exit_code == 0
    assert "0123********cdef" in result.output
    assert "0123456789abcdef" not in result.output


def test_config_clear(runner, key_file):
    KeyStore(key_file).save("abc")
    result = runner.invoke(entry.cli, ["--key-file", key_file, "config", "--clear"])

    assert result.exit_code == 0
    assert KeyStore(key_file).load() is None


def test_config_rejects_blank_key(runner, key_file):
    result = runner.invoke(entry.cli, ["--key-file", key_file, "config", "--access-key", "   "])
    assert result.exit_code != 0
    assert KeyStore(key_file).load() is None


class ExplodingHttp:
    def __init__(self):
        self.closed = False

    def post_form(self, fields):
        raise RuntimeError("boom")

    def close(self):
        self.closed = True


def test_send_unexpected_client_fault_is_reported_not_raised(runner, key_file, monkeypatch):
    http = ExplodingHttp()
    monkeypatch.setattr(entry, "HttpClient", lambda cfg: http)
    result = runner.invoke(entry.cli, ["--access-key", "k", "--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 1
    assert not isinstance(result.exception, RuntimeError)
    assert NETWORK_ERROR in result.output
    assert http.closed


def test_send_closes_the_client(runner, key_file, fake_http):
    fake_http.results.append(relay_says({"success": True}))
    runner.invoke(entry.cli, ["--access-key", "k", "--key-file", key_file] + SEND_ARGS)
    assert fake_http.closed


def test_send_debug_shows_status_and_response(runner, key_file, fake_http):
    fake_http.results.append(relay_says({"success": False, "message": "Spam detected"}, status_code=400))
    result = runner.invoke(entry.cli, ["--debug", "--access-key", "k", "--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 1
    assert "Sending..." in result.output
    assert "Status: 400" in result.output
    assert "Spam detected" in result.output


def test_send_debug_success_shows_response(runner, key_file, fake_http):
    fake_http.results.append(relay_says({"success": True}))
    result = runner.invoke(entry.cli, ["-d", "--access-key", "k", "--key-file", key_file] + SEND_ARGS)

    assert result.exit_code == 0, result.output
    assert "Status: 200" in result.output
    assert "Message sent successfully!" not in result.output


def test_config_show_does_not_parse_key_as_markup(runner, key_file):
    KeyStore(key_file).save("[/a]0123456789")
    result = runner.invoke(entry.cli, ["--key-file", key_file, "config", "--show"])

    assert result.exit_code == 0, result.output
    assert "[/a]" in result.output


def test_config_refuses_key_that_cannot_be_stored(runner, key_file):
    result = runner.invoke(entry.cli, ["--key-file", key_file, "config", "--access-key", "bad\x7fkey"])
    assert result.exit_code != 0
    assert KeyStore(key_file).load() is None


def test_theme_option_reaches_config(runner, key_file, monkeypatch):
    seen = []
    monkeypatch.setattr(entry, "use_theme", seen.append)
    result = runner.invoke(entry.cli, ["--theme", "dark", "--key-file", key_file, "config", "--show"])
    assert result.exit_code == 0
    assert seen == ["dark"]
