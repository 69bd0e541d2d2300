"""Tests for the hibpkit command line."""

import json

import pytest
from click.testing import CliRunner

from hibpkit import client
from hibpkit.cli import main
from hibpkit.errors import ServiceError

from tests.fakes import ADOBE, PASSWORD_SUFFIX, PASTE, failing, ok, payload


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HIBP_USER_AGENT", "HIBP_API_KEY", "HIBP_BASE_URL", "HIBP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def invoke(runner, monkeypatch):
    """Run the CLI with the service transport replaced by a fake."""

    def _invoke(args, fetch=None, env=None, input=None):
        if fetch is not None:
            def transport(headers, timeout):
                fetch.headers = headers
                return fetch

            monkeypatch.setattr(client, "AiohttpTransport", transport)
        return runner.invoke(main, args, env=env, input=input)

    return _invoke


class TestBreaches:
    def test_json(self, invoke):
        fetch = ok(payload([ADOBE]))
        result = invoke(["breaches", "--domain", "adobe.com", "--json"], fetch)
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)[0]["name"] == "Adobe"
        assert fetch.url.endswith("?domain=adobe.com")

    def test_table(self, invoke):
        result = invoke(["breaches"], ok(payload([ADOBE])))
        assert result.exit_code == 0, result.output
        assert "Total Breaches:" in result.output
        assert "152,445,165" in result.output

    def test_empty(self, invoke):
        result = invoke(["breaches"], ok(b"[]"))
        assert "No breaches found" in result.output

    def test_base_url_option(self, invoke):
        fetch = ok(b"[]")
        invoke(["--base-url", "http://localhost:9999", "breaches"], fetch)
        assert fetch.url == "http://localhost:9999/api/v3/breaches/"

    def test_error_exits_nonzero(self, invoke):
        result = invoke(["breaches"], failing(ServiceError.rate_limited(120, "slow down")))
        assert result.exit_code == 1
        assert "Retry after 120s" in result.output


class TestAccount:
    def test_requires_api_key(self, invoke):
        result = invoke(["account", "a@b.com"], ok(b"[]"))
        assert result.exit_code == 1
        assert "API key required" in result.output

    def test_breached(self, invoke):
        fetch = ok(payload([ADOBE]))
        result = invoke(["account", "a@b.com"], fetch, env={"HIBP_API_KEY": "k3y"})
        assert result.exit_code == 0, result.output
        assert "includeUnverified=false" in fetch.url
        assert "Adobe" in result.output
        assert fetch.headers["hibp-api-key"] == "k3y"
        assert fetch.closed

    def test_unverified_flag(self, invoke):
        fetch = ok(b"[]")
        invoke(["account", "a@b.com", "--unverified", "-k", "k3y"], fetch)
        assert "includeUnverified" not in fetch.url

    def test_not_found_is_good_news(self, invoke):
        result = invoke(["account", "a@b.com", "-k", "k3y"], failing(ServiceError.not_found()))
        assert result.exit_code == 0
        assert "No breaches found" in result.output


class TestPastes:
    def test_rejects_non_email(self, invoke):
        fetch = ok(b"[]")
        result = invoke(["pastes", "john.doe", "-k", "k3y"], fetch)
        assert result.exit_code == 1
        assert fetch.calls == []

    def test_json(self, invoke):
        result = invoke(["pastes", "john.doe@example.com", "-k", "k3y", "--json"], ok(payload([PASTE])))
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)[0]["url"] == "https://pastebin.com/8Q0BvKD8"

    def test_none_found(self, invoke):
        result = invoke(["pastes", "john.doe@example.com", "-k", "k3y"], failing(ServiceError.not_found()))
        assert "No pastes found" in result.output


class TestPassword:
    def test_pwned(self, invoke):
        fetch = ok(f"{PASSWORD_SUFFIX}:3730471".encode())
        result = invoke(["password", "--password", "password", "--json"], fetch)
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "is_pwned": True,
            "occurrences": 3730471,
            "risk_level": "critical",
        }
        assert fetch.url.endswith("/range/5baa6")

    def test_prompt(self, invoke):
        fetch = ok(b"AAAA:1")
        result = invoke(["password"], fetch, input="password\n")
        assert result.exit_code == 0, result.output
        assert "NOT been found" in result.output

    def test_offline(self, invoke):
        result = invoke(["password", "-p", "x"], failing(ServiceError.offline("no network")))
        assert result.exit_code == 1
        assert "no network" in result.output


def test_config(invoke):
    result = invoke(["config"], env={"HIBP_API_KEY": "0123456789abcdef"})
    assert result.exit_code == 0
    assert "01234567..." in result.output
    assert "hibpkit-python-library" in result.output
