"""Tests for the click command line, driven against the in-memory store."""

from __future__ import annotations

import time

import httpx
import pytest
from click.testing import CliRunner

from boxcop import cli, settings
from boxcop.metadata import MetadataResolver
from boxcop.namespace import PartitionCache

from tests.conftest import CountingLister


@pytest.fixture(autouse=True)
def configured(monkeypatch):
    monkeypatch.setattr(settings, "PG_DSN", "postgresql://db/cernbox")


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, store, args, **kwargs):
    return runner.invoke(cli.main, args, obj={"db": store}, **kwargs)


class TestProjectCommands:
    def test_list_by_owner(self, runner, store):
        result = invoke(runner, store, ["project", "list", "--owner", "labradorsvc"])
        assert result.exit_code == 0
        assert "labrador" in result.output
        assert "cernbox" not in result.output

    def test_getowner(self, runner, store):
        result = invoke(runner, store, ["project", "getowner", "/eos/project/c/cernbox/"])
        assert result.exit_code == 0
        assert result.output.strip() == "cboxsvc"

    def test_getowner_missing(self, runner, store):
        result = invoke(runner, store, ["project", "getowner", "atlas"])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_add_empty_owner(self, runner, store):
        result = invoke(runner, store, ["project", "add", "zebra", " "])
        assert result.exit_code == 1
        assert store.writes == []

    def test_orphan_quiet(self, runner, store, monkeypatch):
        lister = CountingLister({"c": ["cernbox", "cloud"], "l": ["labrador"]})
        monkeypatch.setattr(cli, "PartitionCache", lambda: PartitionCache(lister))
        result = invoke(runner, store, ["project", "orphan", "--quiet"])
        assert result.exit_code == 0
        assert result.output.split() == ["cms-dqm"]
        assert sorted(lister.calls) == ["c", "l"]


class TestSharingCommands:
    def test_list_by_owner_without_paths(self, runner, store):
        result = invoke(runner, store, ["sharing", "list", "--owner", "cboxsvc"])
        assert result.exit_code == 0
        assert "1345" in result.output
        assert "PATH" not in result.output

    def test_list_needs_a_filter(self, runner, store):
        result = invoke(runner, store, ["sharing", "list"])
        assert result.exit_code == 1

    def test_list_rejects_non_numeric_id(self, runner, store):
        result = invoke(runner, store, ["sharing", "list", "--id", "abc"])
        assert result.exit_code == 1
        assert "not a number" in result.output

    def test_list_by_id(self, runner, store):
        result = invoke(runner, store, ["sharing", "list", "--id", " 1345 "])
        assert result.exit_code == 0
        assert "1345" in result.output
        assert "2001" not in result.output

    def test_list_returns_shortly_after_timeout(self, runner, store, monkeypatch):
        def hang(request: httpx.Request) -> httpx.Response:
            time.sleep(min(request.extensions["timeout"]["read"], 4) + 0.05)
            raise httpx.ReadTimeout("timed out", request=request)

        monkeypatch.setattr(
            cli, "MetadataResolver",
            lambda **kwargs: MetadataResolver(client=httpx.Client(transport=httpx.MockTransport(hang))),
        )
        start = time.monotonic()
        result = invoke(runner, store, ["sharing", "list", "--all", "--printpath", "--timeout", "0.2"])
        assert result.exit_code == 1
        assert "did not finish" in result.output
        assert time.monotonic() - start < 1.5

    def test_list_rejects_zero_concurrency(self, runner, store):
        result = invoke(runner, store, ["sharing", "list", "--all", "--concurrency", "0"])
        assert result.exit_code == 2

    def test_transfer_denied(self, runner, store, monkeypatch):
        monkeypatch.setattr("boxcop.transfer.groups_of", lambda account: set())
        result = invoke(runner, store, ["sharing", "transfer", "1345", "gonzalhu", "cernbox", "--yes"])
        assert result.exit_code == 1
        assert "cernbox-project-cernbox-admins" in result.output
        assert store.writes == []

    def test_transfer_prompt_declined(self, runner, store, monkeypatch):
        monkeypatch.setattr("boxcop.transfer.groups_of", lambda account: {"cernbox-project-cernbox-admins"})
        result = invoke(runner, store, ["sharing", "transfer", "1345", "gonzalhu", "cernbox"], input="n\n")
        assert result.exit_code == 1
        assert "Aborted" in result.output or "aborted" in result.output
        assert store.writes == []

    def test_transfer_confirmed(self, runner, store, monkeypatch):
        monkeypatch.setattr("boxcop.transfer.groups_of", lambda account: {"cernbox-project-cernbox-admins"})
        result = invoke(runner, store, ["sharing", "transfer", "1345", "gonzalhu", "cernbox"], input="y\n")
        assert result.exit_code == 0
        assert store.shares[1345].uid_owner == "gonzalhu"


class TestConfiguration:
    def test_invalid_config_fails_before_any_command(self, runner, store, monkeypatch):
        monkeypatch.setattr(settings, "EOS_PROJECT_MGM", "root://eosproject.cern.ch")
        result = invoke(runner, store, ["project", "list"])
        assert result.exit_code == 1
        assert "Configuration errors" in result.output
        assert "EOS_PROJECT_MGM" in result.output

    def test_missing_dsn(self, runner, store, monkeypatch):
        monkeypatch.setattr(settings, "PG_DSN", None)
        result = invoke(runner, store, ["sharing", "list", "--all"])
        assert result.exit_code == 1
        assert "PG_DSN is required" in result.output
