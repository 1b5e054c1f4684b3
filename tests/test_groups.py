"""Tests for group membership lookup."""

from __future__ import annotations

import subprocess

import pytest

from boxcop import groups
from boxcop.errors import GroupLookupError


def fake_id(returncode=0, stdout="", stderr=""):
    def run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)
    return run


def test_groups_of(monkeypatch):
    monkeypatch.setattr(groups.subprocess, "run", fake_id(stdout="def-cg cernbox-project-cernbox-admins it-dep\n"))
    assert groups.groups_of("gonzalhu") == {"def-cg", "cernbox-project-cernbox-admins", "it-dep"}


def test_unknown_account(monkeypatch):
    monkeypatch.setattr(groups.subprocess, "run", fake_id(1, stderr="id: 'nobody42': no such user\n"))
    assert groups.groups_of("nobody42") == set()


def test_lookup_failure(monkeypatch):
    monkeypatch.setattr(groups.subprocess, "run", fake_id(1, stderr="sssd is not running"))
    with pytest.raises(GroupLookupError, match="sssd"):
        groups.groups_of("gonzalhu")
