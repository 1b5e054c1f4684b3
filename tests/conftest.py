"""Shared fixtures for boxcop tests."""

from __future__ import annotations

from dataclasses import replace

import pytest

from boxcop.models import PUBLIC_LINK, USER_SHARE, ProjectSpace, Share


class FakeStore:
    """In-memory stand-in for boxcop.db.Database."""

    def __init__(self, shares: list[Share] | None = None, projects: list[ProjectSpace] | None = None):
        self.shares = {s.id: s for s in shares or []}
        self.projects = list(projects or [])
        self.writes: list[tuple] = []

    def get_shares_by_id(self, share_id):
        share = self.shares.get(int(share_id))
        return [share] if share else []

    def get_shares_by_owner(self, owner):
        return [s for s in self.shares.values() if s.uid_owner == owner]

    def get_shares_by_share_with(self, share_with):
        return [s for s in self.shares.values() if s.share_with == share_with]

    def get_shares_by_token(self, token):
        return [s for s in self.shares.values() if s.token == token]

    def get_all_shares(self):
        return list(self.shares.values())

    def update_share_owner(self, share_id, new_owner):
        self.writes.append(("update_share_owner", share_id, new_owner))
        self.shares[share_id] = replace(self.shares[share_id], uid_owner=new_owner)

    def iter_projects(self):
        yield from self.projects

    def insert_project(self, project):
        self.writes.append(("insert_project", project.name))
        self.projects.append(project)

    def delete_project(self, name):
        self.writes.append(("delete_project", name))
        self.projects = [p for p in self.projects if p.name != name]

    def update_project_owner(self, name, owner):
        self.writes.append(("update_project_owner", name, owner))
        for p in self.projects:
            if p.name == name:
                p.owner = owner

    def close(self):
        pass


class CountingLister:
    """Namespace lister answering from a dict and counting calls per letter."""

    def __init__(self, listing: dict[str, list[str]]):
        self.listing = listing
        self.calls: list[str] = []

    def __call__(self, letter: str) -> list[str]:
        self.calls.append(letter)
        return self.listing.get(letter, [])


@pytest.fixture
def project_share() -> Share:
    return Share(
        id=1345,
        uid_owner="cboxsvc",
        prefix="neweosproject-cernbox",
        item_source="8839284",
        share_with="ponce",
        permissions=15,
        share_type=USER_SHARE,
        stime=1580000000,
    )


@pytest.fixture
def link_share() -> Share:
    return Share(
        id=2001,
        uid_owner="labradorsvc",
        prefix="newproject-l",
        item_source="42",
        permissions=1,
        share_type=PUBLIC_LINK,
        token="AbCdEf",
    )


@pytest.fixture
def projects() -> list[ProjectSpace]:
    return [
        ProjectSpace("cernbox", "c/cernbox", "cboxsvc"),
        ProjectSpace("cms-dqm", "c/cms-dqm", "cmssvc"),
        ProjectSpace("cloud", "c/cloud", "cboxsvc"),
        ProjectSpace("labrador", "l/labrador", "labradorsvc"),
    ]


@pytest.fixture
def store(project_share, link_share, projects) -> FakeStore:
    return FakeStore([project_share, link_share], projects)
