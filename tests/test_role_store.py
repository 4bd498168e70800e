"""
SqlRoleStore against a session that fails like PostgreSQL does.

After a failed statement PostgreSQL rejects everything else in the
transaction until it is rolled back, so each lookup must run in its own
savepoint for the profile fallback to work.
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from caselab.apps.access.permissions import Role
from caselab.apps.access.resolver import resolve_role
from caselab.apps.access.store import SqlRoleStore

USER_ID = "00000000-0000-0000-0000-0000000000aa"


class Savepoint:
    def __init__(self, session: "AbortingSession"):
        self.session = session

    async def __aenter__(self):
        self.session.open_savepoints += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.session.open_savepoints -= 1
        if exc_type is not None:
            self.session.aborted = False
        self.session.savepoint_exits.append(exc_type)
        return False


class AbortingSession:
    """Fails the listed statements and then refuses work until a savepoint unwinds."""

    def __init__(self, outcomes: list):
        self.outcomes = list(outcomes)
        self.open_savepoints = 0
        self.aborted = False
        self.savepoint_exits = []

    def begin_nested(self) -> Savepoint:
        return Savepoint(self)

    async def execute(self, statement):
        if self.aborted:
            raise OperationalError(str(statement), {}, Exception("current transaction is aborted"))
        if not self.open_savepoints:
            raise AssertionError("query ran outside a savepoint")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            self.aborted = True
            raise outcome
        return SimpleNamespace(scalar_one_or_none=lambda: outcome)


async def test_profile_fallback_survives_failed_assignment_query():
    session = AbortingSession([
        OperationalError("SELECT user_roles", {}, Exception("relation does not exist")),
        "exhibit_officer",
    ])

    role = await resolve_role(USER_ID, SqlRoleStore(session), timeout=1.0)

    assert role is Role.EXHIBIT_OFFICER
    assert session.savepoint_exits == [OperationalError, None]
    assert session.aborted is False


async def test_each_lookup_runs_in_a_savepoint():
    session = AbortingSession(["forensic_analyst", "investigator"])
    store = SqlRoleStore(session)

    assert await store.earliest_assignment_role(USER_ID) == "forensic_analyst"
    assert await store.profile_role(USER_ID) == "investigator"
    assert session.savepoint_exits == [None, None]


async def test_failed_lookup_propagates_from_store():
    session = AbortingSession([OperationalError("SELECT profiles", {}, Exception("timeout"))])

    with pytest.raises(OperationalError):
        await SqlRoleStore(session).profile_role(USER_ID)
    assert session.aborted is False
