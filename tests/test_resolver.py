"""
Role resolution: source order, fallbacks, failure handling, timeout, cache.
"""

import asyncio

import pytest

from caselab.apps.access.context import AccessContext
from caselab.apps.access.permissions import Role, SensitiveOperation, is_authorized
from caselab.apps.access.resolver import RoleResolver, RoleSource, default_sources, resolve_role
from caselab.core.cache import NO_ROLE
from conftest import FakeRoleCache, FakeRoleStore

USER = "7b0f6a44-9a8e-4a53-9c8e-0d7a2b1f3c11"


async def test_earliest_assignment_wins():
    store = FakeRoleStore(assignments={USER: ["analyst", "administrator"]}, profiles={USER: "chief_of_cyber"})
    assert await resolve_role(USER, store) is Role.ANALYST


async def test_profile_is_the_fallback():
    store = FakeRoleStore(profiles={USER: "exhibit_officer"})
    assert await resolve_role(USER, store) is Role.EXHIBIT_OFFICER


async def test_no_role_anywhere_resolves_to_none():
    role = await resolve_role(USER, FakeRoleStore())
    assert role is None
    for op in SensitiveOperation:
        assert is_authorized(role, op) is False


@pytest.mark.parametrize("user_id", [None, ""])
async def test_missing_user_id(user_id):
    store = FakeRoleStore()
    assert await resolve_role(user_id, store) is None
    assert store.calls == 0


async def test_blank_assignment_falls_through_to_profile():
    store = FakeRoleStore(assignments={USER: ["   "]}, profiles={USER: "supervisor"})
    assert await resolve_role(USER, store) is Role.SUPERVISOR


async def test_unknown_role_string_does_not_fall_through():
    store = FakeRoleStore(assignments={USER: ["desk_sergeant"]}, profiles={USER: "chief_of_cyber"})
    assert await resolve_role(USER, store) is None


async def test_source_error_moves_to_next_source():
    store = FakeRoleStore(profiles={USER: "commanding_officer"})
    store.fail_assignments = True
    assert await resolve_role(USER, store) is Role.COMMANDING_OFFICER


async def test_every_source_failing_resolves_to_none():
    async def broken(user_id):
        raise RuntimeError("db down")

    resolver = RoleResolver([RoleSource("a", broken), RoleSource("b", broken)])
    assert await resolver.resolve(USER) is None


async def test_sources_are_consulted_in_order():
    seen = []

    def source(name, value):
        async def fetch(user_id):
            seen.append(name)
            return value
        return RoleSource(name, fetch)

    resolver = RoleResolver([source("first", None), source("second", "admin"), source("third", "analyst")])
    resolution = await resolver.walk(USER)

    assert resolution.role is Role.ADMIN
    assert resolution.source == "second"
    assert seen == ["first", "second"]


async def test_timeout_fails_closed():
    store = FakeRoleStore(assignments={USER: ["chief_of_cyber"]})
    store.delay = 5

    role = await resolve_role(USER, store, timeout=0.05)

    assert role is None
    context = AccessContext.for_role(USER, role)
    assert not context.can_any(list(SensitiveOperation))
    assert context.permissions == frozenset()


async def test_timeout_does_not_fall_back_to_profile():
    store = FakeRoleStore(assignments={USER: ["analyst"]}, profiles={USER: "chief_of_cyber"})
    store.delay = 5
    assert await resolve_role(USER, store, timeout=0.05) is None


async def test_cancellation_propagates():
    store = FakeRoleStore(assignments={USER: ["analyst"]})
    store.delay = 5

    task = asyncio.ensure_future(resolve_role(USER, store, timeout=10))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


async def test_successful_resolution_is_cached():
    store = FakeRoleStore(assignments={USER: ["forensic_analyst"]})
    cache = FakeRoleCache()

    assert await resolve_role(USER, store, cache=cache) is Role.FORENSIC_ANALYST
    assert cache.data[USER] == "forensic_analyst"

    store.assignments[USER] = ["chief_of_cyber"]
    assert await resolve_role(USER, store, cache=cache) is Role.FORENSIC_ANALYST
    assert store.calls == 1


async def test_no_role_is_cached_as_marker():
    cache = FakeRoleCache()
    assert await resolve_role(USER, FakeRoleStore(), cache=cache) is None
    assert cache.data[USER] == NO_ROLE
    assert await resolve_role(USER, FakeRoleStore(assignments={USER: ["admin"]}), cache=cache) is None


async def test_degraded_resolution_is_not_cached():
    store = FakeRoleStore(profiles={USER: "investigator"})
    store.fail_assignments = True
    cache = FakeRoleCache()

    assert await resolve_role(USER, store, cache=cache) is Role.INVESTIGATOR
    assert USER not in cache.data


async def test_timeout_is_not_cached():
    store = FakeRoleStore(assignments={USER: ["analyst"]})
    store.delay = 5
    cache = FakeRoleCache()

    assert await resolve_role(USER, store, timeout=0.05, cache=cache) is None
    assert USER not in cache.data


async def test_invalidated_cache_re_resolves():
    store = FakeRoleStore(assignments={USER: ["analyst"]})
    cache = FakeRoleCache()
    await resolve_role(USER, store, cache=cache)

    store.assignments[USER] = ["commanding_officer"]
    await cache.invalidate(USER)

    assert await resolve_role(USER, store, cache=cache) is Role.COMMANDING_OFFICER


def test_default_sources_order():
    names = [s.name for s in default_sources(FakeRoleStore())]
    assert names == ["role_assignment", "profile"]
