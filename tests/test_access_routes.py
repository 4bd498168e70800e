"""
HTTP surface of the access layer, plus one gated route end to end.
"""

from caselab.apps.audit.models import AuditLog
from caselab.apps.audit.services import AuditService
from caselab.config.settings import settings
from conftest import (
    CHIEF_ID,
    EXHIBIT_OFFICER_ID,
    INVESTIGATOR_ID,
    LEGACY_ID,
    NO_ROLE_ID,
    OCU_ID,
    as_user,
)

ALL_OPERATIONS = [
    "approve_final_reports",
    "execute_strategic_decisions",
    "manage_all_users",
    "manage_department_budget",
    "override_policies",
    "view_audit_logs",
    "view_system_analytics",
]


async def test_me_requires_authentication(client):
    response = await client.get("/api/v1/access/me")
    assert response.status_code == 401


async def test_me_for_chief_of_cyber(client):
    response = await client.get("/api/v1/access/me", headers=as_user(CHIEF_ID))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["role"] == "chief_of_cyber"
    assert data["permissions"] == ALL_OPERATIONS
    assert data["dashboard"] == "chief_of_cyber"


async def test_me_uses_earliest_assignment(client):
    response = await client.get("/api/v1/access/me", headers=as_user(OCU_ID))

    data = response.json()["data"]
    assert data["role"] == "officer_commanding_unit"
    assert data["permissions"] == ["approve_final_reports"]
    assert data["dashboard"] == "officer_commanding_unit"


async def test_me_falls_back_to_profile_role(client):
    response = await client.get("/api/v1/access/me", headers=as_user(EXHIBIT_OFFICER_ID))

    data = response.json()["data"]
    assert data["role"] == "exhibit_officer"
    assert data["permissions"] == []
    assert data["dashboard"] == "exhibit_officer"


async def test_me_without_any_role(client):
    response = await client.get("/api/v1/access/me", headers=as_user(NO_ROLE_ID))

    data = response.json()["data"]
    assert data["role"] is None
    assert data["permissions"] == []
    assert data["dashboard"] == "default"


async def test_me_with_legacy_role_string(client):
    response = await client.get("/api/v1/access/me", headers=as_user(LEGACY_ID))

    data = response.json()["data"]
    assert data["role"] is None
    assert data["dashboard"] == "default"


async def test_check_chief_versus_officer_commanding_unit(client):
    for operation in ["approve_final_reports", "manage_all_users", "view_audit_logs", "execute_strategic_decisions"]:
        chief = await client.get(
            "/api/v1/access/check", params={"operation": operation}, headers=as_user(CHIEF_ID)
        )
        assert chief.json()["data"]["allowed"] is True

    ocu = await client.get(
        "/api/v1/access/check", params={"operation": "approve_final_reports"}, headers=as_user(OCU_ID)
    )
    assert ocu.json()["data"]["allowed"] is True

    ocu = await client.get(
        "/api/v1/access/check", params={"operation": "manage_all_users"}, headers=as_user(OCU_ID)
    )
    assert ocu.status_code == 200
    assert ocu.json()["data"]["allowed"] is False


async def test_check_modes(client):
    params = [("operation", "approve_final_reports"), ("operation", "manage_all_users")]

    any_mode = await client.get(
        "/api/v1/access/check", params=params + [("mode", "any")], headers=as_user(OCU_ID)
    )
    all_mode = await client.get(
        "/api/v1/access/check", params=params + [("mode", "all")], headers=as_user(OCU_ID)
    )

    assert any_mode.json()["data"]["allowed"] is True
    assert all_mode.json()["data"]["allowed"] is False
    assert all_mode.json()["data"]["mode"] == "all"


async def test_check_rejects_unknown_operation(client):
    response = await client.get(
        "/api/v1/access/check", params={"operation": "launch_missiles"}, headers=as_user(CHIEF_ID)
    )
    assert response.status_code == 422


async def test_dashboard_lookup(client):
    known = await client.get("/api/v1/access/dashboards/forensic_analyst", headers=as_user(INVESTIGATOR_ID))
    unknown = await client.get("/api/v1/access/dashboards/janitor", headers=as_user(INVESTIGATOR_ID))

    assert known.json()["data"]["dashboard"] == "analyst"
    assert unknown.status_code == 200
    assert unknown.json()["data"]["dashboard"] == "default"


async def test_denied_access_is_generic_and_audited(client, db):
    response = await client.get("/api/v1/audit/logs", headers=as_user(INVESTIGATOR_ID))

    assert response.status_code == 403
    body = response.json()
    assert body["status"] == "failure"
    assert "investigator" not in body["message"]
    assert "view_audit_logs" not in body["message"]

    audits = [row for row in db.added if isinstance(row, AuditLog)]
    assert len(audits) == 1
    assert audits[0].action == "access.denied"
    assert audits[0].new_values["operations"] == ["view_audit_logs"]
    assert audits[0].new_values["role"] == "investigator"


async def test_failed_denial_audit_still_returns_403(client, db, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("audit table locked")

    monkeypatch.setattr(AuditService, "record_from_request", staticmethod(broken))

    response = await client.get("/api/v1/audit/logs", headers=as_user(OCU_ID))

    assert response.status_code == 403
    assert db.rollbacks == 1


async def test_allowed_access_reaches_the_route(client, monkeypatch):
    async def no_logs(db, **kwargs):
        return {"items": [], "total": 0, "page": 1, "per_page": 50, "pages": 0}

    monkeypatch.setattr(AuditService, "query_logs", staticmethod(no_logs))

    response = await client.get("/api/v1/audit/logs", headers=as_user(CHIEF_ID))

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 0


async def test_role_change_takes_effect_after_invalidation(client, store, cache):
    first = await client.get("/api/v1/access/me", headers=as_user(INVESTIGATOR_ID))
    assert first.json()["data"]["role"] == "investigator"

    store.assignments[INVESTIGATOR_ID] = ["commanding_officer"]
    await cache.invalidate(INVESTIGATOR_ID)

    second = await client.get("/api/v1/access/me", headers=as_user(INVESTIGATOR_ID))
    assert second.json()["data"]["role"] == "commanding_officer"


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_metrics_exposes_authorization_counters(client):
    await client.get("/api/v1/audit/logs", headers=as_user(INVESTIGATOR_ID))
    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "caselab_authorization_decisions_total" in response.text


async def test_me_reports_chief_and_executive_flags(client):
    chief = await client.get("/api/v1/access/me", headers=as_user(CHIEF_ID))
    ocu = await client.get("/api/v1/access/me", headers=as_user(OCU_ID))

    assert chief.json()["data"]["is_chief_of_cyber"] is True
    assert chief.json()["data"]["executive"] is True
    assert ocu.json()["data"]["is_chief_of_cyber"] is False
    assert ocu.json()["data"]["executive"] is False


async def test_audit_filter_rejects_malformed_user_id(client):
    response = await client.get(
        "/api/v1/audit/logs", params={"user_id": "not-a-uuid"}, headers=as_user(CHIEF_ID)
    )

    assert response.status_code == 422


async def test_timed_out_resolution_recovers_on_next_request(client, store, cache, monkeypatch):
    monkeypatch.setattr(settings, "ROLE_RESOLUTION_TIMEOUT_SECONDS", 0.05)
    store.delay = 5

    slow = await client.get("/api/v1/access/me", headers=as_user(OCU_ID))

    assert slow.status_code == 200
    assert slow.json()["data"]["role"] is None
    assert slow.json()["data"]["permissions"] == []
    assert OCU_ID not in cache.data

    store.delay = 0
    recovered = await client.get("/api/v1/access/me", headers=as_user(OCU_ID))

    assert recovered.json()["data"]["role"] == "officer_commanding_unit"
