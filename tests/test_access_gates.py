"""
require_any / require_all on a small app wired like the real one.
"""

import pytest
from fastapi import Depends, FastAPI, HTTPException, Request
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from caselab.apps.access.context import AccessContext
from caselab.apps.access.dependencies import get_role_store, require_all, require_any
from caselab.apps.access.permissions import SensitiveOperation
from caselab.apps.audit.models import AuditLog
from caselab.apps.auth.services import get_current_user
from caselab.core.dependencies import get_role_cache
from caselab.db.session import get_session
from conftest import CHIEF_ID, INVESTIGATOR_ID, OCU_ID, as_user

SIGN_OFF_OR_ADMIN = (SensitiveOperation.APPROVE_FINAL_REPORTS, SensitiveOperation.MANAGE_ALL_USERS)


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/either")
    async def either(access: AccessContext = Depends(require_any(*SIGN_OFF_OR_ADMIN))):
        return {"role": access.role.value}

    @app.get("/both")
    async def both(access: AccessContext = Depends(require_all(*SIGN_OFF_OR_ADMIN))):
        return {"role": access.role.value}

    return app


@pytest.fixture
async def gated(store, cache, db):
    app = build_app()

    async def current_user(request: Request) -> dict:
        user_id = request.headers.get("X-Test-User")
        if not user_id:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return {"id": user_id}

    async def session_override():
        yield db

    app.dependency_overrides[get_current_user] = current_user
    app.dependency_overrides[get_role_store] = lambda: store
    app.dependency_overrides[get_role_cache] = lambda: cache
    app.dependency_overrides[get_session] = session_override

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


def decisions(role: str, operation: SensitiveOperation, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "caselab_authorization_decisions_total",
        {"role": role, "operation": operation.value, "outcome": outcome},
    )
    return value or 0.0


async def test_any_gate_passes_with_one_operation(gated):
    response = await gated.get("/either", headers=as_user(OCU_ID))

    assert response.status_code == 200
    assert response.json() == {"role": "officer_commanding_unit"}


async def test_all_gate_needs_every_operation(gated, db):
    response = await gated.get("/both", headers=as_user(OCU_ID))

    assert response.status_code == 403
    audits = [row for row in db.added if isinstance(row, AuditLog)]
    assert audits[0].new_values["operations"] == ["approve_final_reports", "manage_all_users"]


async def test_chief_passes_both_gates(gated):
    assert (await gated.get("/either", headers=as_user(CHIEF_ID))).status_code == 200
    assert (await gated.get("/both", headers=as_user(CHIEF_ID))).status_code == 200


async def test_denial_is_audited_and_counted(gated, db):
    before = decisions("investigator", SensitiveOperation.MANAGE_ALL_USERS, "denied")

    response = await gated.get("/either", headers=as_user(INVESTIGATOR_ID))

    assert response.status_code == 403
    audits = [row for row in db.added if isinstance(row, AuditLog)]
    assert len(audits) == 1
    assert audits[0].action == "access.denied"
    assert audits[0].new_values["role"] == "investigator"
    assert audits[0].new_values["path"] == "/either"
    assert decisions("investigator", SensitiveOperation.MANAGE_ALL_USERS, "denied") == before + 1


async def test_gates_require_authentication(gated):
    assert (await gated.get("/either")).status_code == 401
