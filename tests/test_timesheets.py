"""타임시트 API 테스트 — 승인 체인, 상세 조회, 목록."""

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select

from crewtime.models.job import Client, Shift
from crewtime.models.notification import Notification
from crewtime.models.timesheet import Timesheet
from tests.conftest import API, assign_worker, auth_header, fetch_all, fetch_one, make_token, make_user, shift_action

TS = f"{API}/timesheets"


@pytest_asyncio.fixture
async def finalized(client: AsyncClient, shift, employee_1, employee_2, chief_token) -> str:
    """출퇴근 1회 후 종료된 작업자 + 결근 1명으로 확정된 타임시트 ID."""
    a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
    a2 = await assign_worker(client, shift.id, employee_2.id, chief_token)
    await shift_action(client, shift.id, "clock-in", chief_token, a1)
    await shift_action(client, shift.id, "end-shift", chief_token, a1)
    await shift_action(client, shift.id, "no-show", chief_token, a2)
    res = await shift_action(client, shift.id, "finalize-timesheet", chief_token)
    assert res.status_code == 200
    return res.json()["timesheetId"]


async def _approve(client: AsyncClient, ts_id: str, approval_type: str, token: str, signature: str | None = None):
    return await client.post(f"{TS}/{ts_id}/approve", json={
        "approvalType": approval_type,
        "signature": signature,
    }, headers=auth_header(token))


class TestApprovalChain:
    """POST /timesheets/{id}/approve."""

    async def test_client_then_manager(
        self, client: AsyncClient, database, shift, finalized, client_user, client_token, manager_user, manager_token
    ):
        res = await _approve(client, finalized, "client", client_token, signature="data:image/png;base64,AAAA")
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "pending_final_approval"
        assert data["clientApprovedBy"] == str(client_user.id)
        assert data["clientApprovedAt"] is not None

        res = await _approve(client, finalized, "manager", manager_token)
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "completed"
        assert data["managerApprovedBy"] == str(manager_user.id)

        row = await fetch_one(database, select(Timesheet).where(Timesheet.shift_id == shift.id))
        assert row.client_signature == "data:image/png;base64,AAAA"
        shift_row = await fetch_one(database, select(Shift).where(Shift.id == shift.id))
        assert shift_row.status == "Completed"

    async def test_client_approval_notifies_managers(
        self, client: AsyncClient, database, finalized, admin_user, manager_user, chief_token
    ):
        res = await _approve(client, finalized, "client", chief_token)
        assert res.status_code == 200

        notes = await fetch_all(
            database, select(Notification).where(Notification.type == "timesheet_ready_for_approval")
        )
        assert {n.user_id for n in notes} == {admin_user.id, manager_user.id}

    async def test_manager_step_requires_client_step(self, client: AsyncClient, finalized, manager_token):
        res = await _approve(client, finalized, "manager", manager_token)
        assert res.status_code == 400
        assert "not awaiting final approval" in res.json()["error"]

    async def test_client_step_cannot_repeat(self, client: AsyncClient, database, finalized, manager_token):
        await _approve(client, finalized, "client", manager_token)
        res = await _approve(client, finalized, "client", manager_token)
        assert res.status_code == 400
        rows = await fetch_all(database, select(Timesheet))
        assert [r.status for r in rows] == ["pending_final_approval"]

    async def test_completed_is_final(self, client: AsyncClient, finalized, manager_token):
        await _approve(client, finalized, "client", manager_token)
        await _approve(client, finalized, "manager", manager_token)
        res = await _approve(client, finalized, "manager", manager_token)
        assert res.status_code == 400

    async def test_crew_chief_cannot_give_final_approval(
        self, client: AsyncClient, finalized, chief_token, manager_token
    ):
        await _approve(client, finalized, "client", manager_token)
        res = await _approve(client, finalized, "manager", chief_token)
        assert res.status_code == 403

    async def test_client_of_other_company_forbidden(self, client: AsyncClient, db, roles, finalized):
        other = Client(company_name="Globex")
        db.add(other)
        await db.commit()
        outsider = await make_user(db, roles["client"], "globex", "Gus Globex", client_id=other.id)

        res = await _approve(client, finalized, "client", make_token(outsider, "client", 5))
        assert res.status_code == 403

    @pytest.mark.parametrize("approval_type", ["reject", ""])
    async def test_unknown_approval_type(self, client: AsyncClient, finalized, manager_token, approval_type):
        res = await _approve(client, finalized, approval_type, manager_token)
        assert res.status_code == 400


class TestTimesheetReads:
    """GET /timesheets, GET /timesheets/{id}."""

    async def test_detail(self, client: AsyncClient, shift, finalized, chief_token):
        res = await client.get(f"{TS}/{finalized}", headers=auth_header(chief_token))
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "pending_client_approval"
        assert data["shift"]["id"] == str(shift.id)
        assert data["shift"]["clientName"] == "Acme Events"
        statuses = sorted(w["status"] for w in data["workers"])
        assert statuses == ["no_show", "shift_ended"]
        ended = next(w for w in data["workers"] if w["status"] == "shift_ended")
        assert len(ended["timeEntries"]) == 1
        assert ended["timeEntries"][0]["isActive"] is False
        assert data["totalMinutes"] == sum(w["totalMinutes"] for w in data["workers"])

    async def test_detail_visible_to_owning_client(self, client: AsyncClient, finalized, client_token):
        res = await client.get(f"{TS}/{finalized}", headers=auth_header(client_token))
        assert res.status_code == 200

    async def test_detail_hidden_from_unrelated_crew_chief(self, client: AsyncClient, finalized, other_chief_token):
        res = await client.get(f"{TS}/{finalized}", headers=auth_header(other_chief_token))
        assert res.status_code == 403

    async def test_list_by_status(self, client: AsyncClient, finalized, manager_token):
        res = await client.get(TS, params={"status": "pending_client_approval"}, headers=auth_header(manager_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == finalized

        res = await client.get(TS, params={"status": "completed"}, headers=auth_header(manager_token))
        assert res.json()["total"] == 0

    async def test_list_unknown_status(self, client: AsyncClient, manager_token):
        res = await client.get(TS, params={"status": "approved"}, headers=auth_header(manager_token))
        assert res.status_code == 400

    async def test_list_requires_manager(self, client: AsyncClient, chief_token):
        res = await client.get(TS, headers=auth_header(chief_token))
        assert res.status_code == 403
