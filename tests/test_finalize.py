"""타임시트 확정 API 테스트 — 선행 조건, 멱등성, 전체 시나리오."""

import uuid

import pytest

from httpx import AsyncClient
from sqlalchemy import select

from crewtime.models.assignment import Assignment, TimeEntry
from crewtime.models.job import Shift, ShiftStatus
from crewtime.models.timesheet import Timesheet
from tests.conftest import API, assign_worker, auth_header, fetch_all, fetch_one, shift_action


async def _timesheets(database, shift_id) -> list[Timesheet]:
    return await fetch_all(database, select(Timesheet).where(Timesheet.shift_id == shift_id))


class TestFinalize:
    """POST /shifts/{id}/finalize-timesheet."""

    async def test_full_scenario(
        self, client: AsyncClient, database, shift, employee_1, employee_2, chief_user, chief_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        a2 = await assign_worker(client, shift.id, employee_2.id, chief_token)

        assert (await shift_action(client, shift.id, "clock-in", chief_token, a1)).status_code == 200
        assert (await shift_action(client, shift.id, "clock-out", chief_token, a1)).status_code == 200
        res = await shift_action(client, shift.id, "end-shift", chief_token, a1)
        assert res.json()["status"] == "shift_ended"
        res = await shift_action(client, shift.id, "no-show", chief_token, a2)
        assert res.json()["status"] == "no_show"

        res = await shift_action(client, shift.id, "finalize-timesheet", chief_token)
        assert res.status_code == 200
        data = res.json()
        assert data["success"] is True
        assert data["status"] == "pending_client_approval"

        timesheets = await _timesheets(database, shift.id)
        assert len(timesheets) == 1
        assert str(timesheets[0].id) == data["timesheetId"]
        assert timesheets[0].submitted_by == chief_user.id
        assert timesheets[0].submitted_at is not None

        row = await fetch_one(database, select(Shift).where(Shift.id == shift.id))
        assert row.status == "Completed"

    async def test_precondition_reports_remaining(
        self, client: AsyncClient, database, shift, employee_1, employee_2, employee_3, chief_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await assign_worker(client, shift.id, employee_2.id, chief_token)
        a3 = await assign_worker(client, shift.id, employee_3.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a3)
        await shift_action(client, shift.id, "end-shift", chief_token, a1)

        res = await shift_action(client, shift.id, "finalize-timesheet", chief_token)
        assert res.status_code == 400
        assert res.json() == {"error": "2 workers have not ended their shifts"}

        assert await _timesheets(database, shift.id) == []
        row = await fetch_one(database, select(Shift).where(Shift.id == shift.id))
        assert row.status == "In Progress"

    async def test_retry_updates_single_timesheet(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "end-shift", chief_token, a1)

        first = await shift_action(client, shift.id, "finalize-timesheet", chief_token)
        second = await shift_action(client, shift.id, "finalize-timesheet", chief_token)
        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["timesheetId"] == second.json()["timesheetId"]
        assert len(await _timesheets(database, shift.id)) == 1

    async def test_shift_without_workers(self, client: AsyncClient, shift, manager_token):
        res = await shift_action(client, shift.id, "finalize-timesheet", manager_token)
        assert res.status_code == 200

    async def test_refinalize_after_client_approval_refused(
        self, client: AsyncClient, database, shift, employee_1, chief_token, manager_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "end-shift", chief_token, a1)
        ts_id = (await shift_action(client, shift.id, "finalize-timesheet", chief_token)).json()["timesheetId"]
        res = await client.post(f"{API}/timesheets/{ts_id}/approve", json={
            "approvalType": "client",
        }, headers=auth_header(manager_token))
        assert res.status_code == 200

        res = await shift_action(client, shift.id, "finalize-timesheet", chief_token)
        assert res.status_code == 400
        timesheets = await _timesheets(database, shift.id)
        assert [t.status for t in timesheets] == ["pending_final_approval"]

    async def test_other_crew_chief_forbidden(self, client: AsyncClient, database, shift, other_chief_token):
        res = await shift_action(client, shift.id, "finalize-timesheet", other_chief_token)
        assert res.status_code == 403
        assert await _timesheets(database, shift.id) == []

    async def test_unknown_shift(self, client: AsyncClient, manager_token):
        res = await shift_action(client, uuid.uuid4(), "finalize-timesheet", manager_token)
        assert res.status_code == 404


class TestClosedShift:
    """확정/취소 이후 교대는 배정·출퇴근 변경을 거부합니다."""

    async def _finalize_with_one_worker(self, client: AsyncClient, shift, employee, token) -> tuple[str, str]:
        a1 = await assign_worker(client, shift.id, employee.id, token)
        await shift_action(client, shift.id, "clock-in", token, a1)
        await shift_action(client, shift.id, "end-shift", token, a1)
        res = await shift_action(client, shift.id, "finalize-timesheet", token)
        assert res.status_code == 200
        return a1, res.json()["timesheetId"]

    async def test_assign_after_finalize_refused(
        self, client: AsyncClient, database, shift, employee_1, employee_2, chief_token
    ):
        await self._finalize_with_one_worker(client, shift, employee_1, chief_token)

        res = await client.post(f"{API}/shifts/{shift.id}/assign", json={
            "employeeId": str(employee_2.id),
            "roleCode": "SH",
        }, headers=auth_header(chief_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Shift is closed (status: Completed)"}

        rows = await fetch_all(database, select(Assignment).where(Assignment.shift_id == shift.id))
        assert [r.employee_id for r in rows] == [employee_1.id]

    @pytest.mark.parametrize("action", ["clock-in", "clock-out", "end-shift", "no-show"])
    async def test_worker_actions_after_finalize_refused(
        self, client: AsyncClient, database, shift, employee_1, chief_token, action
    ):
        a1, _ = await self._finalize_with_one_worker(client, shift, employee_1, chief_token)

        res = await shift_action(client, shift.id, action, chief_token, a1)
        assert res.status_code == 400
        assert res.json()["error"].startswith("Shift is closed")

        entries = await fetch_all(database, select(TimeEntry).where(TimeEntry.assignment_id == uuid.UUID(a1)))
        assert len(entries) == 1
        assert entries[0].is_active is False

    @pytest.mark.parametrize("action", ["clock-out-all", "end-all-shifts"])
    async def test_batch_actions_after_finalize_refused(
        self, client: AsyncClient, shift, employee_1, manager_token, action
    ):
        await self._finalize_with_one_worker(client, shift, employee_1, manager_token)
        res = await shift_action(client, shift.id, action, manager_token)
        assert res.status_code == 400

    async def test_unassign_and_reassign_after_finalize_refused(
        self, client: AsyncClient, database, shift, employee_1, employee_2, chief_token
    ):
        a1, _ = await self._finalize_with_one_worker(client, shift, employee_1, chief_token)

        res = await client.post(f"{API}/shifts/{shift.id}/assign-worker", json={
            "assignmentId": a1,
            "employeeId": str(employee_2.id),
        }, headers=auth_header(chief_token))
        assert res.status_code == 400
        assert res.json()["error"].startswith("Shift is closed")

        res = await client.delete(f"{API}/shifts/{shift.id}/assigned/{a1}", headers=auth_header(chief_token))
        assert res.status_code == 400

        row = await fetch_one(database, select(Assignment).where(Assignment.id == uuid.UUID(a1)))
        assert row.employee_id == employee_1.id

    async def test_approval_chain_keeps_every_worker_terminal(
        self, client: AsyncClient, database, shift, employee_1, employee_2, chief_token, manager_token
    ):
        _, ts_id = await self._finalize_with_one_worker(client, shift, employee_1, chief_token)
        res = await client.post(f"{API}/shifts/{shift.id}/assign", json={
            "employeeId": str(employee_2.id),
            "roleCode": "SH",
        }, headers=auth_header(manager_token))
        assert res.status_code == 400

        for approval_type in ("client", "manager"):
            res = await client.post(f"{API}/timesheets/{ts_id}/approve", json={
                "approvalType": approval_type,
            }, headers=auth_header(manager_token))
            assert res.status_code == 200
        assert res.json()["status"] == "completed"

        rows = await fetch_all(database, select(Assignment).where(Assignment.shift_id == shift.id))
        assert [r.status for r in rows] == ["shift_ended"]

    async def test_cancelled_shift_cannot_be_finalized(self, client: AsyncClient, db, database, shift, manager_token):
        shift.status = ShiftStatus.CANCELLED
        await db.commit()

        res = await shift_action(client, shift.id, "finalize-timesheet", manager_token)
        assert res.status_code == 400
        assert res.json() == {"error": "Cannot finalize a cancelled shift"}

        row = await fetch_one(database, select(Shift).where(Shift.id == shift.id))
        assert row.status == "Cancelled"
        assert await _timesheets(database, shift.id) == []

    async def test_cancelled_shift_refuses_assign(self, client: AsyncClient, db, shift, employee_1, manager_token):
        shift.status = ShiftStatus.CANCELLED
        await db.commit()

        res = await client.post(f"{API}/shifts/{shift.id}/assign", json={
            "employeeId": str(employee_1.id),
            "roleCode": "SH",
        }, headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Shift is closed (status: Cancelled)"}
