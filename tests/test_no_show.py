"""결근 처리 API 테스트."""

import uuid

from httpx import AsyncClient
from sqlalchemy import select

from crewtime.models.assignment import Assignment
from crewtime.models.shift_log import ShiftLog
from tests.conftest import assign_worker, fetch_all, fetch_one, shift_action


async def _status(database, assignment_id: str) -> str:
    row = await fetch_one(database, select(Assignment).where(Assignment.id == uuid.UUID(assignment_id)))
    return row.status


class TestNoShow:
    """POST /shifts/{id}/no-show."""

    async def test_mark_no_show(self, client: AsyncClient, database, shift, employee_1, chief_user, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        res = await shift_action(client, shift.id, "no-show", chief_token, a1)
        assert res.status_code == 200
        assert res.json()["status"] == "no_show"
        assert await _status(database, a1) == "no_show"

        logs = await fetch_all(database, select(ShiftLog).where(ShiftLog.shift_id == shift.id))
        assert len(logs) == 1
        assert logs[0].action == "no_show"
        assert logs[0].actor_id == chief_user.id
        assert logs[0].created_at is not None
        assert logs[0].details["employeeId"] == str(employee_1.id)

    async def test_refused_while_clocked_in(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)

        res = await shift_action(client, shift.id, "no-show", chief_token, a1)
        assert res.status_code == 400
        assert res.json() == {"error": "Cannot mark as no-show: employee has already clocked in"}
        assert await _status(database, a1) == "clocked_in"

    async def test_refused_after_closed_entry(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        await shift_action(client, shift.id, "clock-out", chief_token, a1)

        res = await shift_action(client, shift.id, "no-show", chief_token, a1)
        assert res.status_code == 400
        assert await _status(database, a1) == "clocked_out"

    async def test_no_clock_in_after_no_show(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "no-show", chief_token, a1)

        res = await shift_action(client, shift.id, "clock-in", chief_token, a1)
        assert res.status_code == 400
        assert await _status(database, a1) == "no_show"

    async def test_placeholder_cannot_be_no_show(self, client: AsyncClient, shift, chief_token):
        slot = await assign_worker(client, shift.id, None, chief_token)
        res = await shift_action(client, shift.id, "no-show", chief_token, slot)
        assert res.status_code == 400

    async def test_employee_forbidden(self, client: AsyncClient, database, shift, employee_1, chief_token, employee_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        res = await shift_action(client, shift.id, "no-show", employee_token, a1)
        assert res.status_code == 403
        assert await _status(database, a1) == "not_started"
