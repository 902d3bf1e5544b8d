"""교대 종료 API 테스트 — 작업자별 종료, 전체 종료, 원자성."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from crewtime.models.assignment import Assignment, TimeEntry
from crewtime.models.shift_log import ShiftLog
from crewtime.repositories.shift_log_repository import shift_log_repository
from tests.conftest import assign_worker, fetch_all, fetch_one, shift_action


async def _assignment(database, assignment_id: str) -> Assignment:
    return await fetch_one(database, select(Assignment).where(Assignment.id == uuid.UUID(assignment_id)))


class TestEndShift:
    """POST /shifts/{id}/end-shift."""

    async def test_end_shift_closes_active_entry(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)

        res = await shift_action(client, shift.id, "end-shift", chief_token, a1)
        assert res.status_code == 200
        assert res.json()["status"] == "shift_ended"

        assert (await _assignment(database, a1)).status == "shift_ended"
        entries = await fetch_all(database, select(TimeEntry).where(TimeEntry.assignment_id == uuid.UUID(a1)))
        assert len(entries) == 1
        assert entries[0].is_active is False
        assert entries[0].clock_out is not None

    async def test_end_shift_after_clock_out(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        await shift_action(client, shift.id, "clock-out", chief_token, a1)

        res = await shift_action(client, shift.id, "end-shift", chief_token, a1)
        assert res.status_code == 200
        assert res.json()["entry"] is None

    @pytest.mark.parametrize("action", ["clock-in", "clock-out", "end-shift", "no-show"])
    async def test_no_clock_action_after_shift_ended(
        self, client: AsyncClient, database, shift, employee_1, chief_token, action
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        await shift_action(client, shift.id, "end-shift", chief_token, a1)

        res = await shift_action(client, shift.id, action, chief_token, a1)
        assert res.status_code == 400
        assert (await _assignment(database, a1)).status == "shift_ended"

    async def test_end_shift_is_logged(self, client: AsyncClient, database, shift, employee_1, chief_user, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "end-shift", chief_token, a1)

        logs = await fetch_all(database, select(ShiftLog).where(ShiftLog.shift_id == shift.id))
        assert [(log.action, log.actor_id) for log in logs] == [("end_shift", chief_user.id)]
        assert logs[0].details["assignmentId"] == a1


class TestEndAllShifts:
    """POST /shifts/{id}/end-all-shifts."""

    async def test_ends_every_open_assignment(
        self, client: AsyncClient, database, shift, employee_1, employee_2, employee_3, chief_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        a2 = await assign_worker(client, shift.id, employee_2.id, chief_token)
        a3 = await assign_worker(client, shift.id, employee_3.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        await shift_action(client, shift.id, "clock-in", chief_token, a2)
        await shift_action(client, shift.id, "clock-out", chief_token, a2)
        await shift_action(client, shift.id, "no-show", chief_token, a3)

        res = await shift_action(client, shift.id, "end-all-shifts", chief_token)
        assert res.status_code == 200
        assert res.json()["success"] is True
        assert res.json()["endedCount"] == 2

        assert (await _assignment(database, a1)).status == "shift_ended"
        assert (await _assignment(database, a2)).status == "shift_ended"
        assert (await _assignment(database, a3)).status == "no_show"
        active = await fetch_all(database, select(TimeEntry).where(TimeEntry.is_active.is_(True)))
        assert active == []

    async def test_failure_leaves_nothing_changed(
        self, client: AsyncClient, database, shift, employee_1, employee_2, chief_token, monkeypatch
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        a2 = await assign_worker(client, shift.id, employee_2.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)

        async def _explode(db, *args, **kwargs):
            # 상태 변경을 먼저 DB에 반영한 뒤 실패 — flush the pending changes, then fail
            await db.flush()
            raise RuntimeError("audit store unavailable")

        monkeypatch.setattr(shift_log_repository, "record", _explode)

        res = await shift_action(client, shift.id, "end-all-shifts", chief_token)
        assert res.status_code == 500
        assert res.json() == {"error": "Internal server error"}

        assert (await _assignment(database, a1)).status == "clocked_in"
        assert (await _assignment(database, a2)).status == "not_started"
        entries = await fetch_all(database, select(TimeEntry).where(TimeEntry.assignment_id == uuid.UUID(a1)))
        assert [(e.is_active, e.clock_out) for e in entries] == [(True, None)]

    async def test_forbidden_for_other_crew_chief(
        self, client: AsyncClient, database, shift, employee_1, chief_token, other_chief_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        res = await shift_action(client, shift.id, "end-all-shifts", other_chief_token)
        assert res.status_code == 403
        assert (await _assignment(database, a1)).status == "not_started"
