"""출퇴근 API 테스트 — 출근, 퇴근, 전체 퇴근, 출퇴근 횟수 제한."""

import uuid

from httpx import AsyncClient
from sqlalchemy import select

from crewtime.models.assignment import Assignment, TimeEntry
from crewtime.models.job import Shift
from tests.conftest import API, assign_worker, auth_header, fetch_all, fetch_one, shift_action


async def _entries(database, assignment_id: str) -> list[TimeEntry]:
    return await fetch_all(
        database,
        select(TimeEntry)
        .where(TimeEntry.assignment_id == uuid.UUID(assignment_id))
        .order_by(TimeEntry.entry_number),
    )


async def _status(database, assignment_id: str) -> str:
    row = await fetch_one(database, select(Assignment).where(Assignment.id == uuid.UUID(assignment_id)))
    return row.status


class TestClockIn:
    """POST /shifts/{id}/clock-in."""

    async def test_clock_in_opens_entry(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        res = await shift_action(client, shift.id, "clock-in", chief_token, a1)
        assert res.status_code == 200
        data = res.json()
        assert data["success"] is True
        assert data["status"] == "clocked_in"
        assert data["entry"]["entryNumber"] == 1
        assert data["entry"]["clockOut"] is None

        entries = await _entries(database, a1)
        assert len(entries) == 1
        assert entries[0].is_active is True

    async def test_first_clock_in_starts_shift(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        row = await fetch_one(database, select(Shift).where(Shift.id == shift.id))
        assert row.status == "In Progress"

    async def test_double_clock_in_conflicts(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)

        res = await shift_action(client, shift.id, "clock-in", chief_token, a1)
        assert res.status_code == 409
        assert res.json() == {"error": "Employee is already clocked in"}

        entries = await _entries(database, a1)
        assert [e.is_active for e in entries] == [True]

    async def test_fourth_clock_in_is_exhausted(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        for _ in range(3):
            assert (await shift_action(client, shift.id, "clock-in", chief_token, a1)).status_code == 200
            assert (await shift_action(client, shift.id, "clock-out", chief_token, a1)).status_code == 200

        res = await shift_action(client, shift.id, "clock-in", chief_token, a1)
        assert res.status_code == 400
        assert res.json() == {"error": "Maximum of 3 clock-ins reached for this shift"}

        entries = await _entries(database, a1)
        assert [e.entry_number for e in entries] == [1, 2, 3]
        assert not any(e.is_active for e in entries)
        assert await _status(database, a1) == "clocked_out"

    async def test_placeholder_cannot_clock_in(self, client: AsyncClient, shift, chief_token):
        slot = await assign_worker(client, shift.id, None, chief_token)
        res = await shift_action(client, shift.id, "clock-in", chief_token, slot)
        assert res.status_code == 400

    async def test_unknown_worker(self, client: AsyncClient, shift, chief_token):
        res = await shift_action(client, shift.id, "clock-in", chief_token, str(uuid.uuid4()))
        assert res.status_code == 404
        assert res.json() == {"error": "Worker assignment not found"}

    async def test_missing_worker_id(self, client: AsyncClient, shift, chief_token):
        res = await shift_action(client, shift.id, "clock-in", chief_token)
        assert res.status_code == 400

    async def test_snake_case_body_accepted(self, client: AsyncClient, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        res = await client.post(
            f"{API}/shifts/{shift.id}/clock-in", json={"worker_id": a1}, headers=auth_header(chief_token)
        )
        assert res.status_code == 200

    async def test_other_crew_chief_forbidden(
        self, client: AsyncClient, database, shift, employee_1, chief_token, other_chief_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        res = await shift_action(client, shift.id, "clock-in", other_chief_token, a1)
        assert res.status_code == 403
        assert await _entries(database, a1) == []


class TestClockOut:
    """POST /shifts/{id}/clock-out."""

    async def test_clock_out_closes_entry(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)

        res = await shift_action(client, shift.id, "clock-out", chief_token, a1)
        assert res.status_code == 200
        assert res.json()["status"] == "clocked_out"
        assert res.json()["entry"]["clockOut"] is not None

        entries = await _entries(database, a1)
        assert entries[0].is_active is False
        assert entries[0].clock_out is not None

    async def test_clock_out_without_active_entry(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        res = await shift_action(client, shift.id, "clock-out", chief_token, a1)
        assert res.status_code == 400
        assert res.json() == {"error": "Employee is not clocked in"}
        assert await _status(database, a1) == "not_started"
        assert await _entries(database, a1) == []

    async def test_second_clock_out_fails(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        await shift_action(client, shift.id, "clock-out", chief_token, a1)
        closed_at = (await _entries(database, a1))[0].clock_out

        res = await shift_action(client, shift.id, "clock-out", chief_token, a1)
        assert res.status_code == 400
        assert (await _entries(database, a1))[0].clock_out == closed_at

    async def test_reclock_uses_next_entry_number(self, client: AsyncClient, database, shift, employee_1, chief_token):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        await shift_action(client, shift.id, "clock-out", chief_token, a1)
        res = await shift_action(client, shift.id, "clock-in", chief_token, a1)
        assert res.json()["entry"]["entryNumber"] == 2

        entries = await _entries(database, a1)
        assert sum(1 for e in entries if e.is_active) == 1


class TestClockOutAll:
    """POST /shifts/{id}/clock-out-all."""

    async def test_closes_every_active_entry(
        self, client: AsyncClient, database, shift, employee_1, employee_2, employee_3, chief_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, chief_token)
        a2 = await assign_worker(client, shift.id, employee_2.id, chief_token)
        a3 = await assign_worker(client, shift.id, employee_3.id, chief_token)
        await shift_action(client, shift.id, "clock-in", chief_token, a1)
        await shift_action(client, shift.id, "clock-in", chief_token, a2)

        res = await shift_action(client, shift.id, "clock-out-all", chief_token)
        assert res.status_code == 200
        data = res.json()
        assert data["clockedOutCount"] == 2
        assert {w["assignmentId"] for w in data["clockedOutWorkers"]} == {a1, a2}

        assert await _status(database, a1) == "clocked_out"
        assert await _status(database, a2) == "clocked_out"
        assert await _status(database, a3) == "not_started"
        active = await fetch_all(database, select(TimeEntry).where(TimeEntry.is_active.is_(True)))
        assert active == []

    async def test_nothing_active(self, client: AsyncClient, shift, chief_token):
        res = await shift_action(client, shift.id, "clock-out-all", chief_token)
        assert res.status_code == 200
        assert res.json()["clockedOutCount"] == 0
        assert res.json()["clockedOutWorkers"] == []
