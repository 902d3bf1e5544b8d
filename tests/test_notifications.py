"""알림 API 테스트 — 배정 알림, 목록, 읽음 처리."""

import datetime as dt
import uuid

from httpx import AsyncClient

from crewtime.models.job import Shift, ShiftStatus
from tests.conftest import API, assign_worker, auth_header

NOTI = f"{API}/notifications"


class TestNotifications:
    """GET /notifications, PATCH /notifications/{id}/read."""

    async def test_assignment_creates_notification(self, client: AsyncClient, shift, employee_1, chief_token, employee_token):
        await assign_worker(client, shift.id, employee_1.id, chief_token)

        res = await client.get(NOTI, headers=auth_header(employee_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["type"] == "shift_assigned"
        assert item["referenceType"] == "shift"
        assert item["referenceId"] == str(shift.id)
        assert item["isRead"] is False

    async def test_mark_read(self, client: AsyncClient, shift, employee_1, chief_token, employee_token):
        await assign_worker(client, shift.id, employee_1.id, chief_token)
        note_id = (await client.get(NOTI, headers=auth_header(employee_token))).json()["items"][0]["id"]

        res = await client.patch(f"{NOTI}/{note_id}/read", headers=auth_header(employee_token))
        assert res.status_code == 200

        item = (await client.get(NOTI, headers=auth_header(employee_token))).json()["items"][0]
        assert item["isRead"] is True

    async def test_cannot_read_someone_elses(self, client: AsyncClient, shift, employee_1, chief_token, manager_token, employee_token):
        await assign_worker(client, shift.id, employee_1.id, chief_token)
        note_id = (await client.get(NOTI, headers=auth_header(employee_token))).json()["items"][0]["id"]

        res = await client.patch(f"{NOTI}/{note_id}/read", headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_unknown_notification(self, client: AsyncClient, employee_token):
        res = await client.patch(f"{NOTI}/{uuid.uuid4()}/read", headers=auth_header(employee_token))
        assert res.status_code == 404

    async def test_placeholder_slot_notifies_nobody(self, client: AsyncClient, shift, chief_token, employee_token):
        await assign_worker(client, shift.id, None, chief_token)
        res = await client.get(NOTI, headers=auth_header(employee_token))
        assert res.json()["total"] == 0


class TestUnreadCount:
    """GET /notifications — unreadCount 및 unreadOnly 필터."""

    async def _second_shift(self, db, shift) -> Shift:
        other = Shift(
            job_id=shift.job_id,
            date=dt.date(2026, 3, 15),
            start_time=dt.time(8, 0),
            end_time=dt.time(16, 0),
            crew_chief_id=shift.crew_chief_id,
            requested_workers=2,
            status=ShiftStatus.UPCOMING,
        )
        db.add(other)
        await db.commit()
        return other

    async def test_unread_count_tracks_reads(self, client: AsyncClient, db, shift, employee_1, chief_token, employee_token):
        other = await self._second_shift(db, shift)
        await assign_worker(client, shift.id, employee_1.id, chief_token)
        await assign_worker(client, other.id, employee_1.id, chief_token)

        data = (await client.get(NOTI, headers=auth_header(employee_token))).json()
        assert data["total"] == 2
        assert data["unreadCount"] == 2

        await client.patch(f"{NOTI}/{data['items'][0]['id']}/read", headers=auth_header(employee_token))

        data = (await client.get(NOTI, headers=auth_header(employee_token))).json()
        assert data["total"] == 2
        assert data["unreadCount"] == 1

    async def test_unread_only_filter(self, client: AsyncClient, db, shift, employee_1, chief_token, employee_token):
        other = await self._second_shift(db, shift)
        await assign_worker(client, shift.id, employee_1.id, chief_token)
        await assign_worker(client, other.id, employee_1.id, chief_token)
        newest = (await client.get(NOTI, headers=auth_header(employee_token))).json()["items"][0]
        await client.patch(f"{NOTI}/{newest['id']}/read", headers=auth_header(employee_token))

        res = await client.get(NOTI, params={"unreadOnly": "true"}, headers=auth_header(employee_token))
        data = res.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] != newest["id"]
        assert data["items"][0]["isRead"] is False
        assert data["unreadCount"] == 1

    async def test_empty_inbox(self, client: AsyncClient, manager_token):
        data = (await client.get(NOTI, headers=auth_header(manager_token))).json()
        assert data["items"] == []
        assert data["unreadCount"] == 0
