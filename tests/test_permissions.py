"""크루 치프 위임 권한 API 테스트 — 부여, 회수, 조회, 권한 가드."""

import uuid

from httpx import AsyncClient

from tests.conftest import API, assign_worker, auth_header, shift_action

PERMS = f"{API}/crew-chief-permissions"


async def _grant(client: AsyncClient, token: str, user_id, permission_type: str, target_id):
    return await client.post(PERMS, json={
        "userId": str(user_id),
        "permissionType": permission_type,
        "targetId": str(target_id),
    }, headers=auth_header(token))


class TestGrantRevoke:
    """POST / DELETE /crew-chief-permissions."""

    async def test_grant_and_list(self, client: AsyncClient, shift, other_chief, manager_user, manager_token):
        res = await _grant(client, manager_token, other_chief.id, "shift", shift.id)
        assert res.status_code == 201
        data = res.json()
        assert data["permissionType"] == "shift"
        assert data["targetId"] == str(shift.id)
        assert data["grantedBy"] == str(manager_user.id)
        assert data["revokedAt"] is None

        res = await client.get(PERMS, params={"userId": str(other_chief.id)}, headers=auth_header(manager_token))
        assert res.status_code == 200
        assert [p["id"] for p in res.json()] == [data["id"]]

    async def test_regrant_replaces_active_grant(self, client: AsyncClient, job, other_chief, manager_token):
        first = (await _grant(client, manager_token, other_chief.id, "job", job.id)).json()
        second = (await _grant(client, manager_token, other_chief.id, "job", job.id)).json()
        assert first["id"] != second["id"]

        res = await client.get(PERMS, params={"userId": str(other_chief.id)}, headers=auth_header(manager_token))
        assert [p["id"] for p in res.json()] == [second["id"]]

    async def test_revoke(self, client: AsyncClient, shift, other_chief, manager_token):
        await _grant(client, manager_token, other_chief.id, "shift", shift.id)
        body = {"userId": str(other_chief.id), "permissionType": "shift", "targetId": str(shift.id)}

        res = await client.request("DELETE", PERMS, json=body, headers=auth_header(manager_token))
        assert res.status_code == 200

        res = await client.request("DELETE", PERMS, json=body, headers=auth_header(manager_token))
        assert res.status_code == 404

    async def test_unknown_scope(self, client: AsyncClient, shift, other_chief, manager_token):
        res = await _grant(client, manager_token, other_chief.id, "store", shift.id)
        assert res.status_code == 400

    async def test_unknown_target(self, client: AsyncClient, other_chief, manager_token):
        res = await _grant(client, manager_token, other_chief.id, "job", uuid.uuid4())
        assert res.status_code == 404

    async def test_grant_requires_manager(self, client: AsyncClient, shift, other_chief, chief_token):
        res = await _grant(client, chief_token, other_chief.id, "shift", shift.id)
        assert res.status_code == 403

    async def test_list_own_grants_without_user_id(self, client: AsyncClient, shift, other_chief, manager_token, other_chief_token):
        await _grant(client, manager_token, other_chief.id, "shift", shift.id)
        res = await client.get(PERMS, headers=auth_header(other_chief_token))
        assert res.status_code == 200
        assert len(res.json()) == 1

    async def test_list_other_users_grants_forbidden(self, client: AsyncClient, chief_user, other_chief_token):
        res = await client.get(PERMS, params={"userId": str(chief_user.id)}, headers=auth_header(other_chief_token))
        assert res.status_code == 403


class TestPermissionCheck:
    """GET /crew-chief-permissions/check — 권한 출처 우선순위."""

    async def _check(self, client: AsyncClient, shift_id, token: str) -> dict:
        res = await client.get(f"{PERMS}/check", params={"shiftId": str(shift_id)}, headers=auth_header(token))
        assert res.status_code == 200
        return res.json()

    async def test_sources(
        self, client: AsyncClient, shift, job, acme, chief_token, other_chief, other_chief_token,
        manager_token, employee_token,
    ):
        assert await self._check(client, shift.id, manager_token) == {"hasPermission": True, "permissionSource": "admin"}
        assert (await self._check(client, shift.id, chief_token))["permissionSource"] == "designated"
        assert await self._check(client, shift.id, employee_token) == {"hasPermission": False, "permissionSource": "none"}
        assert (await self._check(client, shift.id, other_chief_token))["permissionSource"] == "none"

        await _grant(client, manager_token, other_chief.id, "client", acme.id)
        assert (await self._check(client, shift.id, other_chief_token))["permissionSource"] == "client"
        await _grant(client, manager_token, other_chief.id, "job", job.id)
        assert (await self._check(client, shift.id, other_chief_token))["permissionSource"] == "job"
        await _grant(client, manager_token, other_chief.id, "shift", shift.id)
        assert (await self._check(client, shift.id, other_chief_token))["permissionSource"] == "shift"

    async def test_unknown_shift(self, client: AsyncClient, manager_token):
        res = await client.get(f"{PERMS}/check", params={"shiftId": str(uuid.uuid4())}, headers=auth_header(manager_token))
        assert res.status_code == 404


class TestDelegatedGuard:
    """위임 권한으로 교대 작업 허용/회수 후 거부."""

    async def test_job_grant_allows_lifecycle_actions(
        self, client: AsyncClient, shift, job, employee_1, other_chief, manager_token, other_chief_token
    ):
        await _grant(client, manager_token, other_chief.id, "job", job.id)

        a1 = await assign_worker(client, shift.id, employee_1.id, other_chief_token)
        res = await shift_action(client, shift.id, "clock-in", other_chief_token, a1)
        assert res.status_code == 200

    async def test_revoked_grant_denies(
        self, client: AsyncClient, shift, employee_1, other_chief, manager_token, other_chief_token
    ):
        a1 = await assign_worker(client, shift.id, employee_1.id, manager_token)
        await _grant(client, manager_token, other_chief.id, "shift", shift.id)
        await client.request("DELETE", PERMS, json={
            "userId": str(other_chief.id), "permissionType": "shift", "targetId": str(shift.id),
        }, headers=auth_header(manager_token))

        res = await shift_action(client, shift.id, "clock-in", other_chief_token, a1)
        assert res.status_code == 403
        assert res.json() == {"error": "Crew chief permission required for this shift"}
