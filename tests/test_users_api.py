"""User management API test cases."""
from httpx import AsyncClient


NEW_USER = {"email": "dana@acme.com", "password": "pass-1234", "fullName": "Dana Scully"}


class TestCreateUser:

    async def test_tenant_admin_adds_user(self, client: AsyncClient, admin_a):
        response = await client.post(f"/api/users/{admin_a.tenant_id}/users", json=NEW_USER, headers=admin_a.headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "dana@acme.com"
        assert data["role"] == "user"
        assert data["tenantId"] == admin_a.tenant_id
        assert "passwordHash" not in data

    async def test_new_user_can_login(self, client: AsyncClient, admin_a):
        await client.post(f"/api/users/{admin_a.tenant_id}/users", json=NEW_USER, headers=admin_a.headers)

        response = await client.post("/api/auth/login", json={
            "email": NEW_USER["email"],
            "password": NEW_USER["password"],
            "tenantSubdomain": "acme",
        })
        assert response.status_code == 200

    async def test_plain_user_cannot_add(self, client: AsyncClient, member_a):
        response = await client.post(f"/api/users/{member_a.tenant_id}/users", json=NEW_USER, headers=member_a.headers)
        assert response.status_code == 403

    async def test_cross_tenant_add_forbidden(self, client: AsyncClient, admin_a, tenant_b):
        response = await client.post(f"/api/users/{tenant_b}/users", json=NEW_USER, headers=admin_a.headers)
        assert response.status_code == 403

    async def test_super_admin_role_not_assignable(self, client: AsyncClient, admin_a):
        payload = dict(NEW_USER, role="super_admin")
        response = await client.post(f"/api/users/{admin_a.tenant_id}/users", json=payload, headers=admin_a.headers)
        assert response.status_code == 400

    async def test_duplicate_email_in_tenant(self, client: AsyncClient, admin_a, member_a):
        payload = dict(NEW_USER, email=member_a.email)
        response = await client.post(f"/api/users/{admin_a.tenant_id}/users", json=payload, headers=admin_a.headers)
        assert response.status_code == 409

    async def test_user_quota(self, client: AsyncClient, make_tenant, make_member):
        tenant_id = await make_tenant("tiny", max_users=2)
        admin = await make_member(tenant_id, role="tenant_admin")
        await make_member(tenant_id)

        response = await client.post(f"/api/users/{tenant_id}/users", json=NEW_USER, headers=admin.headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Subscription limit reached"


class TestListUsers:

    async def test_members_list_their_tenant(self, client: AsyncClient, admin_a, member_a, member_b):
        response = await client.get(f"/api/users/{member_a.tenant_id}/users", headers=member_a.headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert {u["email"] for u in data["users"]} == {admin_a.email, member_a.email}
        assert data["pagination"] == {"currentPage": 1, "totalPages": 1, "limit": 50}

    async def test_role_and_search_filters(self, client: AsyncClient, admin_a, member_a):
        by_role = await client.get(
            f"/api/users/{admin_a.tenant_id}/users", params={"role": "tenant_admin"}, headers=admin_a.headers
        )
        assert [u["id"] for u in by_role.json()["data"]["users"]] == [admin_a.id]

        by_name = await client.get(
            f"/api/users/{admin_a.tenant_id}/users", params={"search": "builder"}, headers=admin_a.headers
        )
        assert [u["id"] for u in by_name.json()["data"]["users"]] == [member_a.id]

    async def test_limit_is_capped(self, client: AsyncClient, admin_a):
        response = await client.get(
            f"/api/users/{admin_a.tenant_id}/users", params={"limit": 1000}, headers=admin_a.headers
        )
        assert response.json()["data"]["pagination"]["limit"] == 100

    async def test_other_tenant_forbidden(self, client: AsyncClient, member_a, tenant_b):
        response = await client.get(f"/api/users/{tenant_b}/users", headers=member_a.headers)
        assert response.status_code == 403


class TestUpdateUser:

    async def test_self_renames(self, client: AsyncClient, member_a):
        response = await client.put(f"/api/users/{member_a.id}", json={"fullName": "Robert"}, headers=member_a.headers)

        assert response.status_code == 200
        assert response.json()["data"]["fullName"] == "Robert"

    async def test_self_cannot_promote(self, client: AsyncClient, member_a):
        response = await client.put(f"/api/users/{member_a.id}", json={"role": "tenant_admin"}, headers=member_a.headers)
        assert response.status_code == 403

    async def test_privileged_fields_ignored_for_self(self, client: AsyncClient, member_a):
        response = await client.put(
            f"/api/users/{member_a.id}",
            json={"fullName": "Robert", "role": "tenant_admin"},
            headers=member_a.headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "user"

    async def test_admin_deactivates_member(self, client: AsyncClient, admin_a, member_a):
        response = await client.put(
            f"/api/users/{member_a.id}",
            json={"isActive": False, "role": "tenant_admin"},
            headers=admin_a.headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["isActive"] is False
        assert data["role"] == "tenant_admin"

    async def test_member_cannot_edit_peer(self, client: AsyncClient, admin_a, member_a):
        response = await client.put(f"/api/users/{admin_a.id}", json={"fullName": "Hacked"}, headers=member_a.headers)
        assert response.status_code == 403

    async def test_cross_tenant_update_forbidden(self, client: AsyncClient, admin_b, member_a):
        response = await client.put(f"/api/users/{member_a.id}", json={"fullName": "Hacked"}, headers=admin_b.headers)
        assert response.status_code == 403

    async def test_unknown_user(self, client: AsyncClient, admin_a):
        response = await client.put("/api/users/missing", json={"fullName": "Nobody"}, headers=admin_a.headers)
        assert response.status_code == 404


class TestDeleteUser:

    async def test_admin_deletes_member_and_tasks_are_unassigned(self, client: AsyncClient, admin_a, member_a):
        project = await client.post("/api/projects", json={"name": "Launch"}, headers=admin_a.headers)
        project_id = project.json()["data"]["id"]
        await client.post(
            f"/api/tasks/projects/{project_id}/tasks",
            json={"title": "Write copy", "assignedTo": member_a.id},
            headers=admin_a.headers,
        )

        response = await client.delete(f"/api/users/{member_a.id}", headers=admin_a.headers)
        assert response.status_code == 200

        tasks = await client.get(f"/api/tasks/projects/{project_id}/tasks", headers=admin_a.headers)
        assert tasks.json()["data"]["tasks"][0]["assignedTo"] is None

    async def test_cannot_delete_self(self, client: AsyncClient, admin_a):
        response = await client.delete(f"/api/users/{admin_a.id}", headers=admin_a.headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Cannot delete self"

    async def test_project_creator_cannot_be_deleted(self, client: AsyncClient, admin_a, member_a):
        await client.post("/api/projects", json={"name": "Bob's project"}, headers=member_a.headers)

        response = await client.delete(f"/api/users/{member_a.id}", headers=admin_a.headers)
        assert response.status_code == 409

    async def test_plain_user_cannot_delete(self, client: AsyncClient, admin_a, member_a):
        response = await client.delete(f"/api/users/{admin_a.id}", headers=member_a.headers)
        assert response.status_code == 403

    async def test_cross_tenant_delete_forbidden(self, client: AsyncClient, admin_b, member_a):
        response = await client.delete(f"/api/users/{member_a.id}", headers=admin_b.headers)
        assert response.status_code == 403
