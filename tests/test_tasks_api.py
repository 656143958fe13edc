"""Task API test cases."""
import pytest
from httpx import AsyncClient


@pytest.fixture
async def project_a(client: AsyncClient, member_a) -> str:
    response = await client.post("/api/projects", json={"name": "Roadmap"}, headers=member_a.headers)
    return response.json()["data"]["id"]


def tasks_url(project_id: str) -> str:
    return f"/api/tasks/projects/{project_id}/tasks"


class TestCreateTask:
    """Test task creation."""

    async def test_defaults(self, client: AsyncClient, member_a, project_a):
        response = await client.post(tasks_url(project_a), json={"title": "Draft plan"}, headers=member_a.headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "todo"
        assert data["priority"] == "medium"
        assert data["dueDate"] is None
        assert data["projectId"] == project_a
        assert data["tenantId"] == member_a.tenant_id

    async def test_status_in_body_is_ignored(self, client: AsyncClient, member_a, project_a):
        response = await client.post(
            tasks_url(project_a), json={"title": "Skip ahead", "status": "done"}, headers=member_a.headers
        )
        assert response.json()["data"]["status"] == "todo"

    async def test_due_date_normalized(self, client: AsyncClient, member_a, project_a):
        response = await client.post(
            tasks_url(project_a),
            json={"title": "Ship", "dueDate": "2024-06-30T23:30:00-02:00"},
            headers=member_a.headers,
        )
        assert response.json()["data"]["dueDate"] == "2024-07-01"

    @pytest.mark.parametrize("due_date", ["2024-02-30", "soon", 12, "0001-01-01T00:00:00+01:00"])
    async def test_bad_due_date(self, client: AsyncClient, member_a, project_a, due_date):
        response = await client.post(
            tasks_url(project_a), json={"title": "Ship", "dueDate": due_date}, headers=member_a.headers
        )
        assert response.status_code == 400

    async def test_invalid_priority(self, client: AsyncClient, member_a, project_a):
        response = await client.post(
            tasks_url(project_a), json={"title": "Ship", "priority": "critical"}, headers=member_a.headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid priority"

    async def test_empty_title(self, client: AsyncClient, member_a, project_a):
        response = await client.post(tasks_url(project_a), json={"title": ""}, headers=member_a.headers)
        assert response.status_code == 400

    async def test_assignee_from_same_tenant(self, client: AsyncClient, member_a, admin_a, project_a):
        response = await client.post(
            tasks_url(project_a), json={"title": "Review", "assignedTo": admin_a.id}, headers=member_a.headers
        )
        assert response.status_code == 201
        assert response.json()["data"]["assignedTo"] == admin_a.id

    async def test_assignee_from_other_tenant_rejected(self, client: AsyncClient, member_a, member_b, project_a):
        response = await client.post(
            tasks_url(project_a), json={"title": "Review", "assignedTo": member_b.id}, headers=member_a.headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "assignedTo user invalid"

    async def test_project_of_other_tenant(self, client: AsyncClient, member_b, project_a):
        response = await client.post(tasks_url(project_a), json={"title": "Sneak"}, headers=member_b.headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Project does not belong to tenant"

    async def test_missing_project(self, client: AsyncClient, member_a):
        response = await client.post(tasks_url("missing"), json={"title": "Lost"}, headers=member_a.headers)
        assert response.status_code == 404

    async def test_super_admin_rejected(self, client: AsyncClient, super_admin, project_a):
        response = await client.post(tasks_url(project_a), json={"title": "Root"}, headers=super_admin.headers)
        assert response.status_code == 403


class TestListTasks:
    """Test task listing and ordering."""

    async def test_priority_then_due_date_ordering(self, client: AsyncClient, member_a, project_a):
        specs = [
            ("low-early", "low", "2024-01-01"),
            ("high-undated", "high", None),
            ("medium-late", "medium", "2024-12-31"),
            ("high-late", "high", "2024-09-01"),
            ("urgent", "urgent", "2024-01-02"),
            ("high-early", "high", "2024-03-01"),
        ]
        for title, priority, due in specs:
            await client.post(
                tasks_url(project_a),
                json={"title": title, "priority": priority, "dueDate": due},
                headers=member_a.headers,
            )

        response = await client.get(tasks_url(project_a), headers=member_a.headers)

        assert response.status_code == 200
        titles = [t["title"] for t in response.json()["data"]["tasks"]]
        assert titles[:4] == ["high-early", "high-late", "high-undated", "medium-late"]
        assert titles[4:] == ["low-early", "urgent"]

    async def test_assignee_expanded(self, client: AsyncClient, member_a, admin_a, project_a):
        await client.post(
            tasks_url(project_a), json={"title": "Review", "assignedTo": admin_a.id}, headers=member_a.headers
        )
        response = await client.get(tasks_url(project_a), headers=member_a.headers)
        assignee = response.json()["data"]["tasks"][0]["assignedTo"]
        assert assignee == {"id": admin_a.id, "fullName": "Ada Admin", "email": admin_a.email}

    async def test_filters(self, client: AsyncClient, member_a, admin_a, project_a):
        await client.post(tasks_url(project_a), json={"title": "Write docs", "assignedTo": admin_a.id}, headers=member_a.headers)
        await client.post(tasks_url(project_a), json={"title": "Fix bug", "priority": "high"}, headers=member_a.headers)

        by_assignee = await client.get(tasks_url(project_a), params={"assignedTo": admin_a.id}, headers=member_a.headers)
        assert [t["title"] for t in by_assignee.json()["data"]["tasks"]] == ["Write docs"]

        by_priority = await client.get(tasks_url(project_a), params={"priority": "high"}, headers=member_a.headers)
        assert [t["title"] for t in by_priority.json()["data"]["tasks"]] == ["Fix bug"]

        by_search = await client.get(tasks_url(project_a), params={"search": "DOCS"}, headers=member_a.headers)
        assert by_search.json()["data"]["total"] == 1

        by_status = await client.get(tasks_url(project_a), params={"status": "done"}, headers=member_a.headers)
        assert by_status.json()["data"]["tasks"] == []

    async def test_invalid_status_filter(self, client: AsyncClient, member_a, project_a):
        response = await client.get(tasks_url(project_a), params={"status": "stuck"}, headers=member_a.headers)
        assert response.status_code == 400

    async def test_other_tenant_forbidden(self, client: AsyncClient, member_b, project_a):
        response = await client.get(tasks_url(project_a), headers=member_b.headers)
        assert response.status_code == 403


class TestTaskStatus:
    """Test status transitions."""

    async def test_any_member_moves_task(self, client: AsyncClient, member_a, admin_a, project_a):
        task = (await client.post(tasks_url(project_a), json={"title": "Ship"}, headers=member_a.headers)).json()["data"]

        for status in ("in_progress", "done", "todo", "cancelled"):
            response = await client.patch(f"/api/tasks/{task['id']}/status", json={"status": status}, headers=admin_a.headers)
            assert response.status_code == 200
            assert response.json()["data"]["status"] == status

    async def test_invalid_status(self, client: AsyncClient, member_a, project_a):
        task = (await client.post(tasks_url(project_a), json={"title": "Ship"}, headers=member_a.headers)).json()["data"]
        response = await client.patch(f"/api/tasks/{task['id']}/status", json={"status": "blocked"}, headers=member_a.headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid status"

    async def test_other_tenant_forbidden(self, client: AsyncClient, member_a, member_b, project_a):
        task = (await client.post(tasks_url(project_a), json={"title": "Ship"}, headers=member_a.headers)).json()["data"]
        response = await client.patch(f"/api/tasks/{task['id']}/status", json={"status": "done"}, headers=member_b.headers)
        assert response.status_code == 403

    async def test_missing_task(self, client: AsyncClient, member_a):
        response = await client.patch("/api/tasks/missing/status", json={"status": "done"}, headers=member_a.headers)
        assert response.status_code == 404


class TestUpdateTask:
    """Test partial task updates."""

    async def test_partial_update(self, client: AsyncClient, member_a, admin_a, project_a, app_context, audit_sink):
        task = (await client.post(
            tasks_url(project_a),
            json={"title": "Ship", "description": "v1", "dueDate": "2024-05-01"},
            headers=member_a.headers,
        )).json()["data"]

        response = await client.put(
            f"/api/tasks/{task['id']}",
            json={"priority": "high", "assignedTo": admin_a.id, "description": None},
            headers=member_a.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Ship"
        assert data["priority"] == "high"
        assert data["description"] is None
        assert data["dueDate"] == "2024-05-01"
        assert data["assignedTo"]["id"] == admin_a.id

        await app_context.audit.flush()
        assert audit_sink.actions()[-1] == "UPDATE_TASK"

    async def test_clear_due_date_and_assignee(self, client: AsyncClient, member_a, admin_a, project_a):
        task = (await client.post(
            tasks_url(project_a),
            json={"title": "Ship", "dueDate": "2024-05-01", "assignedTo": admin_a.id},
            headers=member_a.headers,
        )).json()["data"]

        response = await client.put(
            f"/api/tasks/{task['id']}", json={"dueDate": "", "assignedTo": None}, headers=member_a.headers
        )
        data = response.json()["data"]
        assert data["dueDate"] is None
        assert data["assignedTo"] is None

    async def test_empty_update(self, client: AsyncClient, member_a, project_a):
        task = (await client.post(tasks_url(project_a), json={"title": "Ship"}, headers=member_a.headers)).json()["data"]
        response = await client.put(f"/api/tasks/{task['id']}", json={}, headers=member_a.headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"

    async def test_cross_tenant_assignee(self, client: AsyncClient, member_a, member_b, project_a):
        task = (await client.post(tasks_url(project_a), json={"title": "Ship"}, headers=member_a.headers)).json()["data"]
        response = await client.put(f"/api/tasks/{task['id']}", json={"assignedTo": member_b.id}, headers=member_a.headers)
        assert response.status_code == 400
        assert response.json()["message"] == "assignedTo user invalid"

    async def test_other_tenant_forbidden(self, client: AsyncClient, member_a, member_b, project_a):
        task = (await client.post(tasks_url(project_a), json={"title": "Ship"}, headers=member_a.headers)).json()["data"]
        response = await client.put(f"/api/tasks/{task['id']}", json={"title": "Mine"}, headers=member_b.headers)
        assert response.status_code == 403
