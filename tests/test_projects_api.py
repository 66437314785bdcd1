"""
ResourcePulse Backend - Project, Milestone and RAID Endpoint Tests
=================================================================

What we test:
    - Projects with required skills and roles; filters
    - Required-role replacement on update keeps unchanged links
    - Deleting a project with allocations is refused
    - Milestones: due-date ordering, partial updates, cross-project 404
    - RAID items: type filter, newest-first ordering
"""

from datetime import date, timedelta

import pytest


class TestProjects:

    async def test_create_with_requirements(self, test_client, role_factory, pm_headers):
        dev = await role_factory("Developer")
        qa = await role_factory("QA")
        response = await test_client.post(
            "/api/projects",
            json={
                "name": "Apollo",
                "client": "Acme",
                "start_date": "2025-01-01",
                "end_date": "2025-06-30",
                "budget": 100000,
                "required_skills": ["Python", "React"],
                "required_roles": [
                    {"role_id": dev["id"], "count": 3},
                    {"role_id": qa["id"]},
                    {"role_id": 9999, "count": 2},
                ],
            },
            headers=pm_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "Active"
        assert sorted(body["required_skills"]) == ["Python", "React"]
        assert body["required_roles"] == [
            {"role_id": dev["id"], "name": "Developer", "count": 3},
            {"role_id": qa["id"], "name": "QA", "count": 1},
        ]

    async def test_blank_name_or_client(self, test_client, pm_headers):
        response = await test_client.post(
            "/api/projects", json={"name": " ", "client": "Acme"}, headers=pm_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Name and client are required"

    @pytest.mark.parametrize(
        "body", [{"name": "", "client": "Acme"}, {"name": "Apollo", "client": ""}]
    )
    async def test_empty_name_or_client_is_schema_error(
        self, test_client, project_factory, pm_headers, body
    ):
        created = await test_client.post("/api/projects", json=body, headers=pm_headers)
        assert created.status_code == 422

        project = await project_factory()
        updated = await test_client.put(
            f"/api/projects/{project['id']}", json=body, headers=pm_headers
        )
        assert updated.status_code == 422

    async def test_end_before_start(self, test_client, pm_headers):
        response = await test_client.post(
            "/api/projects",
            json={"name": "A", "client": "B", "start_date": "2025-02-01", "end_date": "2025-01-01"},
            headers=pm_headers,
        )
        assert response.status_code == 400

    async def test_invalid_status_is_schema_error(self, test_client, pm_headers):
        response = await test_client.post(
            "/api/projects", json={"name": "A", "client": "B", "status": "Done"},
            headers=pm_headers,
        )
        assert response.status_code == 422

    async def test_filters(self, test_client, project_factory, user_headers):
        await project_factory("Apollo", "Acme", status="Active")
        await project_factory("Gemini", "Globex", status="Planning", description="Orbital work")
        await project_factory("Mercury", "Acme Corp", status="Completed")

        by_status = await test_client.get(
            "/api/projects", params={"status": "Planning"}, headers=user_headers
        )
        assert [p["name"] for p in by_status.json()] == ["Gemini"]

        by_client = await test_client.get(
            "/api/projects", params={"client": "acme"}, headers=user_headers
        )
        assert [p["name"] for p in by_client.json()] == ["Apollo", "Mercury"]

        by_search = await test_client.get(
            "/api/projects", params={"search": "orbit"}, headers=user_headers
        )
        assert [p["name"] for p in by_search.json()] == ["Gemini"]

    async def test_update_replaces_required_roles(
        self, test_client, role_factory, project_factory, pm_headers
    ):
        dev = await role_factory("Developer")
        qa = await role_factory("QA")
        ops = await role_factory("Ops")
        project = await project_factory(
            required_roles=[{"role_id": dev["id"], "count": 1}, {"role_id": qa["id"], "count": 1}],
            required_skills=["Python"],
        )

        response = await test_client.put(
            f"/api/projects/{project['id']}",
            json={
                "name": "Apollo",
                "client": "Acme",
                "required_roles": [
                    {"role_id": dev["id"], "count": 4},
                    {"role_id": ops["id"], "count": 2},
                ],
            },
            headers=pm_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["required_roles"] == [
            {"role_id": dev["id"], "name": "Developer", "count": 4},
            {"role_id": ops["id"], "name": "Ops", "count": 2},
        ]
        # Skills were not sent, so they are kept
        assert body["required_skills"] == ["Python"]

    async def test_get_includes_current_allocations(
        self, test_client, project_factory, resource_factory, rm_headers
    ):
        project = await project_factory()
        resource = await resource_factory("Ada")
        today = date.today()
        await test_client.put(
            f"/api/allocations/resource/{resource['id']}",
            json={
                "project_id": project["id"],
                "start_date": today.isoformat(),
                "end_date": (today + timedelta(days=30)).isoformat(),
                "utilization": 50,
            },
            headers=rm_headers,
        )

        response = await test_client.get(f"/api/projects/{project['id']}", headers=rm_headers)
        allocated = response.json()["allocated_resources"]
        assert len(allocated) == 1
        assert allocated[0]["resource_name"] == "Ada"
        assert allocated[0]["utilization"] == 50

    async def test_delete_with_allocations_conflicts(
        self, test_client, project_factory, resource_factory, rm_headers
    ):
        project = await project_factory()
        resource = await resource_factory()
        today = date.today()
        await test_client.put(
            f"/api/allocations/resource/{resource['id']}",
            json={
                "project_id": project["id"],
                "start_date": today.isoformat(),
                "end_date": today.isoformat(),
                "utilization": 20,
            },
            headers=rm_headers,
        )
        response = await test_client.delete(f"/api/projects/{project['id']}", headers=rm_headers)
        assert response.status_code == 409
        assert "Remove allocations first" in response.json()["message"]

    async def test_delete_removes_children(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        await test_client.post(
            f"/api/projects/{project['id']}/milestones",
            json={"name": "Kickoff", "due_date": "2025-01-10"},
            headers=pm_headers,
        )
        response = await test_client.delete(f"/api/projects/{project['id']}", headers=pm_headers)
        assert response.status_code == 200
        missing = await test_client.get(f"/api/projects/{project['id']}", headers=pm_headers)
        assert missing.status_code == 404


class TestMilestones:

    async def test_ordered_by_due_date(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        url = f"/api/projects/{project['id']}/milestones"
        for name, due in (("Launch", "2025-03-01"), ("Kickoff", "2025-01-01"), ("Beta", "2025-02-01")):
            response = await test_client.post(
                url, json={"name": name, "due_date": due}, headers=pm_headers
            )
            assert response.status_code == 201

        listed = await test_client.get(url, headers=pm_headers)
        assert [m["name"] for m in listed.json()] == ["Kickoff", "Beta", "Launch"]

    async def test_partial_update(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        url = f"/api/projects/{project['id']}/milestones"
        created = (await test_client.post(
            url, json={"name": "Kickoff", "due_date": "2025-01-01", "description": "Start"},
            headers=pm_headers,
        )).json()

        response = await test_client.put(
            f"{url}/{created['id']}", json={"status": "Completed"}, headers=pm_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "Completed"
        assert body["description"] == "Start"
        assert body["name"] == "Kickoff"

    async def test_empty_update(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        url = f"/api/projects/{project['id']}/milestones"
        created = (await test_client.post(
            url, json={"name": "Kickoff", "due_date": "2025-01-01"}, headers=pm_headers
        )).json()

        response = await test_client.put(f"{url}/{created['id']}", json={}, headers=pm_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "No updates provided"}

    async def test_null_required_field(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        url = f"/api/projects/{project['id']}/milestones"
        created = (await test_client.post(
            url, json={"name": "Kickoff", "due_date": "2025-01-01"}, headers=pm_headers
        )).json()

        response = await test_client.put(
            f"{url}/{created['id']}", json={"due_date": None}, headers=pm_headers
        )
        assert response.status_code == 400

    async def test_milestone_of_other_project(self, test_client, project_factory, pm_headers):
        first = await project_factory("First")
        second = await project_factory("Second")
        created = (await test_client.post(
            f"/api/projects/{first['id']}/milestones",
            json={"name": "Kickoff", "due_date": "2025-01-01"},
            headers=pm_headers,
        )).json()

        response = await test_client.delete(
            f"/api/projects/{second['id']}/milestones/{created['id']}", headers=pm_headers
        )
        assert response.status_code == 404

    async def test_unknown_project(self, test_client, pm_headers):
        response = await test_client.get("/api/projects/404/milestones", headers=pm_headers)
        assert response.status_code == 404


class TestRaid:

    async def test_type_filter_and_order(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        url = f"/api/projects/{project['id']}/raid"
        for item_type, text in (("Risk", "Vendor delay"), ("Issue", "Build broken"),
                                ("Risk", "Key person leaves")):
            response = await test_client.post(
                url, json={"type": item_type, "description": text}, headers=pm_headers
            )
            assert response.status_code == 201

        risks = await test_client.get(url, params={"type": "Risk"}, headers=pm_headers)
        assert [r["description"] for r in risks.json()] == ["Key person leaves", "Vendor delay"]

        everything = await test_client.get(url, headers=pm_headers)
        assert len(everything.json()) == 3

    async def test_defaults_and_update(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        url = f"/api/projects/{project['id']}/raid"
        created = (await test_client.post(
            url, json={"type": "Assumption", "description": "Budget approved"},
            headers=pm_headers,
        )).json()
        assert created["impact"] == "Medium"
        assert created["probability"] == "Medium"
        assert created["status"] == "Open"

        response = await test_client.put(
            f"{url}/{created['id']}", json={"status": "Closed", "owner": "Dana"},
            headers=pm_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "Closed"
        assert response.json()["owner"] == "Dana"

    async def test_invalid_type(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        response = await test_client.post(
            f"/api/projects/{project['id']}/raid",
            json={"type": "Rumour", "description": "?"},
            headers=pm_headers,
        )
        assert response.status_code == 422

    async def test_delete(self, test_client, project_factory, pm_headers):
        project = await project_factory()
        url = f"/api/projects/{project['id']}/raid"
        created = (await test_client.post(
            url, json={"type": "Dependency", "description": "API v2"}, headers=pm_headers
        )).json()
        response = await test_client.delete(f"{url}/{created['id']}", headers=pm_headers)
        assert response.status_code == 200
        assert (await test_client.get(url, headers=pm_headers)).json() == []
