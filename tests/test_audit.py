"""
ResourcePulse Backend - Audit Trail Tests
=========================================

What we test:
    - Entity derivation from API paths
    - Credential redaction
    - The middleware writes one row per successful mutation, attributed
      to the caller, and nothing for reads, failures or auth calls
    - A failed audit write is logged and never fails the request
    - /api/audit-logs filters and admin-only access
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from resource_pulse.middleware.audit import AuditMiddleware, derive_entity, redact, singularize


class TestEntityDerivation:

    @pytest.mark.parametrize(
        "segment,expected",
        [
            ("projects", "Project"),
            ("audit-logs", "AuditLog"),
            ("raid", "Raid"),
            ("allocations", "Allocation"),
            ("ending-soon", "EndingSoon"),
            ("status", "Status"),
            ("campus", "Campus"),
            ("addresses", "Addresse"),
            ("", "Unknown"),
        ],
    )
    def test_singularize(self, segment, expected):
        assert singularize(segment) == expected

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/api/projects/5", ("Project", "5")),
            ("/api/requests/7/status", ("Request", "7")),
            ("/api/projects/5/milestones", ("Milestone", None)),
            ("/api/projects/5/milestones/9", ("Milestone", "9")),
            ("/api/projects/5/raid", ("Raid", None)),
            ("/api/projects/5/raid/2", ("Raid", "2")),
            ("/api/status", ("Status", None)),
            ("/api/allocations/resource/3", ("Resource", "3")),
            ("/api/settings", ("Setting", None)),
            ("/api/", ("Unknown", None)),
        ],
    )
    def test_derive_entity(self, path, expected):
        assert derive_entity(path) == expected


def test_redact_masks_credentials_recursively():
    data = {
        "name": "Ada",
        "password": "hunter22",
        "nested": {"refresh_token": "abc", "apiSecret": "xyz", "keep": 1},
        "items": [{"token": "t"}, {"value": 2}],
    }
    assert redact(data) == {
        "name": "Ada",
        "password": "***",
        "nested": {"refresh_token": "***", "apiSecret": "***", "keep": 1},
        "items": [{"token": "***"}, {"value": 2}],
    }


async def _logs(client, headers, **params):
    response = await client.get("/api/audit-logs", params=params, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestAuditMiddleware:

    async def test_create_is_recorded_with_response_id(
        self, test_client, admin_user, admin_headers
    ):
        created = await test_client.post(
            "/api/projects", json={"name": "Apollo", "client": "Acme"}, headers=admin_headers
        )
        project_id = created.json()["id"]

        [entry] = await _logs(test_client, admin_headers, entity_name="Project")
        assert entry["action"] == "POST"
        assert entry["entity_id"] == str(project_id)
        assert entry["changed_by"] == str(admin_user.id)
        assert entry["new_values"] == {"name": "Apollo", "client": "Acme"}
        assert entry["old_values"] is None
        assert entry["request_path"] == "/api/projects"

    async def test_update_and_delete_use_path_id(
        self, test_client, project_factory, admin_headers
    ):
        project = await project_factory()
        await test_client.put(
            f"/api/projects/{project['id']}",
            json={"name": "Apollo II", "client": "Acme"},
            headers=admin_headers,
        )
        await test_client.delete(f"/api/projects/{project['id']}", headers=admin_headers)

        entries = await _logs(
            test_client, admin_headers, entity_name="Project", entity_id=str(project["id"])
        )
        assert [e["action"] for e in entries] == ["DELETE", "PUT", "POST"]

        deletes = await _logs(test_client, admin_headers, action="delete")
        assert len(deletes) == 1

    async def test_nested_create_names_the_child_entity(
        self, test_client, project_factory, admin_headers
    ):
        project = await project_factory()
        created = await test_client.post(
            f"/api/projects/{project['id']}/milestones",
            json={"name": "Kickoff", "due_date": "2025-01-10"},
            headers=admin_headers,
        )
        assert created.status_code == 201

        [entry] = await _logs(test_client, admin_headers, entity_name="Milestone")
        assert entry["entity_id"] == str(created.json()["id"])
        # Only the project's own creation is attributed to the project
        [project_entry] = await _logs(test_client, admin_headers, entity_name="Project")
        assert project_entry["request_path"] == "/api/projects"

    async def test_status_change_keeps_the_record_id(
        self, test_client, project_factory, role_factory, admin_headers, rm_headers
    ):
        project = await project_factory()
        role = await role_factory("Developer")
        raised = await test_client.post(
            "/api/requests",
            json={"project_id": project["id"], "role_id": role["id"]},
            headers=admin_headers,
        )
        request_id = raised.json()["id"]
        await test_client.patch(
            f"/api/requests/{request_id}/status", json={"status": "Approved"}, headers=rm_headers
        )

        entries = await _logs(test_client, admin_headers, entity_name="Request")
        assert [(e["action"], e["entity_id"]) for e in entries] == [
            ("PATCH", str(request_id)),
            ("POST", str(request_id)),
        ]

    async def test_reads_and_failures_are_not_recorded(self, test_client, admin_headers):
        await test_client.get("/api/projects", headers=admin_headers)
        failed = await test_client.post(
            "/api/projects", json={"name": " ", "client": "Acme"}, headers=admin_headers
        )
        assert failed.status_code == 400
        assert await _logs(test_client, admin_headers) == []

    async def test_auth_calls_are_not_recorded(self, test_client, admin_headers):
        await test_client.post(
            "/api/auth/register", json={"email": "x@example.com", "password": "long-enough-pw"}
        )
        assert await _logs(test_client, admin_headers) == []

    async def test_settings_update_has_no_entity_id(self, test_client, admin_headers):
        await test_client.put(
            "/api/settings", json={"appName": "Pulse"}, headers=admin_headers
        )
        [entry] = await _logs(test_client, admin_headers, entity_name="Setting")
        assert entry["entity_id"] == "N/A"
        assert entry["new_values"] == {"appName": "Pulse"}

    async def test_date_filters(self, test_client, project_factory, admin_headers):
        await project_factory()
        today = datetime.now(timezone.utc).date()

        assert len(await _logs(
            test_client, admin_headers, start_date=today.isoformat(), end_date=today.isoformat()
        )) == 1
        assert await _logs(
            test_client, admin_headers, start_date=(today + timedelta(days=1)).isoformat()
        ) == []
        assert await _logs(
            test_client, admin_headers, end_date=(today - timedelta(days=1)).isoformat()
        ) == []

    async def test_limit(self, test_client, project_factory, admin_headers):
        for name in ("A", "B", "C"):
            await project_factory(name)
        assert len(await _logs(test_client, admin_headers, limit=2)) == 2

        too_many = await test_client.get(
            "/api/audit-logs", params={"limit": 5000}, headers=admin_headers
        )
        assert too_many.status_code == 422

    async def test_only_admins_read_audit_logs(self, test_client, rm_headers):
        response = await test_client.get("/api/audit-logs", headers=rm_headers)
        assert response.status_code == 403


def _unavailable_session_factory():
    raise RuntimeError("audit database unavailable")


async def test_failed_audit_write_is_logged_not_raised(caplog):
    app = FastAPI()

    @app.post("/api/widgets", status_code=201)
    async def create_widget():
        return {"id": 1}

    app.add_middleware(AuditMiddleware, session_factory=_unavailable_session_factory)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        with caplog.at_level(logging.ERROR, logger="resource_pulse.middleware.audit"):
            response = await client.post("/api/widgets", json={"name": "gear"})

    assert response.status_code == 201
    assert response.json() == {"id": 1}
    [record] = [r for r in caplog.records if r.name == "resource_pulse.middleware.audit"]
    assert record.levelno == logging.ERROR
    assert record.getMessage() == "Failed to write audit log for POST /api/widgets"
    assert record.exc_info[0] is RuntimeError
