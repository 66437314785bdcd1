"""
ResourcePulse Backend - Service Unit Tests
==========================================

What:  Business rules checked against a mocked AsyncSession.
How:   Rules that reject input before touching the database are asserted
       to make no session calls at all; the rest patch the collaborators.

What we test:
    - Elevated self-registration is refused before any query
    - Role deletion is blocked while the role is referenced
    - SQLAlchemy failures become ConflictError / DatabaseError
    - Request status values are validated before the lookup
    - Empty milestone / RAID updates change nothing
"""

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from resource_pulse.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from resource_pulse.models.milestone import Milestone
from resource_pulse.models.role import Role
from resource_pulse.schemas.allocation import AllocationUpsert
from resource_pulse.schemas.auth import RegisterRequest
from resource_pulse.schemas.milestone import MilestoneUpdate
from resource_pulse.schemas.raid import RaidItemUpdate
from resource_pulse.services.allocation_service import AllocationService
from resource_pulse.services.auth_service import AuthService
from resource_pulse.services.base import translate_db_errors
from resource_pulse.services.milestone_service import MilestoneService
from resource_pulse.services.raid_service import RaidService
from resource_pulse.services.request_service import RequestService
from resource_pulse.services.role_service import RoleService
from resource_pulse.services.skill_service import normalize_skill_names


class TestTranslateDbErrors:

    def test_integrity_error_becomes_conflict(self):
        with pytest.raises(ConflictError):
            with translate_db_errors("create role"):
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    def test_other_errors_become_database_error(self):
        with pytest.raises(DatabaseError) as exc_info:
            with translate_db_errors("list roles"):
                raise OperationalError("SELECT", {}, Exception("connection lost"))
        assert exc_info.value.context == {"error_type": "OperationalError"}

    def test_application_errors_pass_through(self):
        with pytest.raises(NotFoundError):
            with translate_db_errors("fetch role"):
                raise NotFoundError(resource="role", resource_id=1)


def test_normalize_skill_names():
    assert normalize_skill_names([" Python", "python", "", "SQL", None]) == ["Python", "SQL"]


class TestAuthService:

    async def test_anonymous_elevated_registration(self, mock_db_session):
        payload = RegisterRequest(email="a@example.com", password="long-enough", role="admin")
        with pytest.raises(PermissionDeniedError):
            await AuthService().register(mock_db_session, payload, actor=None)
        mock_db_session.execute.assert_not_awaited()

    async def test_non_admin_cannot_grant_roles(self, mock_db_session):
        payload = RegisterRequest(
            email="a@example.com", password="long-enough", role="project_manager"
        )
        actor = SimpleNamespace(role="resource_manager")
        with pytest.raises(PermissionDeniedError):
            await AuthService().register(mock_db_session, payload, actor=actor)


class TestRoleService:

    async def test_delete_role_in_use(self, mock_db_session):
        mock_db_session.get.return_value = Role(id=1, name="Developer")
        mock_db_session.scalar.return_value = 2

        with pytest.raises(ConflictError):
            await RoleService().delete_role(mock_db_session, 1)
        mock_db_session.delete.assert_not_awaited()

    async def test_delete_unknown_role(self, mock_db_session):
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await RoleService().delete_role(mock_db_session, 5)

    async def test_blank_name(self, mock_db_session):
        from resource_pulse.schemas.role import RoleCreate

        with pytest.raises(ValidationError):
            await RoleService().create_role(mock_db_session, RoleCreate(name="   "))


class TestRequestService:

    async def test_invalid_status_checked_first(self, mock_db_session):
        with pytest.raises(ValidationError, match="Invalid status"):
            await RequestService().update_status(mock_db_session, 1, "Done")
        mock_db_session.execute.assert_not_awaited()


class TestAllocationService:

    async def test_range_checked_before_lookup(self, mock_db_session):
        payload = AllocationUpsert(
            project_id=1, start_date=date(2030, 1, 1), end_date=date(2030, 1, 31), utilization=200
        )
        with pytest.raises(ValidationError, match="between 1 and 150"):
            await AllocationService().upsert_for_resource(mock_db_session, 1, payload)
        mock_db_session.get.assert_not_awaited()

    async def test_capacity_skipped_when_overallocation_allowed(self, mock_db_session):
        payload = AllocationUpsert(
            project_id=1, start_date=date(2030, 1, 1), end_date=date(2030, 1, 31), utilization=150
        )
        with patch("resource_pulse.services.allocation_service.settings_service") as settings:
            settings.get_bool = AsyncMock(return_value=True)
            await AllocationService()._check_capacity(mock_db_session, 1, payload)
        mock_db_session.scalar.assert_not_awaited()

    async def test_capacity_message(self, mock_db_session):
        payload = AllocationUpsert(
            project_id=1, start_date=date(2030, 1, 1), end_date=date(2030, 1, 31), utilization=30
        )
        mock_db_session.scalar.return_value = 90
        with patch("resource_pulse.services.allocation_service.settings_service") as settings:
            settings.get_bool = AsyncMock(return_value=False)
            settings.get_number = AsyncMock(return_value=100)
            with pytest.raises(ValidationError) as exc_info:
                await AllocationService()._check_capacity(mock_db_session, 1, payload)
        assert exc_info.value.message == (
            "This allocation would exceed 100% utilization. "
            "Current utilization in this period: 90%"
        )


class TestPartialUpdates:

    async def test_empty_milestone_update(self, mock_db_session):
        milestone = Milestone(id=3, project_id=1, name="Kickoff", due_date=date(2025, 1, 1))
        mock_db_session.get.return_value = milestone

        result = await MilestoneService().update_milestone(
            mock_db_session, 1, 3, MilestoneUpdate()
        )
        assert result.message == "No updates provided"
        mock_db_session.flush.assert_not_awaited()

    async def test_milestone_from_other_project(self, mock_db_session):
        mock_db_session.get.return_value = Milestone(
            id=3, project_id=2, name="Kickoff", due_date=date(2025, 1, 1)
        )
        with pytest.raises(NotFoundError):
            await MilestoneService().update_milestone(
                mock_db_session, 1, 3, MilestoneUpdate(name="Renamed")
            )

    async def test_raid_null_required_field(self, mock_db_session):
        from resource_pulse.models.raid import RaidItem

        mock_db_session.get.return_value = RaidItem(
            id=4, project_id=1, type="Risk", description="Vendor delay"
        )
        with pytest.raises(ValidationError):
            await RaidService().update_item(
                mock_db_session, 1, 4, RaidItemUpdate(status=None, owner="Dana")
            )
