"""
ResourcePulse Backend - System Settings Tests
=============================================

What we test:
    - decode_value / encode_value per data type
    - Defaults are seeded once and never overwritten
    - GET returns typed values; PUT is admin-only and skips unknown keys
"""

import pytest

from resource_pulse.exceptions import ValidationError
from resource_pulse.models.setting import SystemSetting
from resource_pulse.services.settings_service import (
    DEFAULT_SETTINGS,
    decode_value,
    encode_value,
    settings_service,
)


class TestDecode:

    @pytest.mark.parametrize(
        "raw,data_type,expected",
        [
            ("true", "boolean", True),
            ("FALSE", "boolean", False),
            ("100", "number", 100),
            ("12.5", "number", 12.5),
            ("abc", "number", None),
            ("NaN", "number", None),
            ("inf", "number", None),
            ('[{"name": "x"}]', "json", [{"name": "x"}]),
            ("{broken", "json", "{broken"),
            ("grid", "string", "grid"),
            (None, "string", None),
        ],
    )
    def test_decode(self, raw, data_type, expected):
        assert decode_value(raw, data_type) == expected


class TestEncode:

    def test_null_values_become_type_defaults(self):
        assert encode_value("k", None, "boolean") == "false"
        assert encode_value("k", None, "number") == "0"
        assert encode_value("k", None, "json") == "[]"
        assert encode_value("k", None, "string") == ""

    def test_numbers(self):
        assert encode_value("k", 120, "number") == "120"
        assert encode_value("k", "75.5", "number") == "75.5"
        assert encode_value("k", 80.0, "number") == "80"

    def test_booleans(self):
        assert encode_value("k", True, "boolean") == "true"
        assert encode_value("k", "False", "boolean") == "false"

    def test_json(self):
        assert encode_value("k", [1, 2], "json") == "[1, 2]"
        assert encode_value("k", '{"a": 1}', "json") == '{"a": 1}'

    @pytest.mark.parametrize(
        "value,data_type",
        [("yes", "boolean"), (1, "boolean"), ("many", "number"), (True, "number"),
         ("{not json", "json")],
    )
    def test_rejects_values_of_the_wrong_type(self, value, data_type):
        with pytest.raises(ValidationError):
            encode_value("k", value, data_type)

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", float("inf")])
    def test_rejects_non_finite_numbers(self, value):
        with pytest.raises(ValidationError, match="finite"):
            encode_value("maxUtilizationPercentage", value, "number")


class TestSeeding:

    async def test_seed_is_idempotent(self, db_session):
        # The db_engine fixture has already seeded once
        assert await settings_service.seed_defaults(db_session) == 0
        settings = await settings_service.get_settings(db_session)
        assert set(settings) == set(DEFAULT_SETTINGS)

    async def test_typed_getters(self, db_session):
        assert await settings_service.get_number(db_session, "maxUtilizationPercentage", 0) == 100
        assert await settings_service.get_bool(db_session, "allowOverallocation", True) is False
        assert await settings_service.get_value(db_session, "missingKey", "fallback") == "fallback"

    async def test_get_number_ignores_non_finite_stored_value(self, db_session):
        row = await db_session.get(SystemSetting, "maxUtilizationPercentage")
        row.value = "NaN"
        await db_session.flush()
        assert await settings_service.get_number(db_session, "maxUtilizationPercentage", 100) == 100


class TestSettingsApi:

    async def test_get_typed_settings(self, test_client, user_headers):
        response = await test_client.get("/api/settings", headers=user_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["maxUtilizationPercentage"]["value"] == 100
        assert body["maxUtilizationPercentage"]["data_type"] == "number"
        assert body["allowOverallocation"]["value"] is False
        assert body["customFields"]["value"] == []
        assert body["appName"]["value"] == "ResourcePulse"

    async def test_admin_update(self, test_client, admin_headers):
        response = await test_client.put(
            "/api/settings",
            json={
                "maxUtilizationPercentage": 120,
                "allowOverallocation": True,
                "customFields": [{"name": "Level"}],
                "notASetting": "ignored",
            },
            headers=admin_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["maxUtilizationPercentage"]["value"] == 120
        assert body["allowOverallocation"]["value"] is True
        assert body["customFields"]["value"] == [{"name": "Level"}]
        assert "notASetting" not in body

    async def test_invalid_value_changes_nothing(self, test_client, admin_headers):
        response = await test_client.put(
            "/api/settings",
            json={"defaultEndingSoonDays": 30, "maxUtilizationPercentage": "lots"},
            headers=admin_headers,
        )
        assert response.status_code == 400

        current = (await test_client.get("/api/settings", headers=admin_headers)).json()
        assert current["defaultEndingSoonDays"]["value"] == 14

    async def test_non_admin_cannot_update(self, test_client, rm_headers):
        response = await test_client.put(
            "/api/settings", json={"allowOverallocation": True}, headers=rm_headers
        )
        assert response.status_code == 403

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity"])
    async def test_non_finite_number_is_rejected(self, test_client, admin_headers, value):
        response = await test_client.put(
            "/api/settings", json={"maxUtilizationPercentage": value}, headers=admin_headers
        )
        assert response.status_code == 400
        assert "finite" in response.json()["message"]

        current = (await test_client.get("/api/settings", headers=admin_headers)).json()
        assert current["maxUtilizationPercentage"]["value"] == 100
