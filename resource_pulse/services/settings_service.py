"""
ResourcePulse Backend - System Settings Service
===============================================

What:  Typed access to the `system_settings` key/value table.
How:   Values are stored as text and decoded by `data_type`:
           string  -> str
           number  -> int when integral, else float; NaN and infinities are rejected
           boolean -> "true"/"false"
           json    -> any JSON document
       Defaults are inserted at startup for keys that do not exist yet;
       existing values are never overwritten.
Who:   routes/settings.py, AllocationService (capacity rules), the lifespan
       hook in main.py (seeding).
"""

import json
import math
import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resource_pulse.exceptions import ValidationError
from resource_pulse.models.setting import SystemSetting
from resource_pulse.schemas.setting import SettingValue
from resource_pulse.services.base import translate_db_errors

logger = logging.getLogger(__name__)

# key -> (value as stored, data_type, description)
DEFAULT_SETTINGS = {
    "appName": ("ResourcePulse", "string", "Application name displayed in the UI"),
    "maxUtilizationPercentage": (
        "100", "number", "Maximum allowed utilization percentage for resources",
    ),
    "defaultEndingSoonDays": (
        "14", "number", 'Default number of days for "ending soon" resources view',
    ),
    "allowOverallocation": ("false", "boolean", "Allow resources to be allocated beyond 100%"),
    "emailNotifications": (
        "false", "boolean", "Enable email notifications for allocation changes",
    ),
    "resourceDefaultView": ("list", "string", "Default view for resources page (list/grid)"),
    "matchingThreshold": (
        "60", "number", "Minimum matching score percentage for resource recommendations",
    ),
    "externalSystemIntegration": ("false", "boolean", "Enable integration with external systems"),
    "defaultTimelineMonths": (
        "3", "number", "Default number of months to display in timeline view",
    ),
    "customFields": ("[]", "json", "Custom fields configuration for resources and projects"),
}

_NULL_VALUES = {"boolean": "false", "number": "0", "json": "[]", "string": ""}


def decode_value(raw: Optional[str], data_type: str) -> Any:
    """Turns stored text back into a typed value. Undecodable JSON is returned as text."""
    if raw is None:
        return None
    if data_type == "boolean":
        return raw.strip().lower() == "true"
    if data_type == "number":
        try:
            number = float(raw)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    if data_type == "json":
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Stored JSON setting is not valid JSON: %r", raw)
            return raw
    return raw


def encode_value(key: str, value: Any, data_type: str) -> str:
    """
    Turns an incoming value into stored text for `data_type`.

    Raises:
        ValidationError: value cannot be represented in the setting's type
    """
    if value is None:
        return _NULL_VALUES.get(data_type, "")

    if data_type == "json":
        if isinstance(value, str):
            try:
                json.loads(value)
            except ValueError:
                raise ValidationError(f"Setting '{key}' must be valid JSON", field=key)
            return value
        try:
            return json.dumps(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Setting '{key}' must be valid JSON", field=key)

    if data_type == "boolean":
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower()
        raise ValidationError(f"Setting '{key}' must be a boolean", field=key)

    if data_type == "number":
        if isinstance(value, bool):
            raise ValidationError(f"Setting '{key}' must be a number", field=key)
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Setting '{key}' must be a number", field=key)
        if not math.isfinite(number):
            raise ValidationError(f"Setting '{key}' must be a finite number", field=key)
        return str(int(number)) if number.is_integer() else str(number)

    return str(value)


class SettingsService:

    async def seed_defaults(self, db: AsyncSession) -> int:
        """Inserts missing default settings; returns how many were added."""
        with translate_db_errors("seed settings"):
            result = await db.execute(select(SystemSetting.key))
            present = set(result.scalars().all())
            added = 0
            for key, (value, data_type, description) in DEFAULT_SETTINGS.items():
                if key in present:
                    continue
                db.add(
                    SystemSetting(
                        key=key, value=value, data_type=data_type, description=description
                    )
                )
                added += 1
            if added:
                await db.flush()
        if added:
            logger.info("Seeded %d default system settings", added)
        return added

    async def get_settings(self, db: AsyncSession) -> Dict[str, SettingValue]:
        with translate_db_errors("load settings"):
            result = await db.execute(select(SystemSetting).order_by(SystemSetting.key))
            rows = result.scalars().all()
        return {
            row.key: SettingValue(
                value=decode_value(row.value, row.data_type),
                description=row.description,
                data_type=row.data_type,
            )
            for row in rows
        }

    async def update_settings(
        self, db: AsyncSession, values: Dict[str, Any]
    ) -> Dict[str, SettingValue]:
        """
        Applies `{key: value}` updates; keys that are not known settings are skipped.

        All values are validated before any row changes.
        """
        with translate_db_errors("update settings"):
            result = await db.execute(
                select(SystemSetting).where(SystemSetting.key.in_(list(values)))
            )
            rows = {row.key: row for row in result.scalars().all()}

            encoded = {
                key: encode_value(key, value, rows[key].data_type)
                for key, value in values.items()
                if key in rows
            }
            skipped = sorted(set(values) - set(rows))
            if skipped:
                logger.info("Ignoring unknown settings: %s", ", ".join(skipped))

            for key, text in encoded.items():
                rows[key].value = text
            await db.flush()

        logger.info("Updated settings: %s", ", ".join(sorted(encoded)) or "none")
        return await self.get_settings(db)

    async def get_value(self, db: AsyncSession, key: str, default: Any = None) -> Any:
        with translate_db_errors("read setting"):
            row = await db.get(SystemSetting, key)
        if row is None:
            return default
        value = decode_value(row.value, row.data_type)
        return default if value is None else value

    async def get_number(self, db: AsyncSession, key: str, default: float) -> float:
        value = await self.get_value(db, key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        if not math.isfinite(value):
            return default
        return value

    async def get_bool(self, db: AsyncSession, key: str, default: bool) -> bool:
        value = await self.get_value(db, key, default)
        return value if isinstance(value, bool) else default


settings_service = SettingsService()
