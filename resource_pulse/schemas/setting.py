"""System settings contracts. The GET/PUT bodies are maps keyed by setting name."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class SettingValue(BaseModel):
    value: Any = None
    description: Optional[str] = None
    data_type: str


SettingsMap = Dict[str, SettingValue]
