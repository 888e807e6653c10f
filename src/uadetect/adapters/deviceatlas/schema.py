"""Pydantic models describing the DeviceAtlas Cloud payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _null_to_false(value: object) -> object:
    if value is None:
        return False
    return value


class DeviceAtlasBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PropertiesPayload(DeviceAtlasBaseModel):
    """The handful of properties the device-type rules look at.

    DeviceAtlas omits properties it does not know; omitted or null flags are
    read as ``False``.
    """

    mobile_device: bool = Field(default=False, alias="mobileDevice")
    touch_screen: bool = Field(default=False, alias="touchScreen")
    is_tablet: bool = Field(default=False, alias="isTablet")
    is_robot: bool = Field(default=False, alias="isRobot")

    _normalize_flags = field_validator(
        "mobile_device",
        "touch_screen",
        "is_tablet",
        "is_robot",
        mode="before",
    )(_null_to_false)


class DetectPropertiesResponse(DeviceAtlasBaseModel):
    properties: PropertiesPayload
