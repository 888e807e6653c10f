"""Translate DeviceAtlas payloads into domain values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from uadetect.domain.types import DeviceProperties

if TYPE_CHECKING:
    from .schema import PropertiesPayload


def to_device_properties(payload: PropertiesPayload) -> DeviceProperties:
    return DeviceProperties(
        mobile_device=payload.mobile_device,
        touch_screen=payload.touch_screen,
        is_tablet=payload.is_tablet,
        is_robot=payload.is_robot,
    )
