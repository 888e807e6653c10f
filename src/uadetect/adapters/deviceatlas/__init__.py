"""Public interface for the DeviceAtlas adapter."""

from __future__ import annotations

from .client import DETECT_PROPERTIES_PATH, DeviceAtlasClient
from .schema import DetectPropertiesResponse, PropertiesPayload
from .translator import to_device_properties

__all__ = [
    "DETECT_PROPERTIES_PATH",
    "DetectPropertiesResponse",
    "DeviceAtlasClient",
    "PropertiesPayload",
    "to_device_properties",
]
