"""HTTP client for the DeviceAtlas Cloud detection API."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from uadetect.adapters.http_resilience import ResilientClient
from uadetect.domain.ports.classification import (
    ClassificationFailure,
    FailureKind,
    LookupOutcome,
)

from .schema import DetectPropertiesResponse
from .translator import to_device_properties

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from uadetect.config.deviceatlas import DeviceAtlasConfig
    from uadetect.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

DETECT_PROPERTIES_PATH = "/v1/detect/properties"


def _transport_safe(identifier: str) -> str:
    # Headers read with surrogateescape may carry undecodable bytes.
    return identifier.encode("utf-8", errors="surrogateescape").decode("utf-8", errors="replace")


class DeviceAtlasClient:
    """Look up User-Agent strings with DeviceAtlas Cloud.

    Every failure (transport error, timeout, non-200 status, unusable body) is
    returned as a ``ClassificationFailure``; nothing is retried. The most recent
    failure is kept on ``last_failure`` for diagnostics.
    """

    def __init__(
        self,
        *,
        config: DeviceAtlasConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self.last_failure: ClassificationFailure | None = None

    def lookup(self, identifier: str) -> LookupOutcome:
        return self.lookup_many([identifier])[0]

    def lookup_many(self, identifiers: Sequence[str]) -> list[LookupOutcome]:
        if not identifiers:
            return []
        return asyncio.run(self._lookup_many_async(identifiers))

    async def _lookup_many_async(self, identifiers: Sequence[str]) -> list[LookupOutcome]:
        async with self._client_factory(self._resilience) as client:
            return list(
                await asyncio.gather(
                    *(self._lookup_async(client, identifier) for identifier in identifiers)
                )
            )

    async def _lookup_async(self, client: ResilientClient, identifier: str) -> LookupOutcome:
        params = httpx.QueryParams(
            {
                "licencekey": self._config.licence_key,
                "useragent": _transport_safe(identifier),
            }
        )
        try:
            response = await client.get(DETECT_PROPERTIES_PATH, params=params)
        except httpx.TimeoutException as exc:
            return self._fail(identifier, FailureKind.TIMEOUT, f"request timed out: {exc!r}")
        except httpx.HTTPError as exc:
            return self._fail(identifier, FailureKind.TRANSPORT, f"request failed: {exc!r}")

        if response.status_code != httpx.codes.OK:
            return self._fail(
                identifier,
                FailureKind.HTTP_STATUS,
                f"non-200 OK HTTP response: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = DetectPropertiesResponse.model_validate_json(response.content)
        except ValidationError as exc:
            return self._fail(
                identifier,
                FailureKind.INVALID_PAYLOAD,
                f"unexpected response payload: {exc.error_count()} validation errors",
                status_code=response.status_code,
            )

        return to_device_properties(payload.properties)

    def _fail(
        self,
        identifier: str,
        kind: FailureKind,
        message: str,
        *,
        status_code: int | None = None,
    ) -> ClassificationFailure:
        failure = ClassificationFailure(kind=kind, message=message, status_code=status_code)
        log.debug("DeviceAtlas lookup failed for %r: %s", identifier, failure)
        self.last_failure = failure
        return failure
