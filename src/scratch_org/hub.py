"""Hub org handle, its connection and identity resolution contracts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from scratch_org.logging_config import get_logger

if TYPE_CHECKING:
    from scratch_org.config import Settings

logger = get_logger(__name__)

SCRATCH_ORG_INFO = "ScratchOrgInfo"


class IdentityStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class IdentityLookup:
    """Result of resolving an existing authorization for a username."""

    status: IdentityStatus
    username: str
    error: BaseException | None = None

    @classmethod
    def found(cls, username: str) -> IdentityLookup:
        return cls(IdentityStatus.FOUND, username)

    @classmethod
    def not_found(cls, username: str) -> IdentityLookup:
        return cls(IdentityStatus.NOT_FOUND, username)

    @classmethod
    def failed(cls, username: str, error: BaseException) -> IdentityLookup:
        return cls(IdentityStatus.FAILED, username, error)


@runtime_checkable
class IdentityResolver(Protocol):
    """Looks up whether a username already has a known authorization."""

    async def resolve(self, username: str) -> IdentityLookup: ...


@runtime_checkable
class HubConnection(Protocol):
    """Creates records on the hub org. Rejections are raised."""

    async def create(self, sobject_type: str, record: dict[str, Any]) -> dict[str, Any]: ...


class RemoteCreateError(Exception):
    """Structured rejection of a record creation by the hub org."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        fields: Sequence[str] = (),
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.fields = list(fields)
        self.status_code = status_code

    @classmethod
    def from_response(cls, resp: httpx.Response) -> RemoteCreateError:
        """Read the platform's error list (``[{message, errorCode, fields}]``)."""
        try:
            body = resp.json()
        except ValueError:
            body = None

        fallback = resp.text.strip() or f"HTTP {resp.status_code} {resp.reason_phrase}"

        if isinstance(body, list) and body and isinstance(body[0], dict):
            body = body[0]
        if isinstance(body, dict):
            message = str(body.get("message") or "").strip()
            return cls(
                message or fallback,
                error_code=body.get("errorCode"),
                fields=_field_names(body.get("fields")),
                status_code=resp.status_code,
            )

        return cls(fallback, status_code=resp.status_code)


def _field_names(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        return [str(field) for field in value]
    return []


class RestHubConnection:
    """REST client creating sObject records on the hub org."""

    def __init__(
        self,
        instance_url: str,
        access_token: str,
        api_version: str = "59.0",
        timeout: float = 30.0,
    ) -> None:
        self.base_url = instance_url.rstrip("/")
        self.api_version = api_version.lstrip("v")
        self.timeout = timeout
        self._access_token = access_token
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> RestHubConnection:
        if not settings.instance_url or not settings.access_token:
            raise ValueError(
                "Hub org connection not configured "
                "(SCRATCH_ORG_INSTANCE_URL / SCRATCH_ORG_ACCESS_TOKEN)"
            )
        return cls(
            settings.instance_url,
            settings.access_token,
            api_version=settings.api_version,
            timeout=settings.http_timeout_seconds,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    def _sobject_path(self, sobject_type: str) -> str:
        return f"/services/data/v{self.api_version}/sobjects/{sobject_type}/"

    async def create(self, sobject_type: str, record: dict[str, Any]) -> dict[str, Any]:
        client = await self._get_client()
        resp = await client.post(self._sobject_path(sobject_type), json=record)
        if resp.is_success:
            try:
                result = resp.json()
            except ValueError:
                # Record was created; only the response body is unusable.
                logger.debug(
                    "hub_record_create_unparsed_body",
                    sobject_type=sobject_type,
                    status_code=resp.status_code,
                )
                return {}
            return result if isinstance(result, dict) else {}

        error = RemoteCreateError.from_response(resp)
        logger.debug(
            "hub_record_create_rejected",
            sobject_type=sobject_type,
            status_code=resp.status_code,
            error_code=error.error_code,
        )
        raise error

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> RestHubConnection:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class HubOrg:
    """Privileged parent org used to create scratch orgs."""

    def __init__(
        self,
        connection: HubConnection,
        identity_resolver: IdentityResolver,
        username: str | None = None,
    ):
        self.connection = connection
        self.identity_resolver = identity_resolver
        self.username = username

    def get_connection(self) -> HubConnection:
        return self.connection

    async def resolve_identity(self, username: str) -> IdentityLookup:
        """Resolve ``username``; a resolver that raises yields a FAILED lookup."""
        try:
            return await self.identity_resolver.resolve(username)
        except Exception as e:
            logger.debug("identity_resolver_raised", username=username, error=str(e))
            return IdentityLookup.failed(username, e)
