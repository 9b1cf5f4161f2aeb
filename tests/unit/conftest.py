"""Shared fixtures for scratch_org unit tests."""

import logging
from typing import Any

import pytest
import structlog

from scratch_org.config import get_settings
from scratch_org.hub import HubOrg, IdentityLookup
from scratch_org.models import ScratchOrgRequest

TEMPLATE_SCRATCH_ORG_INFO: dict[str, Any] = {
    "LoginUrl": "https://login.salesforce.com",
    "Snapshot": "1234",
    "AuthCode": "1234",
    "Status": "New",
    "SignupEmail": "sfdx-cli@salesforce.com",
    "SignupUsername": "sfdx-cli",
    "Username": "sfdx-cli",
    "SignupInstance": "http://salesforce.com",
}


class FakeHubConnection:
    """In-memory hub connection for unit tests."""

    def __init__(self):
        self.created: list[tuple[str, dict[str, Any]]] = []
        self.fail_exception: Exception | None = None

    async def create(self, sobject_type: str, record: dict[str, Any]) -> dict[str, Any]:
        self.created.append((sobject_type, record))
        if self.fail_exception is not None:
            raise self.fail_exception
        return {"id": f"2SR00000000000{len(self.created)}", "success": True, "errors": []}


class FakeIdentityResolver:
    """Resolver returning a configurable lookup result."""

    def __init__(self):
        self.known: set[str] = set()
        self.fail_exception: Exception | None = None
        self.calls: list[str] = []

    async def resolve(self, username: str) -> IdentityLookup:
        self.calls.append(username)
        if self.fail_exception is not None:
            return IdentityLookup.failed(username, self.fail_exception)
        if username in self.known:
            return IdentityLookup.found(username)
        return IdentityLookup.not_found(username)


@pytest.fixture
def connection():
    return FakeHubConnection()


@pytest.fixture
def resolver():
    return FakeIdentityResolver()


@pytest.fixture
def hub_org(connection, resolver):
    return HubOrg(connection, resolver, username="hub@example.com")


@pytest.fixture
def template_data():
    return dict(TEMPLATE_SCRATCH_ORG_INFO)


@pytest.fixture
def template_request(template_data):
    return ScratchOrgRequest.model_validate(template_data)


@pytest.fixture(autouse=True)
def reset_state():
    """Drop cached settings and logging context between tests."""
    get_settings.cache_clear()
    structlog.contextvars.clear_contextvars()
    yield
    get_settings.cache_clear()
    structlog.contextvars.clear_contextvars()
    package_logger = logging.getLogger("scratch_org")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
    package_logger.propagate = True
