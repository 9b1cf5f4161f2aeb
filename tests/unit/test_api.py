"""Tests for request_scratch_org_creation."""

import httpx
import pytest

from scratch_org.api import request_scratch_org_creation
from scratch_org.auth_store import FileAuthStore
from scratch_org.exceptions import (
    DeprecatedPrefFormatError,
    DuplicateSettingsError,
    ErrorKind,
    FieldsMissingError,
    ScratchOrgCreateError,
    UsernameExistsError,
)
from scratch_org.hub import HubOrg, RemoteCreateError
from scratch_org.logging_config import bind_request_id, get_request_id
from scratch_org.messages import SCRATCH_ORG_ERROR_CODES, SCRATCH_ORG_INFO_API, load_messages
from scratch_org.models import ScratchOrgRequest
from scratch_org.settings_generator import SettingsGenerator

messages = load_messages(SCRATCH_ORG_INFO_API)
error_code_messages = load_messages(SCRATCH_ORG_ERROR_CODES)


class RaisingResolver:
    async def resolve(self, username):
        raise ConnectionError("lookup glitch")


class RequestIdRecordingConnection:
    def __init__(self):
        self.request_ids = []

    async def create(self, sobject_type, record):
        self.request_ids.append(get_request_id())
        return {"id": "2SR000000000001", "success": True, "errors": []}


class TestSuccessPath:
    @pytest.mark.asyncio
    async def test_creates_record(self, hub_org, template_request, connection, resolver):
        result = await request_scratch_org_creation(
            hub_org, template_request, SettingsGenerator()
        )

        assert result is True
        assert resolver.calls == ["sfdx-cli"]
        sobject_type, record = connection.created[0]
        assert sobject_type == "ScratchOrgInfo"
        assert record["Username"] == "sfdx-cli"
        assert record["SignupEmail"] == "sfdx-cli@salesforce.com"

    @pytest.mark.asyncio
    async def test_no_username_skips_precheck(self, hub_org, template_data, resolver):
        del template_data["Username"]
        request = ScratchOrgRequest.model_validate(template_data)

        result = await request_scratch_org_creation(hub_org, request, SettingsGenerator())

        assert result is True
        assert resolver.calls == []

    @pytest.mark.asyncio
    async def test_empty_username_skips_precheck(self, hub_org, template_data, resolver):
        template_data["Username"] = ""
        request = ScratchOrgRequest.model_validate(template_data)

        result = await request_scratch_org_creation(hub_org, request, SettingsGenerator())

        assert result is True
        assert resolver.calls == []

    @pytest.mark.asyncio
    async def test_username_lookup_is_lowercased(self, hub_org, template_data, resolver):
        template_data["Username"] = "Admin@Example.COM"
        request = ScratchOrgRequest.model_validate(template_data)

        await request_scratch_org_creation(hub_org, request, SettingsGenerator())

        assert resolver.calls == ["admin@example.com"]

    @pytest.mark.asyncio
    async def test_identity_lookup_failure_is_not_fatal(
        self, hub_org, template_request, connection, resolver
    ):
        resolver.fail_exception = PermissionError("auth dir not readable")

        result = await request_scratch_org_creation(
            hub_org, template_request, SettingsGenerator()
        )

        assert result is True
        assert len(connection.created) == 1

    @pytest.mark.asyncio
    async def test_raising_resolver_is_not_fatal(self, template_request, connection):
        hub = HubOrg(connection, RaisingResolver())

        result = await request_scratch_org_creation(hub, template_request, SettingsGenerator())

        assert result is True
        assert len(connection.created) == 1

    @pytest.mark.asyncio
    async def test_auth_file_os_error_is_not_fatal(self, tmp_path, template_data, connection):
        template_data["Username"] = "u" * 300 + "@example.com"
        request = ScratchOrgRequest.model_validate(template_data)
        hub = HubOrg(connection, FileAuthStore(tmp_path))

        result = await request_scratch_org_creation(hub, request, SettingsGenerator())

        assert result is True
        assert len(connection.created) == 1

    @pytest.mark.asyncio
    async def test_uses_caller_request_id(self, resolver, template_request):
        connection = RequestIdRecordingConnection()
        hub = HubOrg(connection, resolver)
        bind_request_id("req-cli")

        await request_scratch_org_creation(hub, template_request, SettingsGenerator())

        assert connection.request_ids == ["req-cli"]
        assert get_request_id() == "req-cli"

    @pytest.mark.asyncio
    async def test_generates_request_id_for_the_call(self, resolver, template_request):
        connection = RequestIdRecordingConnection()
        hub = HubOrg(connection, resolver)

        await request_scratch_org_creation(hub, template_request, SettingsGenerator())

        assert connection.request_ids[0]
        assert get_request_id() is None

    @pytest.mark.asyncio
    async def test_settings_are_not_submitted(self, hub_org, template_data, connection):
        template_data["settings"] = {
            "lightningExperienceSettings": {"enableS1DesktopEnabled": True}
        }
        template_data["objectSettings"] = {"account": {"sharingModel": "private"}}
        request = ScratchOrgRequest.model_validate(template_data)
        generator = SettingsGenerator()

        await request_scratch_org_creation(hub_org, request, generator)

        _, record = connection.created[0]
        assert "settings" not in record
        assert "objectSettings" not in record
        assert generator.has_settings()

    @pytest.mark.asyncio
    async def test_same_request_twice_gives_same_outcome(self, hub_org, template_request):
        first = await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())
        second = await request_scratch_org_creation(
            hub_org, template_request, SettingsGenerator()
        )
        assert first is second is True


class TestUsernameExists:
    @pytest.mark.asyncio
    async def test_existing_username_raises(self, hub_org, template_request, resolver, connection):
        resolver.known.add("sfdx-cli")

        with pytest.raises(UsernameExistsError) as exc_info:
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())

        error = exc_info.value
        assert error.name == "C-1007"
        assert error.kind is ErrorKind.CONFLICT
        assert error.data == {"username": "sfdx-cli"}
        assert error_code_messages.get_message("C-1007", ["sfdx-cli"]) in str(error)
        assert error.actions
        assert connection.created == []

    @pytest.mark.asyncio
    async def test_existing_username_wins_over_remote_failure(
        self, hub_org, template_request, resolver, connection
    ):
        resolver.known.add("sfdx-cli")
        connection.fail_exception = RuntimeError("never reached")

        with pytest.raises(UsernameExistsError):
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())


class TestSettingsValidation:
    @pytest.mark.asyncio
    async def test_duplicate_settings(self, hub_org, template_data, connection):
        template_data["settings"] = {"a": "b"}
        template_data["orgPreferences"] = {"preference": True}
        request = ScratchOrgRequest.model_validate(template_data)

        with pytest.raises(DuplicateSettingsError) as exc_info:
            await request_scratch_org_creation(hub_org, request, SettingsGenerator())

        error = exc_info.value
        assert error.name == "signupDuplicateSettingsSpecified"
        assert error.message == messages.get_message("signupDuplicateSettingsSpecified")
        assert error.kind is ErrorKind.INPUT
        assert error.cause is None
        assert connection.created == []

    @pytest.mark.asyncio
    async def test_deprecated_pref_format(self, hub_org, template_data, connection):
        template_data["orgPreferences"] = {"preference": True}
        request = ScratchOrgRequest.model_validate(template_data)

        with pytest.raises(DeprecatedPrefFormatError) as exc_info:
            await request_scratch_org_creation(hub_org, request, SettingsGenerator())

        assert messages.get_message("deprecatedPrefFormat") in str(exc_info.value)
        assert exc_info.value.exit_code == 2  # noqa: PLR2004
        assert connection.created == []


class TestRemoteFailures:
    @pytest.mark.asyncio
    async def test_required_field_missing(self, hub_org, template_request, connection):
        connection.fail_exception = RemoteCreateError(
            "Required fields are missing",
            error_code="REQUIRED_FIELD_MISSING",
            fields=["error-field"],
        )

        with pytest.raises(FieldsMissingError) as exc_info:
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())

        error = exc_info.value
        assert "error-field" in str(error)
        assert str(error) == messages.get_message("signupFieldsMissing", ["error-field"])
        assert error.cause is connection.fail_exception

    @pytest.mark.asyncio
    async def test_required_fields_keep_order(self, hub_org, template_request, connection):
        connection.fail_exception = RemoteCreateError(
            "Missing", error_code="REQUIRED_FIELD_MISSING", fields=["Edition", "AdminEmail"]
        )

        with pytest.raises(FieldsMissingError) as exc_info:
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())

        assert "[Edition,AdminEmail]" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unstructured_error_keeps_message(self, hub_org, template_request, connection):
        connection.fail_exception = RuntimeError("MyError")

        with pytest.raises(ScratchOrgCreateError) as exc_info:
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())

        assert "MyError" in str(exc_info.value)
        assert exc_info.value.kind is ErrorKind.REMOTE

    @pytest.mark.asyncio
    async def test_transport_error_is_classified(self, hub_org, template_request, connection):
        connection.fail_exception = httpx.ConnectError("connection refused")

        with pytest.raises(ScratchOrgCreateError) as exc_info:
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())

        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rejection_body_without_message_is_kept(
        self, hub_org, template_request, connection
    ):
        connection.fail_exception = RemoteCreateError.from_response(
            httpx.Response(
                httpx.codes.UNAUTHORIZED,
                json={"error": "invalid_grant", "error_description": "expired access token"},
            )
        )

        with pytest.raises(ScratchOrgCreateError) as exc_info:
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())

        assert exc_info.value.name == "signupFailed"
        assert "invalid_grant" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_without_message_gets_fallback(
        self, hub_org, template_request, connection
    ):
        connection.fail_exception = RuntimeError()

        with pytest.raises(ScratchOrgCreateError) as exc_info:
            await request_scratch_org_creation(hub_org, template_request, SettingsGenerator())

        assert exc_info.value.name == "signupFailedUnknown"
        assert "RuntimeError" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_classification_is_stable(self, hub_org, template_request, connection):
        connection.fail_exception = RuntimeError("MyError")
        outcomes = []
        for _ in range(2):
            with pytest.raises(ScratchOrgCreateError) as exc_info:
                await request_scratch_org_creation(
                    hub_org, template_request, SettingsGenerator()
                )
            outcomes.append((exc_info.value.name, str(exc_info.value)))

        assert outcomes[0] == outcomes[1]
