"""Submission of scratch org requests to a hub org."""

from __future__ import annotations

import uuid

import structlog

from scratch_org.classifier import classify_failure, normalize_failure
from scratch_org.exceptions import UsernameExistsError
from scratch_org.hub import SCRATCH_ORG_INFO, HubOrg, IdentityStatus
from scratch_org.logging_config import get_logger, get_request_id
from scratch_org.messages import SCRATCH_ORG_ERROR_CODES, load_messages
from scratch_org.models import ScratchOrgRequest
from scratch_org.settings_generator import SettingsGenerator

logger = get_logger(__name__)


async def check_org_doesnt_exist(hub_org: HubOrg, request: ScratchOrgRequest) -> None:
    """Raise ``UsernameExistsError`` if the requested username is already authorized.

    Lookup failures other than "not found" do not block the request.
    """
    if not request.has_username():
        return

    username = request.username.lower()
    lookup = await hub_org.resolve_identity(username)

    if lookup.status is IdentityStatus.FOUND:
        raise UsernameExistsError.from_catalog(
            load_messages(SCRATCH_ORG_ERROR_CODES),
            "C-1007",
            [request.username],
            data={"username": request.username},
        )
    if lookup.status is IdentityStatus.FAILED:
        logger.warning(
            "identity_lookup_failed",
            username=username,
            error=str(lookup.error) if lookup.error else None,
        )


async def request_scratch_org_creation(
    hub_org: HubOrg,
    request: ScratchOrgRequest,
    settings_generator: SettingsGenerator,
) -> bool:
    """Create a ScratchOrgInfo record on the hub org.

    Steps: username pre-check, preference validation, record creation,
    failure classification. Every failure is raised as a ``ScratchOrgError``.
    Events carry the request ID already bound by the caller, or a new one.

    Returns:
        True once the hub org accepted the record.
    """
    request_id = get_request_id() or str(uuid.uuid4())
    with structlog.contextvars.bound_contextvars(request_id=request_id):
        await check_org_doesnt_exist(hub_org, request)
        await settings_generator.extract(request)

        record = request.to_record()
        logger.info(
            "scratch_org_info_submitting",
            hub=hub_org.username,
            edition=request.edition,
            username=request.username,
        )

        try:
            result = await hub_org.get_connection().create(SCRATCH_ORG_INFO, record)
        except Exception as e:
            failure = normalize_failure(e)
            logger.warning("scratch_org_info_create_failed", failure_kind=failure.kind)
            raise classify_failure(failure) from e

        logger.info(
            "scratch_org_info_created",
            record_id=result.get("id") if isinstance(result, dict) else None,
        )
        return True
