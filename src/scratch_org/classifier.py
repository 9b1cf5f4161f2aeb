"""Classification of ScratchOrgInfo creation failures.

A raised exception is first normalized into one ``RemoteFailure`` variant,
then mapped to exactly one ``ScratchOrgError``. Field-level failures win over
plain messages, and a message is never dropped.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from scratch_org.exceptions import FieldsMissingError, ScratchOrgCreateError, ScratchOrgError
from scratch_org.hub import RemoteCreateError
from scratch_org.messages import SCRATCH_ORG_INFO_API, MessageCatalog, load_messages

REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"


class FieldsMissingFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["fields_missing"] = "fields_missing"
    error_code: str = REQUIRED_FIELD_MISSING
    fields: list[str] = Field(min_length=1)
    message: str = ""


class MessageFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["message"] = "message"
    error_code: str | None = None
    message: str = Field(min_length=1)


class OpaqueFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["opaque"] = "opaque"
    error_type: str = "Exception"


RemoteFailure = Annotated[
    FieldsMissingFailure | MessageFailure | OpaqueFailure,
    Field(discriminator="kind"),
]


def normalize_failure(exc: BaseException) -> RemoteFailure:
    """Turn whatever the hub connection raised into a ``RemoteFailure``."""
    error_code = None
    fields: list[str] = []
    if isinstance(exc, RemoteCreateError):
        error_code = exc.error_code
        fields = [str(f) for f in exc.fields]
        message = exc.message.strip()
    else:
        message = str(exc).strip()

    if error_code == REQUIRED_FIELD_MISSING and fields:
        return FieldsMissingFailure(fields=fields, message=message)
    if message:
        return MessageFailure(error_code=error_code, message=message)
    return OpaqueFailure(error_type=type(exc).__name__)


def classify_failure(
    failure: RemoteFailure, catalog: MessageCatalog | None = None
) -> ScratchOrgError:
    """Map a normalized failure to the error raised to the caller."""
    catalog = catalog or load_messages(SCRATCH_ORG_INFO_API)

    if isinstance(failure, FieldsMissingFailure):
        return FieldsMissingError.from_catalog(
            catalog,
            "signupFieldsMissing",
            [",".join(failure.fields)],
            data={"fields": list(failure.fields)},
        )
    if isinstance(failure, MessageFailure):
        return ScratchOrgCreateError.from_catalog(
            catalog,
            "signupFailed",
            [failure.message],
            data={"error_code": failure.error_code},
        )
    return ScratchOrgCreateError.from_catalog(
        catalog,
        "signupFailedUnknown",
        [failure.error_type],
        data={"error_type": failure.error_type},
    )
