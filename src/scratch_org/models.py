"""Scratch org request model.

Field aliases are the ScratchOrgInfo field names on the hub org. The three
preference sections keep their lower-camel names because they are consumed
locally and never submitted.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

PREFERENCE_SECTIONS = frozenset({"settings", "orgPreferences", "objectSettings"})


def _upper_first(key: str) -> str:
    return key[:1].upper() + key[1:]


class ScratchOrgRequest(BaseModel):
    """Payload describing the scratch org to create."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    login_url: str | None = Field(default=None, alias="LoginUrl")
    snapshot: str | None = Field(default=None, alias="Snapshot")
    auth_code: str | None = Field(default=None, alias="AuthCode")
    status: str | None = Field(default=None, alias="Status")
    signup_email: str | None = Field(default=None, alias="SignupEmail")
    signup_username: str | None = Field(default=None, alias="SignupUsername")
    username: str | None = Field(default=None, alias="Username")
    signup_instance: str | None = Field(default=None, alias="SignupInstance")

    edition: str | None = Field(default=None, alias="Edition")
    org_name: str | None = Field(default=None, alias="OrgName")
    admin_email: str | None = Field(default=None, alias="AdminEmail")
    country: str | None = Field(default=None, alias="Country")
    language: str | None = Field(default=None, alias="Language")
    features: str | list[str] | None = Field(default=None, alias="Features")
    description: str | None = Field(default=None, alias="Description")
    duration_days: int | None = Field(default=None, ge=1, le=30, alias="DurationDays")
    has_sample_data: bool | None = Field(default=None, alias="HasSampleData")
    namespace: str | None = Field(default=None, alias="Namespace")
    release: str | None = Field(default=None, alias="Release")
    source_org: str | None = Field(default=None, alias="SourceOrg")
    connected_app_consumer_key: str | None = Field(
        default=None, alias="ConnectedAppConsumerKey"
    )
    connected_app_callback_url: str | None = Field(
        default=None, alias="ConnectedAppCallbackUrl"
    )

    settings: dict[str, Any] | None = Field(default=None, alias="settings")
    org_preferences: dict[str, bool] | None = Field(default=None, alias="orgPreferences")
    object_settings: dict[str, Any] | None = Field(default=None, alias="objectSettings")

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        """Upper-case the first letter of ScratchOrgInfo keys (``orgName`` -> ``OrgName``)."""
        if not isinstance(data, Mapping):
            return data
        normalized = {}
        for key, value in data.items():
            if key in cls.model_fields or key in PREFERENCE_SECTIONS:
                normalized[key] = value
            else:
                normalized[_upper_first(str(key))] = value
        return normalized

    @classmethod
    def from_definition(
        cls, data: Mapping[str, Any], overrides: Mapping[str, Any] | None = None
    ) -> ScratchOrgRequest:
        """Build a request from a scratch org definition, applying overrides on top."""
        merged = dict(data)
        if overrides:
            merged.update(overrides)
        return cls.model_validate(merged)

    def has_username(self) -> bool:
        return bool(self.username)

    def to_record(self) -> dict[str, Any]:
        """ScratchOrgInfo record to submit, without the local preference sections."""
        record = self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={"settings", "org_preferences", "object_settings"},
        )
        if isinstance(self.features, list):
            record["Features"] = ";".join(self.features)
        return record
