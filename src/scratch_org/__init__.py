from .api import request_scratch_org_creation
from .exceptions import (
    DeprecatedPrefFormatError,
    DuplicateSettingsError,
    ErrorKind,
    FieldsMissingError,
    ScratchOrgCreateError,
    ScratchOrgError,
    UsernameExistsError,
)
from .hub import HubOrg, IdentityLookup, IdentityStatus, RemoteCreateError, RestHubConnection
from .models import ScratchOrgRequest
from .settings_generator import SettingsGenerator

__all__ = [
    "request_scratch_org_creation",
    "ScratchOrgRequest",
    "SettingsGenerator",
    "HubOrg",
    "IdentityLookup",
    "IdentityStatus",
    "RemoteCreateError",
    "RestHubConnection",
    "ErrorKind",
    "ScratchOrgError",
    "UsernameExistsError",
    "DuplicateSettingsError",
    "DeprecatedPrefFormatError",
    "FieldsMissingError",
    "ScratchOrgCreateError",
]
