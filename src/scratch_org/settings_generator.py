"""Extraction of the preference sections of a scratch org request."""

from __future__ import annotations

from enum import Enum
from typing import Any

from scratch_org.exceptions import DeprecatedPrefFormatError, DuplicateSettingsError
from scratch_org.logging_config import get_logger
from scratch_org.messages import SCRATCH_ORG_INFO_API, MessageCatalog, load_messages
from scratch_org.models import ScratchOrgRequest

logger = get_logger(__name__)


class SettingsShape(str, Enum):
    """Outcome of checking which preference sections a request uses."""

    OK = "ok"
    DUPLICATE_SETTINGS = "duplicate_settings"
    DEPRECATED_PREF_FORMAT = "deprecated_pref_format"


def validate_settings_shape(request: ScratchOrgRequest) -> SettingsShape:
    """Check that the new and the legacy preference formats are not mixed.

    A section counts as present whenever it is set, even to an empty map.
    """
    has_new_style = request.settings is not None or request.object_settings is not None
    has_legacy = request.org_preferences is not None

    if has_legacy and has_new_style:
        return SettingsShape.DUPLICATE_SETTINGS
    if has_legacy:
        return SettingsShape.DEPRECATED_PREF_FORMAT
    return SettingsShape.OK


class SettingsGenerator:
    """Collects ``settings`` and ``objectSettings`` from a request."""

    def __init__(self, catalog: MessageCatalog | None = None):
        self.catalog = catalog or load_messages(SCRATCH_ORG_INFO_API)
        self.settings: dict[str, Any] = {}
        self.object_settings: dict[str, Any] = {}

    async def extract(self, request: ScratchOrgRequest) -> SettingsGenerator:
        """Validate the preference sections and keep the new-style ones.

        Raises:
            DuplicateSettingsError: both ``settings`` and ``orgPreferences`` given.
            DeprecatedPrefFormatError: only ``orgPreferences`` given.
        """
        shape = validate_settings_shape(request)

        if shape is SettingsShape.DUPLICATE_SETTINGS:
            raise DuplicateSettingsError.from_catalog(
                self.catalog, "signupDuplicateSettingsSpecified"
            )
        if shape is SettingsShape.DEPRECATED_PREF_FORMAT:
            raise DeprecatedPrefFormatError.from_catalog(
                self.catalog,
                "deprecatedPrefFormat",
                data={"preferences": sorted(request.org_preferences or {})},
            )

        self.settings = dict(request.settings or {})
        self.object_settings = dict(request.object_settings or {})
        logger.debug(
            "scratch_org_settings_extracted",
            settings=sorted(self.settings),
            object_settings=sorted(self.object_settings),
        )
        return self

    def has_settings(self) -> bool:
        return bool(self.settings or self.object_settings)
