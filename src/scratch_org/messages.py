"""Message catalog backed by YAML bundles shipped with the package.

Usage:
    from scratch_org.messages import load_messages

    messages = load_messages("scratch_org_info_api")
    messages.get_message("signupFieldsMissing", ["Edition"])
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from importlib import resources
from typing import Any

import yaml
from pydantic import BaseModel, Field

BUNDLE_DIR = "bundles"

SCRATCH_ORG_INFO_API = "scratch_org_info_api"
SCRATCH_ORG_ERROR_CODES = "scratch_org_error_codes"


class MessageEntry(BaseModel):
    """One catalog entry: a message template and optional remediation actions."""

    message: str
    actions: list[str] = Field(default_factory=list)


def _format(template: str, tokens: Sequence[Any], bundle: str, key: str) -> str:
    placeholders = template.count("%s")
    if len(tokens) < placeholders:
        raise ValueError(
            f"Message {bundle}:{key} expects {placeholders} token(s), got {len(tokens)}"
        )
    if not placeholders:
        return template
    return template % tuple(str(t) for t in tokens[:placeholders])


class MessageCatalog:
    """Messages of a single bundle, keyed by message id."""

    def __init__(self, bundle: str, entries: dict[str, MessageEntry]):
        self.bundle = bundle
        self._entries = entries

    @classmethod
    def from_mapping(cls, bundle: str, data: dict[str, Any]) -> MessageCatalog:
        entries = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = {"message": value}
            entries[str(key)] = MessageEntry.model_validate(value)
        return cls(bundle, entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    def _entry(self, key: str) -> MessageEntry:
        try:
            return self._entries[key]
        except KeyError:
            raise KeyError(f"Missing message {self.bundle}:{key}") from None

    def get_message(self, key: str, tokens: Sequence[Any] = ()) -> str:
        return _format(self._entry(key).message, tokens, self.bundle, key)

    def get_actions(self, key: str, tokens: Sequence[Any] = ()) -> list[str]:
        return [
            _format(action, tokens, self.bundle, key) for action in self._entry(key).actions
        ]


@lru_cache
def load_messages(bundle: str) -> MessageCatalog:
    """Load and cache a bundle from the package's ``bundles`` directory."""
    resource = resources.files("scratch_org") / BUNDLE_DIR / f"{bundle}.yaml"
    if not resource.is_file():
        raise FileNotFoundError(f"Message bundle not found: {bundle}")

    with resource.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return MessageCatalog.from_mapping(bundle, data)
