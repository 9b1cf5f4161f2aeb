"""Errors raised while requesting a scratch org.

Every failure leaving the orchestrator is a ``ScratchOrgError``. The ``kind``
and ``exit_code`` class attributes let callers tell input problems apart from
username conflicts and from failures reported by the hub org.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from scratch_org.messages import MessageCatalog


class ErrorKind(str, Enum):
    """Coarse classification of a scratch org error."""

    INPUT = "input"
    CONFLICT = "conflict"
    REMOTE = "remote"


class ScratchOrgError(Exception):
    """Base error with a catalog name, remediation actions and an exit code."""

    kind: ErrorKind = ErrorKind.REMOTE
    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        actions: Sequence[str] = (),
        data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.name = name or type(self).__name__
        self.actions = list(actions)
        self.data = data or {}

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    @classmethod
    def from_catalog(
        cls,
        catalog: MessageCatalog,
        key: str,
        tokens: Sequence[Any] = (),
        data: dict[str, Any] | None = None,
    ) -> ScratchOrgError:
        """Build the error from a catalog entry, using the key as its name."""
        return cls(
            catalog.get_message(key, tokens),
            name=key,
            actions=catalog.get_actions(key, tokens),
            data=data,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "message": self.message,
            "actions": self.actions,
            "exit_code": self.exit_code,
            "data": self.data,
        }


class UsernameExistsError(ScratchOrgError):
    """The requested username already has a local authorization."""

    kind = ErrorKind.CONFLICT
    exit_code = 3


class DuplicateSettingsError(ScratchOrgError):
    """Both ``settings`` and ``orgPreferences`` were given."""

    kind = ErrorKind.INPUT
    exit_code = 2


class DeprecatedPrefFormatError(ScratchOrgError):
    """Only the legacy ``orgPreferences`` section was given."""

    kind = ErrorKind.INPUT
    exit_code = 2


class FieldsMissingError(ScratchOrgError):
    """The hub org rejected the record because required fields are missing."""

    kind = ErrorKind.INPUT
    exit_code = 2


class ScratchOrgCreateError(ScratchOrgError):
    """Any other rejection of the ScratchOrgInfo record."""

    kind = ErrorKind.REMOTE
    exit_code = 1
