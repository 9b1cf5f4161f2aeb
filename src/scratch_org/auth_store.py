"""Local authorization files used for the username pre-check."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from scratch_org.hub import IdentityLookup
from scratch_org.logging_config import get_logger

logger = get_logger(__name__)


class FileAuthStore:
    """Resolves usernames against ``<directory>/<username>.json`` files."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory).expanduser()

    def path_for(self, username: str) -> Path:
        return self.directory / f"{username}.json"

    async def resolve(self, username: str) -> IdentityLookup:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._resolve, username)

    def _resolve(self, username: str) -> IdentityLookup:
        path = self.path_for(username)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return IdentityLookup.not_found(username)
        except (OSError, ValueError) as e:
            logger.debug("auth_file_unreadable", path=str(path), error=str(e))
            return IdentityLookup.failed(username, e)

        if not isinstance(data, dict):
            return IdentityLookup.failed(
                username, ValueError(f"Authorization file is not a JSON object: {path}")
            )
        return IdentityLookup.found(username)
