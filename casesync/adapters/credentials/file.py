"""File-backed credential store adapter.

Implements CredentialStorePort by reading named basic-auth profiles from
a JSON document of the form::

    {"profiles": [{"id": "...", "name": "...", "username": "...", "password": "..."}]}
"""

import json
import logging
from pathlib import Path

from casesync.core.models import AuthProfile
from casesync.core.ports import CredentialStorePort

logger = logging.getLogger(__name__)


class FileCredentialStore(CredentialStorePort):
    """Basic-auth profiles loaded once from a JSON file."""

    def __init__(self, path: str):
        """Load profiles from disk.

        A missing file yields an empty store; the synchronizer then decides
        whether an unresolved profile is acceptable.

        Args:
            path: Path to the JSON credentials file.

        Raises:
            ValueError: If the file exists but is not a valid profiles document.
        """
        self.path = Path(path)
        self._profiles: dict[str, AuthProfile] = {}

        if not self.path.exists():
            logger.warning(f"Credentials file not found: {self.path}")
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid credentials file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid credentials file {self.path}: expected an object")

        for entry in data.get("profiles", []):
            try:
                profile = AuthProfile(
                    id=str(entry.get("id") or entry["name"]),
                    name=entry["name"],
                    username=entry["username"],
                    password=entry.get("password", ""),
                )
            except (KeyError, TypeError, AttributeError) as e:
                raise ValueError(
                    f"Invalid profile entry in {self.path}: missing {e}"
                ) from e
            self._profiles[profile.name] = profile

        logger.info(f"Loaded {len(self._profiles)} credential profile(s) from {self.path}")

    async def find_profile(self, name: str) -> AuthProfile | None:
        """Look up a profile by its exact name."""
        return self._profiles.get(name)
