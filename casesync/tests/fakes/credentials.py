"""Fake CredentialStorePort implementation for testing."""

from casesync.core.models import AuthProfile
from casesync.core.ports import CredentialStorePort


class FakeCredentialStorePort(CredentialStorePort):
    """In-memory credential store that records every lookup."""

    def __init__(self, profiles: list[AuthProfile] | None = None):
        self.profiles: dict[str, AuthProfile] = {p.name: p for p in profiles or []}
        self.lookups: list[str] = []

    def add_profile(self, profile: AuthProfile) -> None:
        self.profiles[profile.name] = profile

    async def find_profile(self, name: str) -> AuthProfile | None:
        self.lookups.append(name)
        return self.profiles.get(name)
