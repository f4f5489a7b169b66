"""Client aggregate: the buyer a session is authenticated as."""

from __future__ import annotations

from dataclasses import dataclass

from portal.domain.model.value_objects import ClientCategory


def normalize_username(username: str) -> str:
    """Usernames are compared case-insensitively everywhere."""
    return username.strip().lower()


@dataclass(frozen=True)
class Client:

    username: str
    category: ClientCategory
    company_name: str
    address: str = ""
    contact_number: str = ""
    email: str = ""

    @property
    def client_id(self) -> str:
        return normalize_username(self.username)

    def missing_profile_fields(self) -> list[str]:
        """Names of the profile fields an order cannot be placed without."""
        missing = []
        if not self.username or not self.username.strip():
            missing.append("username")
        if not self.company_name or not self.company_name.strip():
            missing.append("company name")
        return missing
