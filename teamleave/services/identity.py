from __future__ import annotations

import secrets
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable
from urllib.parse import urlencode

from pydantic import BaseModel

from teamleave.config import get_settings


class IssuedResetLink(BaseModel):
    email: str
    link: str
    issued_at: datetime


@runtime_checkable
class IdentityProvider(Protocol):
    """Interface for the external identity service that owns credentials."""

    async def generate_password_reset_link(self, email: str) -> str:
        """Return a one-time password reset URL for the account with this email."""
        ...


class InMemoryIdentityProvider:
    """In-memory stub implementation for development."""

    def __init__(self, base_url: str | None = None) -> None:
        self._base_url = base_url
        self.issued: list[IssuedResetLink] = []

    async def generate_password_reset_link(self, email: str) -> str:
        base_url = self._base_url or get_settings().password_reset_base_url
        token = secrets.token_urlsafe(32)
        link = f"{base_url}?{urlencode({'token': token, 'email': email})}"
        self.issued.append(IssuedResetLink(email=email, link=link, issued_at=datetime.now(UTC)))
        return link


_identity_provider: IdentityProvider = InMemoryIdentityProvider()


def get_identity_provider() -> IdentityProvider:
    return _identity_provider


def set_identity_provider(provider: IdentityProvider) -> None:
    """Override the provider (for testing or production wiring)."""
    global _identity_provider
    _identity_provider = provider
