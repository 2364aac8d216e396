# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from teamleave.exceptions import PermissionDeniedError
from teamleave.models.enums import Role


def actor_has_any(roles: Iterable[Role], required: Iterable[Role]) -> bool:
    """Return True when at least one of ``required`` is among ``roles``."""
    return not set(roles).isdisjoint(required)


class ActorContext(BaseModel):
    """The authenticated user performing an operation, with the roles they hold."""

    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    roles: frozenset[Role] = frozenset()

    def has_any(self, *required: Role) -> bool:
        return actor_has_any(self.roles, required)

    def require_any(self, *required: Role, action: str = "perform this action") -> None:
        """Raise PermissionDeniedError unless the actor holds one of ``required``."""
        if not self.has_any(*required):
            allowed = " or ".join(r.value for r in required)
            raise PermissionDeniedError(
                f"Role {allowed} required to {action}",
                context={"required_roles": [r.value for r in required]},
            )

    @property
    def is_reviewer(self) -> bool:
        return self.has_any(Role.APPROVER, Role.ADMIN)
