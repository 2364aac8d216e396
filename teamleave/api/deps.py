# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header

from teamleave.db import SessionDep
from teamleave.exceptions import AuthenticationError
from teamleave.schemas.auth import ActorContext
from teamleave.services.roles import list_roles


async def get_actor_context(
    session: SessionDep,
    x_user_id: uuid.UUID | None = Header(default=None),
) -> ActorContext:
    """Resolve the acting user from the dev auth header and load their current roles."""
    if x_user_id is None:
        raise AuthenticationError("Missing X-User-Id header")
    roles = await list_roles(session, x_user_id)
    if not roles:
        raise AuthenticationError("Unknown user", context={"user_id": str(x_user_id)})
    return ActorContext(user_id=x_user_id, roles=frozenset(roles))


ActorDep = Annotated[ActorContext, Depends(get_actor_context)]
