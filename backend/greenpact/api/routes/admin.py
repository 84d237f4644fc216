"""Admin-only account management endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from greenpact.core.dependencies import get_db, require_admin
from greenpact.core.errors import Forbidden, NotFound
from greenpact.models.user import ROLE_ADMIN, User
from greenpact.schemas.user import RoleUpdate, RoleUpdateResponse, UserRead
from greenpact.services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.put("/users/{user_id}/role", response_model=RoleUpdateResponse)
async def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    session: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> RoleUpdateResponse:
    user = await user_service.get_user(session, user_id)
    if not user:
        raise NotFound("User not found.")
    if user.id == admin.id and payload.new_role != ROLE_ADMIN:
        raise Forbidden("Admins cannot demote themselves. Please use another admin account to change this role.")

    updated = await user_service.update_user_role(session, user, payload.new_role)
    await session.commit()
    # Tokens already issued to this user keep their old role until they expire.
    logger.info("Admin %s set role of user %s to %s", admin.id, updated.id, updated.role)
    return RoleUpdateResponse(
        message=f"User {updated.username}'s role updated to {updated.role}.",
        user=UserRead.model_validate(updated),
    )
