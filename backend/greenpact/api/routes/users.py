"""Profile endpoints for the signed-in user."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from greenpact.core.dependencies import get_current_user, get_db, get_picture_store
from greenpact.core.errors import ValidationError
from greenpact.models.user import User
from greenpact.schemas.auth import MessageResponse
from greenpact.schemas.user import ProfilePictureResponse
from greenpact.services import users as user_service
from greenpact.services.profile_pictures import ProfilePictureStore

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/profile-picture", response_model=ProfilePictureResponse)
async def upload_profile_picture(
    profile_picture: UploadFile = File(..., alias="profilePicture"),
    session: AsyncSession = Depends(get_db),
    store: ProfilePictureStore = Depends(get_picture_store),
    current_user: User = Depends(get_current_user),
) -> ProfilePictureResponse:
    content = await store.read_upload(profile_picture)
    previous = current_user.profile_picture
    stored = store.save(current_user.id, profile_picture.filename, profile_picture.content_type, content)
    if previous and previous != stored:
        store.remove(previous)

    await user_service.set_profile_picture(session, current_user, stored)
    await session.commit()
    return ProfilePictureResponse(message="Profile picture updated successfully.", profile_picture=stored)


@router.delete("/profile-picture", response_model=MessageResponse)
async def delete_profile_picture(
    session: AsyncSession = Depends(get_db),
    store: ProfilePictureStore = Depends(get_picture_store),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if not current_user.profile_picture:
        raise ValidationError("No profile picture to remove.")
    store.remove(current_user.profile_picture)
    await user_service.set_profile_picture(session, current_user, None)
    await session.commit()
    return MessageResponse(message="Profile picture removed successfully.")
