"""
Settings API Endpoints

Admin profile shown and edited on the settings page.
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from src.repositories import UserRepository
from src.schemas.orders import AdminProfile, ProfileUpdate
from src.serving.api.dependencies import get_user_repository

router = APIRouter()


@router.get("/profile/{profile_id}", response_model=AdminProfile)
async def get_profile(
    profile_id: UUID,
    repo: UserRepository = Depends(get_user_repository),
) -> AdminProfile:
    return await repo.get_profile(profile_id)


@router.put("/profile/{profile_id}", response_model=AdminProfile)
async def update_profile(
    profile_id: UUID,
    data: ProfileUpdate,
    repo: UserRepository = Depends(get_user_repository),
) -> AdminProfile:
    """Save the settings form."""
    return await repo.update_profile(profile_id, data)
