from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from social_posts.database import get_db
from social_posts.exceptions import NotFoundError
from social_posts.schemas import UserCreate, UserResponse
from social_posts.services import user_service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    """Every registered author, liker and commenter."""
    return await user_service.get_users(db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    found = await user_service.get_user(db, user_id)
    if found is None:
        raise NotFoundError("User not found")
    return found


@router.post("", status_code=201, response_model=UserResponse)
async def register_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a user; a taken username or email answers 409."""
    return await user_service.create_user(db, data)
