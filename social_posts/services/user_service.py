"""
User service — the minimal User operations the post API relies on.

Users are referenced, never owned, by posts; this module only exists so
that authors, likers and commenters can be registered and looked up.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from social_posts.exceptions import ConflictError, is_unique_violation
from social_posts.models import User
from social_posts.schemas import UserCreate

logger = logging.getLogger(__name__)


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_users(db: AsyncSession) -> list[dict]:
    """Return all users ordered by id."""
    result = await db.execute(select(User).order_by(User.id))
    return [_user_to_dict(u) for u in result.scalars().all()]


async def get_user(db: AsyncSession, user_id: int) -> dict | None:
    """Return the user dict for *user_id*, or None when it does not exist."""
    user = await db.get(User, user_id)
    if user is None:
        return None
    return _user_to_dict(user)


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Create a new user and return its serialised dict.

    Username and email uniqueness is enforced by the database; a taken
    value raises ``ConflictError``.
    """
    user = User(username=data.username, email=data.email)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        if is_unique_violation(exc):
            raise ConflictError(
                "A user with this username or email already exists"
            ) from exc
        raise
    await db.refresh(user)
    logger.info("User %s registered as %r", user.id, user.username)
    return _user_to_dict(user)
