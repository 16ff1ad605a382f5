from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from social_posts.config import settings
from social_posts.database import get_db
from social_posts.notifications import notifier
from social_posts.services.post_service import PostService


def get_current_user_id(
    x_user_id: int = Header(
        ...,
        ge=1,
        description="Id of the acting user, set by the authenticating gateway.",
    ),
) -> int:
    """
    Return the acting user's id.

    Token verification happens in front of this service; the gateway
    forwards the authenticated id in the ``X-User-Id`` header.
    """
    return x_user_id


def get_post_service(db: AsyncSession = Depends(get_db)) -> PostService:
    """
    Build a ``PostService`` bound to the request's session.

    The notification publisher is only handed over when engagement
    notifications are enabled in settings.
    """
    return PostService(
        db,
        notifier=notifier if settings.NOTIFY_ON_ENGAGEMENT else None,
    )
