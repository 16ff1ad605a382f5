"""
Post service — business logic for posts, likes and comments.

Design notes
------------
- ``PostService`` receives its collaborators explicitly: the request's
  ``AsyncSession`` and an optional ``NotificationPublisher``.  The router
  builds it through the ``get_post_service`` dependency.
- Every public method returns a plain ``{"status": ..., "data": ...}``
  dict and raises ``PostServiceError`` subclasses for failures.  Only
  ``SQLAlchemyError`` is translated into ``InternalError``; NotFound,
  Forbidden and Conflict raised inside a ``try`` block propagate as-is.
- Aggregate like/comment counts are correlated scalar subqueries, so
  list and detail views are a single SELECT (plus one ``selectinload``
  for the comment list on the detail view).
- The service flushes but does not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from social_posts.exceptions import (
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    is_unique_violation,
)
from social_posts.models import CommentPost, LikePost, Post, User
from social_posts.notifications import NotificationPublisher
from social_posts.schemas import PostCreate, PostUpdate

logger = logging.getLogger(__name__)

_DUPLICATE_POST_MESSAGE = "Posts with the same name already exists."
_ALREADY_LIKED = {"status": True, "message": "Post already liked"}

_LIKE_COUNT = (
    select(func.count(LikePost.id))
    .where(LikePost.post_id == Post.id)
    .correlate(Post)
    .scalar_subquery()
    .label("like_count")
)
_COMMENT_COUNT = (
    select(func.count(CommentPost.id))
    .where(CommentPost.post_id == Post.id)
    .correlate(Post)
    .scalar_subquery()
    .label("comment_count")
)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _public_user(user: User | None) -> dict | None:
    """Only the fields of a user that are safe to show to other users."""
    if user is None:
        return None
    return {"username": user.username, "email": user.email}


def _post_record(post: Post) -> dict:
    return {
        "id": post.id,
        "content": post.content,
        "slug": post.slug,
        "user_id": post.user_id,
        "created_at": _iso(post.created_at),
        "updated_at": _iso(post.updated_at),
    }


def _comment_record(comment: CommentPost) -> dict:
    return {
        "id": comment.id,
        "content": comment.content,
        "user_id": comment.user_id,
        "post_id": comment.post_id,
        "created_at": _iso(comment.created_at),
        "updated_at": _iso(comment.updated_at),
    }


def _comment_to_dict(comment: CommentPost) -> dict:
    """Comment as embedded in a post detail (``all_comment``)."""
    return {
        "id": comment.id,
        "content": comment.content,
        "user": _public_user(comment.user),
        "created_at": _iso(comment.created_at),
        "updated_at": _iso(comment.updated_at),
    }


def _post_summary(post: Post, like_count: int, comment_count: int) -> dict:
    return {
        "id": post.id,
        "content": post.content,
        "slug": post.slug,
        "user": _public_user(post.user),
        "like": like_count,
        "comment": comment_count,
        "created_at": _iso(post.created_at),
        "updated_at": _iso(post.updated_at),
    }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class PostService:
    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationPublisher | None = None,
    ) -> None:
        self.db = db
        self.notifier = notifier

    async def create(self, user_id: int, data: PostCreate) -> dict:
        """
        Insert a post owned by *user_id* and return it together with its
        like and comment collections, which are empty for a new post.
        """
        try:
            post = Post(user_id=user_id, **data.model_dump())
            self.db.add(post)
            await self.db.flush()
            await self.db.refresh(post)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictError(_DUPLICATE_POST_MESSAGE) from exc
            logger.exception("Post insert rejected for user_id=%s", user_id)
            raise InternalError(
                "An unexpected error occurred while creating the post."
            ) from exc
        except SQLAlchemyError as exc:
            logger.exception("Post insert failed for user_id=%s", user_id)
            raise InternalError(
                "An unexpected error occurred while creating the post."
            ) from exc

        logger.info("Post %s created by user_id=%s", post.id, user_id)
        record = _post_record(post)
        record["likes"] = []
        record["comments"] = []
        record["like"] = 0
        record["comment"] = 0
        return {"status": True, "data": record}

    async def find_all(self) -> dict:
        """Every post with its author's public fields and like/comment counts."""
        q = (
            select(Post, _LIKE_COUNT, _COMMENT_COUNT)
            .options(joinedload(Post.user))
            .order_by(Post.id)
            .execution_options(populate_existing=True)
        )
        try:
            rows = (await self.db.execute(q)).all()
        except SQLAlchemyError as exc:
            logger.exception("Listing posts failed")
            raise InternalError("Failed to retrieve posts") from exc

        return {
            "status": True,
            "data": [
                _post_summary(post, like_count, comment_count)
                for post, like_count, comment_count in rows
            ],
        }

    async def find_one(self, post_id: int) -> dict:
        """
        One post with counts and the full comment list (each comment with
        its author's public fields), in storage order.
        """
        q = (
            select(Post, _LIKE_COUNT, _COMMENT_COUNT)
            .where(Post.id == post_id)
            .options(
                joinedload(Post.user),
                selectinload(Post.comments).joinedload(CommentPost.user),
            )
            .execution_options(populate_existing=True)
        )
        try:
            row = (await self.db.execute(q)).one_or_none()
        except SQLAlchemyError as exc:
            logger.exception("Loading post %s failed", post_id)
            raise InternalError("Failed to retrieve post") from exc

        if row is None:
            raise NotFoundError("Post not found")

        post, like_count, comment_count = row
        data = _post_summary(post, like_count, comment_count)
        data["all_comment"] = [_comment_to_dict(c) for c in post.comments]
        return {"status": True, "data": data}

    async def _get_owned_post(self, post_id: int, user_id: int, action: str) -> Post:
        post = await self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if post.user_id != user_id:
            raise ForbiddenError(f"You are not authorized to {action} this post")
        return post

    async def update(self, post_id: int, user_id: int, data: PostUpdate) -> dict:
        """
        Apply the fields explicitly set in *data* to a post owned by
        *user_id*.  The owner itself is never changed.
        """
        try:
            post = await self._get_owned_post(post_id, user_id, "update")
            for field, value in data.model_dump(exclude_unset=True).items():
                setattr(post, field, value)
            await self.db.flush()
            await self.db.refresh(post)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ConflictError(_DUPLICATE_POST_MESSAGE) from exc
            logger.exception("Post %s update rejected", post_id)
            raise InternalError("Failed to update post") from exc
        except SQLAlchemyError as exc:
            logger.exception("Post %s update failed", post_id)
            raise InternalError("Failed to update post") from exc

        logger.info("Post %s updated by user_id=%s", post_id, user_id)
        return {"status": True, "data": _post_record(post)}

    async def remove(self, post_id: int, user_id: int) -> dict:
        try:
            post = await self._get_owned_post(post_id, user_id, "delete")
            await self.db.delete(post)
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception("Post %s delete failed", post_id)
            raise InternalError("Failed to remove post") from exc

        logger.info("Post %s deleted by user_id=%s", post_id, user_id)
        return {"status": True, "message": "Post successfully deleted"}

    async def _ensure_user_and_post(self, user_id: int, post_id: int) -> None:
        """
        Resolve both existence checks before any write.

        An ``AsyncSession`` cannot run two statements at once, so the two
        lookups travel together as scalar subqueries of one SELECT.
        Storage errors here are not translated.
        """
        q = select(
            select(User.id).where(User.id == user_id).scalar_subquery().label("user_id"),
            select(Post.id).where(Post.id == post_id).scalar_subquery().label("post_id"),
        )
        found = (await self.db.execute(q)).one()
        if found.user_id is None:
            raise NotFoundError("User not found")
        if found.post_id is None:
            raise NotFoundError("Post not found")

    async def _has_liked(self, user_id: int, post_id: int) -> bool:
        existing = await self.db.execute(
            select(LikePost.id).where(
                LikePost.user_id == user_id, LikePost.post_id == post_id
            )
        )
        return existing.scalar_one_or_none() is not None

    async def like_post(self, post_id: int, user_id: int) -> dict:
        """
        Record that *user_id* likes *post_id*.

        Liking the same post twice is an idempotent success; only one
        like row ever exists per (user, post).
        """
        await self._ensure_user_and_post(user_id, post_id)

        if await self._has_liked(user_id, post_id):
            return _ALREADY_LIKED

        try:
            # SAVEPOINT keeps the request's transaction usable if the pair
            # was inserted by a concurrent request after the check above.
            async with self.db.begin_nested():
                self.db.add(LikePost(user_id=user_id, post_id=post_id))
        except IntegrityError as exc:
            if is_unique_violation(exc):
                logger.info("Post %s already liked by user_id=%s", post_id, user_id)
                return _ALREADY_LIKED
            logger.exception("Like insert rejected for post %s", post_id)
            raise InternalError("Internal Server Error") from exc
        except SQLAlchemyError as exc:
            logger.exception("Like insert failed for post %s", post_id)
            raise InternalError("Internal Server Error") from exc

        logger.info("Post %s liked by user_id=%s", post_id, user_id)
        await self._notify("post.liked", {"post_id": post_id, "user_id": user_id})
        return {"status": True}

    async def comment_post(self, post_id: int, user_id: int, content: str) -> dict:
        await self._ensure_user_and_post(user_id, post_id)

        try:
            comment = CommentPost(content=content, user_id=user_id, post_id=post_id)
            self.db.add(comment)
            await self.db.flush()
            await self.db.refresh(comment)
        except SQLAlchemyError as exc:
            logger.exception("Comment insert failed for post %s", post_id)
            raise InternalError("Internal Server Error") from exc

        logger.info("Comment %s added to post %s by user_id=%s", comment.id, post_id, user_id)
        await self._notify(
            "post.commented",
            {"post_id": post_id, "user_id": user_id, "comment_id": comment.id},
        )
        return {"status": True, "data": _comment_record(comment)}

    async def _notify(self, event: str, payload: dict) -> None:
        if self.notifier is None:
            return
        await self.notifier.publish(event, payload)
