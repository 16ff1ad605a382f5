import json
import logging

import redis.asyncio as redis

from social_posts.config import settings

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """
    Publishes engagement events (likes, comments) to a Redis channel.

    Downstream consumers (e.g. an email sender) subscribe to
    ``settings.NOTIFY_CHANNEL``.  Publishing never raises: without a
    connection, or when Redis fails, ``publish`` logs and returns False so
    a notification problem cannot break the request that triggered it.
    """

    def __init__(self, channel: str | None = None) -> None:
        self._redis: redis.Redis | None = None
        self.channel = channel or settings.NOTIFY_CHANNEL

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected for notifications: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, notifications disabled: %s", exc)

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    async def publish(self, event: str, payload: dict) -> bool:
        """
        Publish *payload* tagged with *event* on the notification channel.

        Returns True when Redis accepted the message.
        """
        if not self._redis:
            logger.debug("Notification %s skipped: no Redis connection", event)
            return False
        message = json.dumps({"event": event, **payload}, default=str)
        try:
            await self._redis.publish(self.channel, message)
        except Exception as exc:
            logger.warning("Notification %s failed on channel %r: %s", event, self.channel, exc)
            return False
        logger.debug("Notification %s published on %r", event, self.channel)
        return True


# Module-level singleton shared across all request handlers.
notifier = NotificationPublisher()
