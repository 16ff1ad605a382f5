"""
Regression tests for issues found during code review.

1. NotFound/Forbidden raised inside a storage error handler must keep their
   status codes (they used to be reported as 500).
2. Storage failures are still reported as 500 with the operation's message.
3. Every response carries X-Response-Time-Ms.
4. CORS must not set allow_credentials=true with allow_origins=*.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from social_posts.exceptions import InternalError, NotFoundError
from social_posts.schemas import PostUpdate
from social_posts.services.post_service import PostService


async def _register(client: AsyncClient, username: str) -> int:
    resp = await client.post("/api/v1/users", json={
        "username": username,
        "email": f"{username}@example.com",
    })
    return resp.json()["id"]


# ---------------------------------------------------------------------------
# 1. Domain errors are not masked
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_missing_post_is_404_not_500(async_client: AsyncClient):
    user_id = await _register(async_client, "masked_update")
    resp = await async_client.patch(
        "/api/v1/posts/424242", json={"content": "x"}, headers={"X-User-Id": str(user_id)}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_foreign_post_is_403_not_500(async_client: AsyncClient):
    owner_id = await _register(async_client, "masked_owner")
    other_id = await _register(async_client, "masked_other")
    created = await async_client.post(
        "/api/v1/posts", json={"content": "mine"}, headers={"X-User-Id": str(owner_id)}
    )
    post_id = created.json()["data"]["id"]

    resp = await async_client.delete(
        f"/api/v1/posts/{post_id}", headers={"X-User-Id": str(other_id)}
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_find_one_missing_is_404_not_500(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/posts/424242")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# 2. Storage failures -> 500
# ---------------------------------------------------------------------------

class _FailingSession:
    """Stands in for an AsyncSession whose database has gone away."""

    def _fail(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    async def execute(self, *args, **kwargs):
        self._fail()

    async def get(self, *args, **kwargs):
        self._fail()


@pytest.mark.asyncio
async def test_find_all_storage_failure_is_internal_error():
    with pytest.raises(InternalError) as exc_info:
        await PostService(_FailingSession()).find_all()
    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Failed to retrieve posts"


@pytest.mark.asyncio
async def test_update_storage_failure_is_internal_error():
    with pytest.raises(InternalError) as exc_info:
        await PostService(_FailingSession()).update(1, 1, PostUpdate(content="x"))
    assert exc_info.value.detail == "Failed to update post"


@pytest.mark.asyncio
async def test_existence_lookup_failure_propagates_untranslated():
    with pytest.raises(OperationalError):
        await PostService(_FailingSession()).like_post(1, 1)


@pytest.mark.asyncio
async def test_not_found_is_not_internal_error(db_session: AsyncSession):
    with pytest.raises(NotFoundError) as exc_info:
        await PostService(db_session).remove(424242, 1)
    assert not isinstance(exc_info.value, InternalError)


# ---------------------------------------------------------------------------
# 3. Timing header
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_response_time_header_present(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert float(resp.headers["x-response-time-ms"]) >= 0


# ---------------------------------------------------------------------------
# 4. CORS
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cors_does_not_allow_credentials_with_wildcard(async_client: AsyncClient):
    resp = await async_client.options(
        "/api/v1/posts",
        headers={
            "Origin": "http://example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert resp.headers.get("access-control-allow-credentials") != "true"
