from fastapi import APIRouter, Depends

from social_posts.dependencies import get_current_user_id, get_post_service
from social_posts.schemas import ApiResponse, CommentCreate, PostCreate, PostUpdate
from social_posts.services.post_service import PostService

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


@router.post("", status_code=201, response_model=ApiResponse)
async def create_post(
    data: PostCreate,
    user_id: int = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    return await service.create(user_id, data)


@router.get("", response_model=ApiResponse)
async def list_posts(service: PostService = Depends(get_post_service)):
    return await service.find_all()


@router.get("/{post_id}", response_model=ApiResponse)
async def get_post(post_id: int, service: PostService = Depends(get_post_service)):
    return await service.find_one(post_id)


@router.patch("/{post_id}", response_model=ApiResponse)
async def update_post(
    post_id: int,
    data: PostUpdate,
    user_id: int = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    return await service.update(post_id, user_id, data)


@router.delete("/{post_id}", response_model=ApiResponse)
async def delete_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    return await service.remove(post_id, user_id)


@router.post("/{post_id}/like", status_code=201, response_model=ApiResponse)
async def like_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    return await service.like_post(post_id, user_id)


@router.post("/{post_id}/comments", status_code=201, response_model=ApiResponse)
async def comment_post(
    post_id: int,
    data: CommentCreate,
    user_id: int = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service),
):
    return await service.comment_post(post_id, user_id, data.content)
