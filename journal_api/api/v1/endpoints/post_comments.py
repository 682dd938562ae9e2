"""
Post Comment Endpoints

Endpoints:
----------
- POST   /posts/{post_id}/comments              - Comment on a post
- PATCH  /post-comments/{post_comment_id}       - Edit own post comment
- DELETE /post-comments/{post_comment_id}       - Delete own post comment
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.db.database import get_db
from journal_api.api.deps import get_current_user_optional, get_notification_email_backend
from journal_api.models.user import User
from journal_api.schemas.comment import CommentBody, PostCommentResponse
from journal_api.services.email_backend import EmailBackend
from journal_api.services.post_comment_service import PostCommentService

router = APIRouter(tags=["Post Comments"])


def get_post_comment_service(
    db: AsyncSession = Depends(get_db),
    email_backend: EmailBackend = Depends(get_notification_email_backend),
) -> PostCommentService:
    """Dependency that provides PostCommentService instance."""
    return PostCommentService(db, email_backend)


@router.post(
    "/posts/{post_id}/comments",
    response_model=PostCommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post and notify its subscribers",
)
async def create_post_comment(
    post_id: UUID,
    request: CommentBody,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: PostCommentService = Depends(get_post_comment_service),
):
    return await service.create_post_comment(current_user, post_id, request.body)


@router.patch(
    "/post-comments/{post_comment_id}",
    response_model=PostCommentResponse,
    summary="Edit your post comment",
)
async def update_post_comment(
    post_comment_id: UUID,
    request: CommentBody,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: PostCommentService = Depends(get_post_comment_service),
):
    return await service.update_post_comment(current_user, post_comment_id, request.body)


@router.delete(
    "/post-comments/{post_comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete your post comment",
)
async def delete_post_comment(
    post_comment_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: PostCommentService = Depends(get_post_comment_service),
):
    await service.delete_post_comment(current_user, post_comment_id)
