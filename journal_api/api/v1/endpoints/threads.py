"""
Thread and Comment Endpoints

Endpoints:
----------
Threads:
- POST   /threads                          - Open a thread on a post
- DELETE /threads/{thread_id}              - Delete an empty thread

Comments:
- POST   /threads/{thread_id}/comments     - Comment in a thread
- PATCH  /comments/{comment_id}            - Edit own comment
- DELETE /comments/{comment_id}            - Delete own comment
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.db.database import get_db
from journal_api.api.deps import get_current_user_optional, get_notification_email_backend
from journal_api.models.user import User
from journal_api.schemas.comment import (
    CommentBody,
    CommentResponse,
    ThreadCreate,
    ThreadResponse,
)
from journal_api.services.comment_service import CommentService
from journal_api.services.email_backend import EmailBackend

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Threads"])


# ============================================================
# HELPER
# ============================================================

def get_comment_service(
    db: AsyncSession = Depends(get_db),
    email_backend: EmailBackend = Depends(get_notification_email_backend),
) -> CommentService:
    """Dependency that provides CommentService instance."""
    return CommentService(db, email_backend)


# ============================================================
# THREADS
# ============================================================

@router.post(
    "/threads",
    response_model=ThreadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a thread on a highlighted span of a post",
)
async def create_thread(
    request: ThreadCreate,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CommentService = Depends(get_comment_service),
):
    return await service.create_thread(
        current_user,
        post_id=request.post_id,
        start_index=request.start_index,
        end_index=request.end_index,
        highlighted_content=request.highlighted_content,
    )


@router.delete(
    "/threads/{thread_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a thread that has no comments",
)
async def delete_thread(
    thread_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CommentService = Depends(get_comment_service),
):
    await service.delete_thread(current_user, thread_id)


# ============================================================
# COMMENTS
# ============================================================

@router.post(
    "/threads/{thread_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment in a thread and notify its subscribers",
)
async def create_comment(
    thread_id: UUID,
    request: CommentBody,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CommentService = Depends(get_comment_service),
):
    return await service.create_comment(current_user, thread_id, request.body)


@router.patch(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    summary="Edit your comment",
)
async def update_comment(
    comment_id: UUID,
    request: CommentBody,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CommentService = Depends(get_comment_service),
):
    return await service.update_comment(current_user, comment_id, request.body)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete your comment",
)
async def delete_comment(
    comment_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: CommentService = Depends(get_comment_service),
):
    await service.delete_comment(current_user, comment_id)
