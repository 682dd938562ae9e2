"""
Social Endpoints

Endpoints:
----------
Posts:
- POST   /posts                             - Publish a post (notifies followers)

Claps:
- POST   /posts/{post_id}/claps             - Clap for a post
- DELETE /posts/{post_id}/claps             - Take back a clap

Thanks:
- POST   /comments/{comment_id}/thanks      - Thank a comment's author
- DELETE /comments/{comment_id}/thanks      - Take back thanks

Follows:
- POST   /users/{user_id}/follow            - Follow a user
- DELETE /users/{user_id}/follow            - Unfollow a user

Profiles:
- GET    /users/{user_id}/profile           - A user's profile and posts
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.db.database import get_db
from journal_api.api.deps import get_current_user_optional, get_notification_email_backend
from journal_api.models.user import User
from journal_api.schemas.social import (
    ClapResponse,
    FollowResponse,
    PostCreate,
    PostResponse,
    ProfileResponse,
    ThanksResponse,
)
from journal_api.services.email_backend import EmailBackend
from journal_api.services.social_service import SocialService

router = APIRouter(tags=["Social"])


def get_social_service(
    db: AsyncSession = Depends(get_db),
    email_backend: EmailBackend = Depends(get_notification_email_backend),
) -> SocialService:
    """Dependency that provides SocialService instance."""
    return SocialService(db, email_backend)


# ============================================================
# POSTS
# ============================================================

@router.post(
    "/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a post",
)
async def publish_post(
    request: PostCreate,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    return await service.publish_post(
        current_user,
        language_id=request.language_id,
        title=request.title,
        body=request.body,
        headline_image_url=request.headline_image_url,
    )


# ============================================================
# CLAPS
# ============================================================

@router.post(
    "/posts/{post_id}/claps",
    response_model=ClapResponse,
    status_code=status.HTTP_201_CREATED,
)
async def clap_post(
    post_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    return await service.clap_post(current_user, post_id)


@router.delete("/posts/{post_id}/claps", status_code=status.HTTP_204_NO_CONTENT)
async def unclap_post(
    post_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    await service.unclap_post(current_user, post_id)


# ============================================================
# THANKS
# ============================================================

@router.post(
    "/comments/{comment_id}/thanks",
    response_model=ThanksResponse,
    status_code=status.HTTP_201_CREATED,
)
async def thank_comment(
    comment_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    return await service.thank_comment(current_user, comment_id)


@router.delete("/comments/{comment_id}/thanks", status_code=status.HTTP_204_NO_CONTENT)
async def unthank_comment(
    comment_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    await service.unthank_comment(current_user, comment_id)


# ============================================================
# FOLLOWS
# ============================================================

@router.post(
    "/users/{user_id}/follow",
    response_model=FollowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def follow_user(
    user_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    return await service.follow_user(current_user, user_id)


@router.delete("/users/{user_id}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user(
    user_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    await service.unfollow_user(current_user, user_id)


# ============================================================
# PROFILES
# ============================================================

@router.get(
    "/users/{user_id}/profile",
    response_model=ProfileResponse,
    summary="Get a user's profile",
)
async def get_profile(
    user_id: UUID,
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: SocialService = Depends(get_social_service),
):
    """Anyone may view a profile. `is_logged_in_user` is true on your own."""
    return await service.get_profile(current_user, user_id)
