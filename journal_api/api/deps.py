from fastapi import HTTPException, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import uuid
import logging

from journal_api.db.database import get_db
from journal_api.models import User
from journal_api.core.security import verify_access_token
from journal_api.repositories.user_repo import UserRepository
from journal_api.services.email_backend import EmailBackend, get_email_backend

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI. A missing token is not an error here:
# the service decides whether the operation needs a signed-in user.
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


# =====================================================
# Get Current user
# =====================================================
async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Resolve the caller from the bearer token.

    Returns:
        The user, or None when no token was sent

    Raises:
        HTTPException 401: Token sent but invalid, or user unknown
        HTTPException 403: User is deactivated
    """
    if credentials is None:
        return None

    subject = verify_access_token(credentials.credentials)
    if subject is None:
        raise _unauthorized("Invalid or expired token")

    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token subject")

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )
    return user


# =====================================================
# Email backend
# =====================================================
def get_notification_email_backend() -> EmailBackend:
    """Backend used to queue notification emails (overridden in tests)."""
    return get_email_backend()
