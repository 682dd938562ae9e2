from fastapi import APIRouter
from journal_api.api.v1.endpoints import threads, post_comments, social, notifications

# ============================================================
# Main API v1 Router
# ============================================================

api_router = APIRouter()

# Threads and thread comments (/threads, /comments)
api_router.include_router(
    threads.router,
    prefix=""
)

# Post-level comments (/posts/{id}/comments, /post-comments)
api_router.include_router(
    post_comments.router,
    prefix=""
)

# Posts, claps, thanks, follows
api_router.include_router(
    social.router,
    prefix=""  # Routes define their own prefixes (/posts, /comments/{id}/thanks, /users/{id}/follow)
)

api_router.include_router(
    notifications.router,
    prefix=""  # Routes define own prefix (/notifications)
)
