from fastapi import APIRouter

from .auth import router as auth_router
from .users import router as users_router
from .posts import router as posts_router
from .groups import router as groups_router

api_router = APIRouter(prefix="/api")


@api_router.get("/ping")
async def ping():
    """Liveness check used by the mobile client."""
    return {"message": "Pong!"}


api_router.include_router(auth_router, tags=["authentication"])
api_router.include_router(users_router, prefix="/user", tags=["users"])
api_router.include_router(posts_router, prefix="/posts", tags=["posts"])
api_router.include_router(groups_router, prefix="/groups", tags=["groups"])
