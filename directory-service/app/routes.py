import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app import queries
from app.constants import DEFAULT_PAGE_SIZE, INTERNAL_ERROR_MESSAGE
from app.database import get_db
from app.metrics import posts_created_total, posts_deleted_total, store_errors_total
from app.schemas import CountResponse, MessageResponse, PostCreate, PostResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def internal_error(operation: str, error: Exception) -> HTTPException:
    logger.error("Unable to %s: %s", operation, error, exc_info=error)
    store_errors_total.labels(operation=operation).inc()
    return HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE)


@router.get("/")
async def read_root():
    return {"message": "User Directory Service API", "version": "1.0"}


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    pageNumber: int = 0,
    pageSize: int = DEFAULT_PAGE_SIZE,
    session: AsyncSession = Depends(get_db),
):
    if pageNumber < 0 or pageSize < 1:
        raise HTTPException(status_code=400, detail="Invalid page number or page size")
    try:
        return await queries.get_users(session, pageNumber, pageSize)
    except Exception as e:
        raise internal_error("get users", e)


# Declared before /users/{user_id} so "count" is not taken as an id
@router.get("/users/count", response_model=CountResponse)
async def count_users(session: AsyncSession = Depends(get_db)):
    try:
        count = await queries.get_users_count(session)
    except Exception as e:
        raise internal_error("get users count", e)
    return {"count": count}


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, session: AsyncSession = Depends(get_db)):
    try:
        return await queries.get_user(session, user_id)
    except Exception as e:
        raise internal_error("get user", e)


@router.get("/posts", response_model=list[PostResponse])
async def list_posts(userId: Optional[str] = None, session: AsyncSession = Depends(get_db)):
    if not userId:
        raise HTTPException(status_code=400, detail="userId is required")
    try:
        return await queries.get_posts(session, userId)
    except Exception as e:
        raise internal_error("get posts", e)


@router.post("/posts", response_model=MessageResponse)
async def create_post(post: PostCreate, session: AsyncSession = Depends(get_db)):
    missing = post.missing_fields()
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")
    try:
        await queries.add_post(session, post)
    except Exception as e:
        raise internal_error("add post", e)
    posts_created_total.inc()
    return {"message": "Post added successfully"}


@router.delete("/posts", response_model=MessageResponse)
async def delete_post(postId: Optional[str] = None, session: AsyncSession = Depends(get_db)):
    if not postId:
        raise HTTPException(status_code=400, detail="postId is required")
    try:
        await queries.delete_post(session, postId)
    except Exception as e:
        raise internal_error("delete post", e)
    posts_deleted_total.inc()
    return {"message": "Post deleted successfully"}


@router.get("/metrics")
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health")
async def health_check(session: AsyncSession = Depends(get_db)):
    """Health check endpoint for Kubernetes probes"""
    try:
        await session.execute(select(1))
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Database connection failed: {str(e)}")
