import logging
import uuid
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants import US_STATES_ABBR_TITLE_MAP
from app.errors import RecordNotFoundError, StoreError
from app.models import Post, User
from app.schemas import PostCreate, PostResponse, UserResponse

logger = logging.getLogger(__name__)


def format_address(street: str, state: str, city: str, zipcode: str) -> str:
    state_title = US_STATES_ABBR_TITLE_MAP.get(state) or state
    return f"{street}, {state_title}, {city}, {zipcode}"


def _to_user(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        username=user.username,
        email=user.email,
        phone=user.phone,
        address=format_address(user.street, user.state, user.city, user.zipcode),
    )


def _local_timestamp() -> str:
    return datetime.now().astimezone().isoformat(timespec="milliseconds")


async def get_users_count(session: AsyncSession) -> int:
    try:
        result = await session.execute(select(func.count()).select_from(User))
    except SQLAlchemyError as e:
        raise StoreError(str(e)) from e
    return result.scalar_one()


async def get_users(session: AsyncSession, page: int, size: int) -> list[UserResponse]:
    """Return page ``page`` (0-based) of ``size`` users."""
    stmt = select(User).order_by(User.id).offset(page * size).limit(size)
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as e:
        raise StoreError(str(e)) from e
    return [_to_user(user) for user in result.scalars().all()]


async def get_user(session: AsyncSession, user_id: str) -> UserResponse:
    try:
        result = await session.execute(select(User).filter(User.id == user_id))
    except SQLAlchemyError as e:
        raise StoreError(str(e)) from e
    user = result.scalar_one_or_none()
    if user is None:
        raise RecordNotFoundError("users", user_id)
    return _to_user(user)


def _created_instant(post: PostResponse) -> float:
    # offsets vary across DST; order by instant
    try:
        return datetime.fromisoformat(post.created_at).astimezone().timestamp()
    except ValueError:
        return 0.0


async def get_posts(session: AsyncSession, user_id: str) -> list[PostResponse]:
    try:
        result = await session.execute(select(Post).filter(Post.user_id == user_id))
    except SQLAlchemyError as e:
        raise StoreError(str(e)) from e
    posts = [PostResponse.model_validate(post) for post in result.scalars().all()]
    return sorted(posts, key=_created_instant, reverse=True)


async def add_post(session: AsyncSession, post: PostCreate) -> str:
    """Insert ``post`` with a generated id and the current local time.

    Returns the generated id.
    """
    post_id = uuid.uuid4().hex
    db_post = Post(
        id=post_id,
        title=post.title,
        body=post.body,
        user_id=post.user_id,
        created_at=_local_timestamp(),
    )
    try:
        session.add(db_post)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise StoreError(str(e)) from e
    logger.debug("Inserted post %s for user %s", post_id, post.user_id)
    return post_id


async def delete_post(session: AsyncSession, post_id: str) -> None:
    # No existence check: deleting an unknown id is a no-op.
    try:
        await session.execute(delete(Post).where(Post.id == post_id))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise StoreError(str(e)) from e
