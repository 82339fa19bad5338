from typing import Optional

from app.client import ApiClient
from app.constants import DEFAULT_PAGE_SIZE
from app.query_cache import QueryCache
from app.schemas import CountResponse, PostResponse, UserResponse


class DirectoryHooks:
    """Cache-backed queries and invalidating mutations for the UI views."""

    def __init__(self, client: ApiClient, cache: QueryCache):
        self.client = client
        self.cache = cache

    # Users queries
    async def users(self, page_number: int, page_size: int = DEFAULT_PAGE_SIZE) -> list[UserResponse]:
        return await self.cache.fetch(
            ("users", page_number, page_size),
            lambda: self.client.get_users(page_number, page_size),
        )

    async def users_count(self) -> CountResponse:
        return await self.cache.fetch(("users", "count"), self.client.get_users_count)

    async def user(self, user_id: str) -> Optional[UserResponse]:
        if not user_id:
            return None
        return await self.cache.fetch(("user", user_id), lambda: self.client.get_user(user_id))

    # Posts queries
    async def user_posts(self, user_id: str) -> Optional[list[PostResponse]]:
        if not user_id:
            return None
        return await self.cache.fetch(("posts", user_id), lambda: self.client.get_user_posts(user_id))

    # Posts mutations
    async def create_post(self, title: str, body: str, user_id: str):
        result = await self.client.create_post(title, body, user_id)
        self.cache.invalidate(("posts", user_id))
        return result

    async def delete_post(self, post_id: str, user_id: str):
        result = await self.client.delete_post(post_id)
        self.cache.invalidate(("posts", user_id))
        return result
