import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from app.constants import DEFAULT_PAGE_SIZE
from app.errors import ApiRequestError
from app.schemas import CountResponse, MessageResponse, PostResponse, UserResponse

logger = logging.getLogger(__name__)


class ApiClient:
    """One method per REST endpoint.

    Pass ``transport=httpx.ASGITransport(app=...)`` to talk to an
    in-process application instead of the network.
    """

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, endpoint, **kwargs)
        except httpx.HTTPError as e:
            logger.error("API request failed: %s %s: %s", method, endpoint, e)
            raise
        if response.is_error:
            try:
                message = response.json().get("error", response.reason_phrase)
            except ValueError:
                message = response.reason_phrase
            logger.error("API request failed: %s %s -> %s", method, endpoint, response.status_code)
            raise ApiRequestError(response.status_code, message)
        return response.json()

    # Users API
    async def get_users(self, page_number: int = 0, page_size: int = DEFAULT_PAGE_SIZE):
        data = await self._request("GET", "/users", params={"pageNumber": page_number, "pageSize": page_size})
        return [UserResponse.model_validate(item) for item in data]

    async def get_users_count(self):
        return CountResponse.model_validate(await self._request("GET", "/users/count"))

    async def get_user(self, user_id: str):
        return UserResponse.model_validate(await self._request("GET", f"/users/{quote(user_id, safe='')}"))

    # Posts API
    async def get_user_posts(self, user_id: str):
        data = await self._request("GET", "/posts", params={"userId": user_id})
        return [PostResponse.model_validate(item) for item in data]

    async def create_post(self, title: str, body: str, user_id: str):
        payload = {"title": title, "body": body, "user_id": user_id}
        return MessageResponse.model_validate(await self._request("POST", "/posts", json=payload))

    async def delete_post(self, post_id: str):
        return MessageResponse.model_validate(await self._request("DELETE", "/posts", params={"postId": post_id}))
