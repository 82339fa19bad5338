"""Tests for the typed REST client using httpx.MockTransport."""

import json

import httpx
import pytest

from app.client import ApiClient
from app.errors import ApiRequestError

USER = {"id": "u1", "name": "Jane", "username": "jane", "email": "j@example.com", "phone": "555", "address": "a, b, c, d"}
POST = {"id": "a" * 32, "user_id": "u1", "title": "T", "body": "B", "created_at": "2024-06-05T14:30:00.000+00:00"}


def make_client(handler) -> ApiClient:
    return ApiClient("http://api.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_users_sends_paging_params():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json=[USER])

    client = make_client(handler)
    users = await client.get_users(2, 4)
    await client.aclose()

    assert users[0].name == "Jane"
    assert seen[0].path == "/users"
    assert dict(seen[0].params) == {"pageNumber": "2", "pageSize": "4"}


@pytest.mark.asyncio
async def test_get_users_count_and_user():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/users/count":
            return httpx.Response(200, json={"count": 12})
        return httpx.Response(200, json=USER)

    client = make_client(handler)
    assert (await client.get_users_count()).count == 12
    assert (await client.get_user("u1")).id == "u1"
    await client.aclose()


@pytest.mark.asyncio
async def test_post_mutations():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "GET":
            return httpx.Response(200, json=[POST])
        if request.method == "POST":
            return httpx.Response(200, json={"message": "Post added successfully"})
        return httpx.Response(200, json={"message": "Post deleted successfully"})

    client = make_client(handler)
    posts = await client.get_user_posts("u1")
    created = await client.create_post("T", "B", "u1")
    deleted = await client.delete_post(posts[0].id)
    await client.aclose()

    assert seen[0].url.params["userId"] == "u1"
    assert json.loads(seen[1].content) == {"title": "T", "body": "B", "user_id": "u1"}
    assert seen[2].method == "DELETE"
    assert seen[2].url.params["postId"] == "a" * 32
    assert created.message == "Post added successfully"
    assert deleted.message == "Post deleted successfully"


@pytest.mark.asyncio
async def test_error_response_raises_api_request_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "userId is required"})

    client = make_client(handler)
    with pytest.raises(ApiRequestError) as excinfo:
        await client.get_user_posts("")
    await client.aclose()

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "userId is required"


@pytest.mark.asyncio
async def test_transport_error_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    with pytest.raises(httpx.ConnectError):
        await client.get_users_count()
    await client.aclose()


@pytest.mark.asyncio
async def test_user_id_is_quoted_in_path():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json=USER)

    client = make_client(handler)
    await client.get_user("a/b?c#d")
    await client.aclose()

    assert seen[0].raw_path == b"/users/a%2Fb%3Fc%23d"
    assert seen[0].query == b""
