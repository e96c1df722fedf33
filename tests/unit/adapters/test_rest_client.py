"""
Tests for RestMessagingAPI against an in-process aiohttp application.
"""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from chatsync.adapters.api import RestMessagingAPI
from chatsync.core.exceptions import ApiError, ConfigurationError


CONVERSATIONS = [
    {"id": 42, "title": None, "isGroup": False, "participants": [{"userId": "u1"}, {"userId": "u2"}], "unreadCount": 1},
    {"id": 7, "title": "Study group", "isGroup": True, "participants": ["u1", "u2", "u3"]},
]

MESSAGES = [
    {"id": 500, "conversationId": 42, "senderId": "u2", "content": "hello", "sentAt": "2024-05-01T10:00:00Z"},
    {"id": 501, "conversationId": 42, "senderId": "u1", "content": "hi", "replyToId": 500},
]


@pytest.fixture
def requests():
    """Bodies and query strings the fake server received."""
    return []


@pytest_asyncio.fixture
async def server(requests):
    async def conversations(request):
        return web.json_response(CONVERSATIONS)

    async def conversation_messages(request):
        if request.match_info["conversation_id"] == "403":
            return web.json_response({"message": "You are not authorized to view this conversation"}, status=403)
        return web.json_response(MESSAGES)

    async def create_conversation(request):
        body = await request.json()
        requests.append(body)
        return web.json_response({"id": 99, "title": body.get("title"), "isGroup": len(body["participantIds"]) > 1}, status=201)

    async def users(request):
        return web.json_response([{"id": "u2", "firstName": "Grace", "lastName": "Hopper"}])

    async def search(request):
        requests.append(dict(request.query))
        return web.json_response(MESSAGES[:1])

    async def slow(request):
        await asyncio.sleep(0.5)
        return web.json_response([])

    async def broken(request):
        return web.Response(text="<html>oops</html>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/api/messages/conversations", conversations)
    app.router.add_get("/api/messages/conversations/{conversation_id}", conversation_messages)
    app.router.add_post("/api/messages/conversations", create_conversation)
    app.router.add_get("/api/users", users)
    app.router.add_get("/api/messages/search", search)
    app.router.add_get("/slow/api/users", slow)
    app.router.add_get("/broken/api/users", broken)

    test_server = TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest_asyncio.fixture
async def api(server):
    client = RestMessagingAPI(str(server.make_url("")))
    yield client
    await client.close()


@pytest.mark.asyncio
async def test_fetch_conversations(api):
    conversations = await api.fetch_conversations()

    assert [c.id for c in conversations] == [42, 7]
    assert conversations[0].participant_ids == ("u1", "u2")
    assert conversations[0].unread_count == 1
    assert conversations[1].is_group is True


@pytest.mark.asyncio
async def test_fetch_messages(api):
    messages = await api.fetch_messages(42)

    assert [m.id for m in messages] == [500, 501]
    assert messages[1].reply_to_id == 500
    assert messages[0].sent_at is not None


@pytest.mark.asyncio
async def test_http_error_carries_status(api):
    with pytest.raises(ApiError) as excinfo:
        await api.fetch_messages(403)
    assert excinfo.value.status == 403


@pytest.mark.asyncio
async def test_create_conversation_sends_camel_case_body(api, requests):
    conversation = await api.create_conversation(["u2", "u3"], title="Study group", initial_message="Welcome")

    assert conversation.id == 99
    assert conversation.is_group is True
    assert requests == [{"participantIds": ["u2", "u3"], "title": "Study group", "initialMessage": "Welcome"}]


@pytest.mark.asyncio
async def test_create_conversation_omits_empty_fields(api, requests):
    await api.create_conversation(["u2"])
    assert requests == [{"participantIds": ["u2"]}]


@pytest.mark.asyncio
async def test_fetch_users(api):
    users = await api.fetch_users()
    assert users[0].first_name == "Grace"


@pytest.mark.asyncio
async def test_search_passes_query(api, requests):
    results = await api.search_messages("hello world")

    assert [m.id for m in results] == [500]
    assert requests == [{"query": "hello world"}]


@pytest.mark.asyncio
async def test_timeout_becomes_api_error(server):
    client = RestMessagingAPI(str(server.make_url("/slow")), request_timeout=0.05)
    try:
        with pytest.raises(ApiError):
            await client.fetch_users()
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_unparseable_body_becomes_api_error(server):
    client = RestMessagingAPI(str(server.make_url("/broken")))
    try:
        with pytest.raises(ApiError):
            await client.fetch_users()
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_unreachable_server_becomes_api_error():
    client = RestMessagingAPI("http://127.0.0.1:1")
    try:
        with pytest.raises(ApiError) as excinfo:
            await client.fetch_conversations()
        assert excinfo.value.status is None
    finally:
        await client.close()


def test_from_config_requires_base_url():
    with pytest.raises(ConfigurationError):
        RestMessagingAPI.from_config({})

    client = RestMessagingAPI.from_config({"base_url": "http://localhost:5000/", "request_timeout": "10"})
    assert client._base_url == "http://localhost:5000"
    assert client._request_timeout == 10.0
