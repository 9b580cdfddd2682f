"""TokenService 테스트 (로컬 aiohttp 서버 사용)."""

from aiohttp import web
from aiohttp.test_utils import TestServer

from modules.session import TokenService


def _serve(handler):
    app = web.Application()
    app.router.add_post("/api/token", handler)
    return TestServer(app)


async def test_fetch_token_success():
    received = []

    async def handler(request):
        received.append(await request.json())
        return web.json_response({"token": "jwt-123"})

    async with _serve(handler) as server:
        service = TokenService(str(server.make_url("/api/token")), role="guest")
        token = await service.fetch_token("상담사", "room-1")

    assert token == "jwt-123"
    assert received == [{"user_id": "상담사", "room_id": "room-1", "role": "guest"}]


async def test_fetch_token_non_200_returns_none():
    async def handler(request):
        return web.json_response({"error": "forbidden"}, status=403)

    async with _serve(handler) as server:
        service = TokenService(str(server.make_url("/api/token")))
        assert await service.fetch_token("상담사", "room-1") is None


async def test_fetch_token_missing_token_returns_none():
    async def handler(request):
        return web.json_response({"msg": "ok"})

    async with _serve(handler) as server:
        service = TokenService(str(server.make_url("/api/token")))
        assert await service.fetch_token("상담사", "room-1") is None


async def test_fetch_token_non_string_token_returns_none():
    async def handler(request):
        return web.json_response({"token": 12345})

    async with _serve(handler) as server:
        service = TokenService(str(server.make_url("/api/token")))
        assert await service.fetch_token("상담사", "room-1") is None


async def test_fetch_token_invalid_json_returns_none():
    async def handler(request):
        return web.Response(text="not json")

    async with _serve(handler) as server:
        service = TokenService(str(server.make_url("/api/token")))
        assert await service.fetch_token("상담사", "room-1") is None


async def test_fetch_token_connection_error_returns_none():
    # 연결 거부되는 포트
    service = TokenService("http://127.0.0.1:1/api/token", timeout=2.0)

    assert await service.fetch_token("상담사", "room-1") is None
