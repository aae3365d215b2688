"""
Unit tests for the command line helpers.

Tests cover:
- Service worker copy (byte-identical output, directory creation, errors)
- bcrypt hash generation and password checks
- Login, register and query probes against a local aiohttp server
- Probes against non-JSON error pages
"""

from unittest.mock import AsyncMock

import pytest
from aiohttp import web
from aiohttp import test_utils
from passlib.context import CryptContext

from learnsphere.scripts import check_password, copy_service_worker, generate_hash, probes

# bcryptjs style hash of "demo123"
DEMO_HASH = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4, bcrypt__ident="2a").hash("demo123")


# ============================================================================
# SERVICE WORKER COPY
# ============================================================================


class TestCopyServiceWorker:
    def test_copy_is_byte_identical(self, tmp_path):
        source = tmp_path / "client" / "src" / "serviceWorker.js"
        source.parent.mkdir(parents=True)
        source.write_bytes(b"self.addEventListener('fetch', () => {});\r\n\xe2\x9c\x93\n")
        destination = tmp_path / "client" / "public" / "serviceWorker.js"

        exit_code = copy_service_worker.main(["--source", str(source), "--destination", str(destination)])

        assert exit_code == 0
        assert destination.read_bytes() == source.read_bytes()

    def test_missing_source(self, tmp_path, capsys):
        exit_code = copy_service_worker.main([
            "--source", str(tmp_path / "missing.js"),
            "--destination", str(tmp_path / "out" / "serviceWorker.js"),
        ])

        assert exit_code == 1
        assert "Error copying service worker" in capsys.readouterr().err


# ============================================================================
# PASSWORD HELPERS
# ============================================================================


class TestGenerateHash:
    def test_default_passwords(self, capsys):
        assert generate_hash.main(["--rounds", "4"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Hashed demo123: $2b$04$")
        assert lines[1].startswith("Hashed admin123: $2b$04$")

    def test_hashes_verify(self):
        hashed = generate_hash.hash_passwords(["s3cret"], rounds=4)[0]

        assert check_password.check_password("s3cret", hashed)

    def test_default_cost_is_ten(self):
        assert generate_hash.DEFAULT_ROUNDS == 10


class TestCheckPassword:
    def test_match(self, capsys):
        assert check_password.main([DEMO_HASH, "demo123"]) == 0
        assert "Password match result: true" in capsys.readouterr().out

    def test_mismatch(self):
        assert check_password.main([DEMO_HASH, "admin123"]) == 1

    def test_invalid_hash(self, capsys):
        assert check_password.main(["not-a-hash", "demo123"]) == 1
        assert "Error verifying password" in capsys.readouterr().err


# ============================================================================
# PROBES
# ============================================================================


def fake_api() -> web.Application:
    """Minimal stand-in for the LearnSphere auth and learning endpoints."""
    registered = set()

    async def login(request):
        body = await request.json()
        if body == {"email": "user@learnsphere.dev", "password": "demo123"}:
            return web.json_response({"success": True, "token": "jwt-token", "user": {}})
        return web.json_response({"detail": "Invalid credentials"}, status=401)

    async def register(request):
        body = await request.json()
        if body["email"] in registered:
            return web.json_response({"detail": "User already exists"}, status=409)
        registered.add(body["email"])
        return web.json_response({"success": True, "token": "jwt-token"}, status=201)

    async def query(request):
        if request.headers.get("Authorization") != "Bearer jwt-token":
            return web.json_response({"detail": "Token is not valid"}, status=401)
        body = await request.json()
        return web.json_response({
            "content": f"Answer to {body['query']}",
            "citations": [{"title": "A"}, {"title": "B"}],
            "followUpQuestions": ["Why?"],
            "sessionId": "abc123",
        })

    app = web.Application()
    app.router.add_post("/api/auth/login", login)
    app.router.add_post("/api/auth/register", register)
    app.router.add_post("/api/learning/query", query)
    return app


@pytest.fixture
async def base_url():
    async with test_utils.TestServer(fake_api()) as server:
        yield str(server.make_url("")).rstrip("/")


class TestProbes:
    async def test_login_success(self, base_url):
        result = await probes.login(base_url, "user@learnsphere.dev", "demo123")

        assert result.status == 200
        assert result.token == "jwt-token"

    async def test_login_failure(self, base_url):
        result = await probes.login(base_url, "user@learnsphere.dev", "wrong")

        assert result.status == 401
        assert result.token is None

    async def test_register_twice(self, base_url):
        first = await probes.register(base_url, "Test User", "new@learnsphere.dev", "secret123")
        second = await probes.register(base_url, "Test User", "new@learnsphere.dev", "secret123")

        assert (first.status, second.status) == (201, 409)

    async def test_query(self, base_url):
        auth, answer = await probes.query(base_url, "user@learnsphere.dev", "demo123")

        assert auth.status == 200
        assert answer.status == 200
        assert answer.body["sessionId"] == "abc123"
        assert answer.body["content"] == "Answer to What is machine learning?"

    async def test_query_stops_when_login_fails(self, base_url):
        results = await probes.query(base_url, "user@learnsphere.dev", "wrong")

        assert len(results) == 1
        assert results[0].status == 401


def broken_api() -> web.Application:
    """Server whose login fails with a plain-text error page."""

    async def login(request):
        return web.Response(text="Internal Server Error", status=500)

    app = web.Application()
    app.router.add_post("/api/auth/login", login)
    return app


class TestNonJsonResponses:
    async def test_plain_text_error_keeps_status(self):
        async with test_utils.TestServer(broken_api()) as server:
            base = str(server.make_url("")).rstrip("/")
            result = await probes.login(base, "user@learnsphere.dev", "demo123")

        assert result.status == 500
        assert result.body == {"detail": "Internal Server Error"}
        assert result.token is None


class TestProbeEntryPoints:
    def test_login_main(self, monkeypatch, capsys):
        monkeypatch.setattr(probes, "login", AsyncMock(return_value=probes.ProbeResult(200, {"token": "t"})))

        assert probes.login_main([]) == 0
        out = capsys.readouterr().out
        assert "Status: 200" in out
        assert "Token: t" in out

    def test_login_main_failure(self, monkeypatch):
        monkeypatch.setattr(
            probes, "login",
            AsyncMock(return_value=probes.ProbeResult(401, {"detail": "Invalid credentials"}))
        )

        assert probes.login_main([]) == 1

    def test_register_main_accepts_existing_user(self, monkeypatch, capsys):
        monkeypatch.setattr(probes, "register", AsyncMock(return_value=probes.ProbeResult(409, {})))

        assert probes.register_main(["--email", "a@learnsphere.dev"]) == 0
        assert "User already exists" in capsys.readouterr().out

    def test_query_main_summary(self, monkeypatch, capsys):
        answer = probes.ProbeResult(200, {
            "content": "abcd",
            "citations": [{}, {}],
            "followUpQuestions": ["x", "y", "z"],
            "sessionId": "s1",
        })
        monkeypatch.setattr(
            probes, "query",
            AsyncMock(return_value=[probes.ProbeResult(200, {"token": "t"}), answer])
        )

        assert probes.query_main([]) == 0
        out = capsys.readouterr().out
        assert "Content length: 4" in out
        assert "Citations: 2" in out
        assert "Follow-up questions: 3" in out
        assert "Session id: s1" in out

    def test_connection_error(self, monkeypatch):
        import aiohttp

        monkeypatch.setattr(probes, "login", AsyncMock(side_effect=aiohttp.ClientConnectionError("refused")))

        assert probes.login_main([]) == 1

    def test_query_main_accepts_every_level(self, monkeypatch):
        mock_query = AsyncMock(return_value=[probes.ProbeResult(200, {"token": "t"}), probes.ProbeResult(200, {})])
        monkeypatch.setattr(probes, "query", mock_query)

        assert probes.query_main(["--level", "expert"]) == 0
        assert mock_query.call_args.args[4] == "expert"
