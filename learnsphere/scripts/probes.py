"""
Smoke probes against a running LearnSphere API.

Three console scripts share this module:

- ``learnsphere-login-probe``: log in and print the issued token
- ``learnsphere-register-probe``: register an account (201 or 409 is fine)
- ``learnsphere-query-probe``: log in, ask a question and summarize the answer

Each exits 0 when the server behaved as expected and 1 otherwise.
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import aiohttp

from learnsphere.src.models.auth import KnowledgeLevel

DEFAULT_BASE_URL = "http://localhost:5001"
DEFAULT_EMAIL = "user@learnsphere.dev"
DEFAULT_PASSWORD = "demo123"
DEFAULT_QUERY = "What is machine learning?"
TIMEOUT = aiohttp.ClientTimeout(total=90)


@dataclass
class ProbeResult:
    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def token(self) -> Optional[str]:
        return self.body.get("token")


async def _post(
    session: aiohttp.ClientSession,
    url: str,
    payload: Dict[str, Any],
    token: Optional[str] = None,
) -> ProbeResult:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    async with session.post(url, json=payload, headers=headers) as response:
        if response.content_length == 0:
            return ProbeResult(status=response.status)
        try:
            body = await response.json(content_type=None)
        except ValueError:
            # plain-text or HTML error pages from the server or a proxy
            return ProbeResult(status=response.status, body={"detail": await response.text()})
        return ProbeResult(status=response.status, body=body if isinstance(body, dict) else {})


async def login(base_url: str, email: str, password: str) -> ProbeResult:
    async with aiohttp.ClientSession(timeout=TIMEOUT) as session:
        return await _post(session, f"{base_url}/api/auth/login", {"email": email, "password": password})


async def register(base_url: str, name: str, email: str, password: str) -> ProbeResult:
    async with aiohttp.ClientSession(timeout=TIMEOUT) as session:
        return await _post(
            session,
            f"{base_url}/api/auth/register",
            {"name": name, "email": email, "password": password},
        )


async def query(
    base_url: str,
    email: str,
    password: str,
    question: str = DEFAULT_QUERY,
    level: str = "intermediate",
) -> List[ProbeResult]:
    """Log in, then ask ``question``; returns the login and query results."""
    async with aiohttp.ClientSession(timeout=TIMEOUT) as session:
        auth = await _post(session, f"{base_url}/api/auth/login", {"email": email, "password": password})
        if auth.status != 200 or not auth.token:
            return [auth]

        answer = await _post(
            session,
            f"{base_url}/api/learning/query",
            {"query": question, "options": {"level": level}},
            token=auth.token,
        )
        return [auth, answer]


def _parser(description: str) -> ArgumentParser:
    parser = ArgumentParser(description=description)
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    parser.add_argument("--email", default=DEFAULT_EMAIL)
    parser.add_argument("--password", default=DEFAULT_PASSWORD)
    return parser


def _run(coro) -> Any:
    try:
        return asyncio.run(coro)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        print(f"Request failed: {e}", file=sys.stderr)
        return None


def _base(args: Namespace) -> str:
    return args.base_url.rstrip("/")


# ============================================================================
# Entry points
# ============================================================================


def login_main(argv: Optional[List[str]] = None) -> int:
    args = _parser("Log in and print the issued token.").parse_args(argv)

    result = _run(login(_base(args), args.email, args.password))
    if result is None:
        return 1

    print(f"Status: {result.status}")
    if result.status == 200 and result.token:
        print(f"Token: {result.token}")
        return 0

    print(f"Login failed: {result.body.get('detail', result.body)}")
    return 1


def register_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Register an account; an existing account also counts as success.")
    parser.add_argument("--name", default="Test User")
    args = parser.parse_args(argv)

    result = _run(register(_base(args), args.name, args.email, args.password))
    if result is None:
        return 1

    print(f"Status: {result.status}")
    if result.status == 201:
        print("User registered")
        return 0
    if result.status == 409:
        print("User already exists")
        return 0

    print(f"Registration failed: {result.body.get('detail', result.body)}")
    return 1


def query_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Log in, ask a learning question and summarize the answer.")
    parser.add_argument("--query", default=DEFAULT_QUERY)
    parser.add_argument("--level", default="intermediate", choices=[level.value for level in KnowledgeLevel])
    args = parser.parse_args(argv)

    results = _run(query(_base(args), args.email, args.password, args.query, args.level))
    if not results:
        return 1

    auth = results[0]
    if len(results) == 1:
        print(f"Login failed with status {auth.status}: {auth.body.get('detail', auth.body)}")
        return 1

    answer = results[1]
    print(f"Status: {answer.status}")
    if answer.status != 200:
        print(f"Query failed: {answer.body.get('detail', answer.body)}")
        return 1

    print(f"Content length: {len(answer.body.get('content') or '')}")
    print(f"Citations: {len(answer.body.get('citations') or [])}")
    print(f"Follow-up questions: {len(answer.body.get('followUpQuestions') or [])}")
    print(f"Session id: {answer.body.get('sessionId')}")
    return 0


if __name__ == "__main__":
    sys.exit(login_main())
