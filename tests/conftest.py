import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from Crypto.PublicKey import RSA


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 8, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


class BankTransport(httpx.AsyncBaseTransport):
    """Answers by URL path with pre-canned JSON and records every request.

    A route value may be a dict (JSON body), an httpx.Response, an exception to
    raise, or a list of those consumed one per call.
    """

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    async def handle_async_request(self, request):  # type: ignore[override]
        self.requests.append(request)
        answer = self.routes[request.url.path]
        if isinstance(answer, list):
            answer = answer.pop(0)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    def calls(self, path):
        return [r for r in self.requests if r.url.path == path]


def json_body(request):
    return json.loads(request.content)


@pytest.fixture(scope="session")
def rsa_key():
    return RSA.generate(2048)


@pytest.fixture(scope="session")
def rsa_pem(rsa_key):
    return rsa_key.export_key(format="PEM", pkcs=1).decode("utf-8")
