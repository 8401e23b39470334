from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from api_service import MarketplaceApi
from config import settings
from dependencies import get_api
from main import app


class FakeApi(MarketplaceApi):
    """Answers from a (METHOD, path) table instead of the network and records every call."""

    def __init__(self, responses=None):
        super().__init__(base_url="http://api.test", token="test-token", max_retries=1, base_delay=0)
        self.responses = dict(responses or {})
        self.calls = []

    def with_token(self, token):
        self.token = token
        return self

    def request(self, method, path, params=None, json=None):
        method = method.upper()
        self.calls.append((method, path, params, json))
        value = self.responses.get((method, path))
        if isinstance(value, Exception):
            raise value
        return value

    def called(self, method, path):
        return [c for c in self.calls if c[0] == method.upper() and c[1] == path]


def session_cookie(role="user", email="loja@example.com"):
    payload = {
        "token": "test-token",
        "user_id": 1,
        "name": "Loja Teste",
        "email": email,
        "role": role,
        "sub": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(payload, settings.session_secret, algorithm="HS256")


@pytest.fixture
def fake_api():
    api = FakeApi({("GET", "/subscription/status"): {"status": "active", "plan": "monthly"}})
    app.dependency_overrides[get_api] = lambda: api
    yield api
    app.dependency_overrides.clear()


@pytest.fixture
def client(fake_api):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_client(client):
    client.cookies.set(settings.session_cookie_name, session_cookie())
    return client


@pytest.fixture
def admin_client(client):
    client.cookies.set(settings.session_cookie_name, session_cookie(role="admin"))
    return client
