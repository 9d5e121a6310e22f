"""
Shared fixtures.

Each test gets a fresh app lifespan, so a fresh in-memory store.
"""

import os

# Keep password hashing fast; must be set before quill reads its settings
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["SENTRY_DSN"] = ""

import asyncio
import itertools
from dataclasses import dataclass, field

import pytest
from fastapi.testclient import TestClient

from quill.api.app import app
from quill.auth.roles import Role
from quill.services import PostService, UserService
from quill.storage import create_local_storage


PASSWORD = "password123"

_emails = itertools.count(1)


@dataclass
class Account:
    """A registered user plus the headers to act as them."""
    id: int
    role: str
    email: str
    headers: dict = field(default_factory=dict)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, role: str | None = None, email: str | None = None, name: str = "Tester") -> dict:
    email = email or f"user{next(_emails)}@example.com"
    body = {
        "name": name,
        "email": email,
        "password": PASSWORD,
        "password_confirmation": PASSWORD,
    }
    if role is not None:
        body["role"] = role
    response = client.post("/api/register", json=body)
    assert response.status_code == 200, response.text
    return response.json()["user"]


def login(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def storage():
    """Fresh in-memory storage, outside any app."""
    return create_local_storage()


@pytest.fixture
def post_service(storage):
    return PostService(storage)


@pytest.fixture
def user_service(storage, post_service):
    return UserService(storage, post_service)


@pytest.fixture
def client():
    """Test client with a fresh app lifespan."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_account(client):
    """
    Create a user with the given role and log them in.

    `regular` cannot be requested over HTTP, so it is created directly
    through the service layer.
    """

    def _make(role: str = "viewer", name: str = "Tester") -> Account:
        email = f"user{next(_emails)}@example.com"
        if role == Role.REGULAR.value:
            users = UserService(client.app.state.storage)
            user = asyncio.run(users.create(name=name, email=email, password=PASSWORD, role=Role.REGULAR))
            user_id = user.id
        else:
            user_id = register(client, role=role, email=email, name=name)["id"]

        tokens = login(client, email)
        return Account(id=user_id, role=role, email=email, headers=bearer(tokens["access_token"]))

    return _make


@pytest.fixture
def make_post(client):
    """Create a post as the given account."""

    def _make(account: Account, title: str = "A title", body: str = "Some body") -> dict:
        response = client.post(
            "/api/posts",
            json={"title": title, "body": body},
            headers=account.headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["post"]

    return _make
