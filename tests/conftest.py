from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from store import BLOGS, USERS
from tests.memory_store import MemoryStore

PASSWORD = "Secret123"

# Federated id tokens the fake identity provider accepts.
GOOGLE_TOKENS = {
    "token-grace": {
        "email": "grace@gmail.com",
        "name": "Grace Hopper",
        "picture": "https://lh3.googleusercontent.com/a/photo=s96-c",
    },
}


def fake_verify_id_token(id_token):
    try:
        return GOOGLE_TOKENS[id_token]
    except KeyError:
        raise ValueError("Token signature is invalid")


@pytest.fixture
def settings():
    return Settings(
        secret_access_key="test-secret",
        bcrypt_rounds=4,
        cloudinary_cloud_name="demo",
        cloudinary_api_key="123456789",
        cloudinary_api_secret="cloudinary-secret",
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store, verify_id_token=fake_verify_id_token)


@pytest.fixture
def client(app):
    return TestClient(app)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client, store):
    """Sign up an account; returns its id, username and auth headers."""

    def _register(fullname, email, password=PASSWORD, admin=False):
        response = client.post("/signup", json={"fullname": fullname, "email": email, "password": password})
        assert response.status_code == 200, response.json()
        account = store.find_one(USERS, [("personal_info.email", "==", email)])
        if admin:
            store.collections[USERS][account["_id"]]["admin"] = True
            response = client.post("/signin", json={"email": email, "password": password})
            assert response.json()["isAdmin"] is True
        body = response.json()
        return {
            "id": account["_id"],
            "username": body["username"],
            "headers": bearer(body["access_token"]),
        }

    return _register


@pytest.fixture
def admin(register):
    return register("Ada Lovelace", "ada@example.com", admin=True)


@pytest.fixture
def reader(register):
    return register("Alan Turing", "alan@example.com")


@pytest.fixture
def blog_payload():
    return {
        "title": "Hello World",
        "des": "A first post",
        "banner": "https://res.cloudinary.com/demo/image/upload/banner.jpg",
        "tags": ["News", "intro"],
        "content": {"blocks": [{"type": "paragraph", "data": {"text": "Hi"}}]},
        "draft": False,
    }


@pytest.fixture
def published(client, admin, blog_payload):
    response = client.post("/create-blog", json=blog_payload, headers=admin["headers"])
    assert response.status_code == 200, response.json()
    return response.json()["id"]


BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def seed_blog(store, blog_id, author, tags=(), minutes=0, draft=False, title=None, reads=0, likes=0):
    title = title or blog_id.replace("-", " ")
    store.put(BLOGS, blog_id, {
        "blog_id": blog_id,
        "title": title,
        "title_keywords": sorted(set(title.lower().split())),
        "des": "",
        "banner": "",
        "content": {"blocks": []},
        "tags": list(tags),
        "author": author,
        "activity": {
            "total_likes": likes,
            "total_comments": 0,
            "total_reads": reads,
            "total_parent_comments": 0,
        },
        "comments": [],
        "draft": draft,
        "publishedAt": BASE_TIME + timedelta(minutes=minutes),
    })
