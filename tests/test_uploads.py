import re

from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from tests.memory_store import MemoryStore


def test_upload_url_is_signed(client):
    response = client.get("/get-upload-url")
    assert response.status_code == 200
    data = response.json()

    assert data["uploadURL"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    fields = data["fields"]
    assert fields["api_key"] == "123456789"
    assert fields["allowed_formats"] == "jpg,jpeg"
    assert re.match(r"^.+-\d{13}$", fields["public_id"])
    assert re.match(r"^[0-9a-f]{40}$", fields["signature"])


def test_upload_urls_are_unique(client):
    first = client.get("/get-upload-url").json()["fields"]["public_id"]
    second = client.get("/get-upload-url").json()["fields"]["public_id"]
    assert first != second


def test_missing_storage_credentials():
    app = create_app(Settings(secret_access_key="test-secret"), store=MemoryStore())
    response = TestClient(app).get("/get-upload-url")
    assert response.status_code == 500
    assert response.json() == {"error": "Image storage is not configured"}
