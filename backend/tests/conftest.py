import pytest
from fastapi.testclient import TestClient

from ielts_app.gemini_client import get_gemini_client, get_optional_gemini_client
from ielts_app.main import create_app

from fakes import FakeGeminiClient


@pytest.fixture
def fake_client():
    return FakeGeminiClient()


@pytest.fixture
def app(tmp_path, fake_client):
    application = create_app(database_url=f"sqlite:///{tmp_path / 'api.db'}")
    application.dependency_overrides[get_gemini_client] = lambda: fake_client
    application.dependency_overrides[get_optional_gemini_client] = lambda: fake_client
    return application


@pytest.fixture
def api(app):
    with TestClient(app) as client:
        yield client
