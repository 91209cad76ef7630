"""
Tests for package metadata and the bundled FastAPI example.
"""

import importlib.util
from pathlib import Path

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

import contentgate

EXAMPLE_APP = Path(__file__).resolve().parent.parent / "examples" / "fastapi_app.py"


class TestPackageMetadata:
    """Test top-level package attributes."""

    def test_version_and_author(self):
        assert contentgate.__version__ == "0.1.0"
        assert contentgate.__author__ == "contentgate developers"
        assert not hasattr(contentgate, "__email__")


@pytest.fixture
def example_app(monkeypatch, token_config):
    monkeypatch.setenv("CONTENTGATE_JWT_SECRET", token_config.secret_key)
    spec = importlib.util.spec_from_file_location("fastapi_app_example", EXAMPLE_APP)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestFastAPIExample:
    """Test the example application end to end."""

    def test_get_article(self, example_app, premium_viewer, auth_headers):
        client = TestClient(example_app.app)

        response = client.get("/articles/deep-dive", headers=auth_headers(premium_viewer))

        assert response.status_code == 200
        assert response.json()['article']['title'] == "Deep dive"
        assert response.json()['viewer'] == premium_viewer.id

    def test_missing_article_is_rejected_before_the_handler(self, example_app, premium_viewer,
                                                            auth_headers):
        client = TestClient(example_app.app)

        response = client.get("/articles/ghost", headers=auth_headers(premium_viewer))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_handler_returns_404_for_unknown_article(self, example_app):
        with pytest.raises(HTTPException) as exc_info:
            await example_app.get_article("ghost", request=None)
        assert exc_info.value.status_code == 404
