from __future__ import annotations

import json
import logging
import os
from email.utils import formatdate
from typing import Any

import pytest
import structlog
from fastapi.testclient import TestClient

from drone_cache_convert.auth import body_digest, sign_request
from drone_cache_convert.config.settings import AppSettings, get_settings
from drone_cache_convert.conversion import DocumentRewriter
from drone_cache_convert.gateway.app import create_app

TEST_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    for key in list(os.environ):
        if key.startswith(("PLUGIN_", "CACHE_")):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if not type(handler).__module__.startswith("_pytest."):
            root.removeHandler(handler)


@pytest.fixture
def rewriter() -> DocumentRewriter:
    return DocumentRewriter(image="foo", cache_path="/tmp/cache", environment={})


@pytest.fixture
def secret() -> str:
    return TEST_SECRET


@pytest.fixture
def settings(secret: str) -> AppSettings:
    return AppSettings(secret=secret, image="foo", cache_path="/tmp/cache")


@pytest.fixture
def client(settings: AppSettings) -> TestClient:
    app = create_app(settings, environment={"CACHE_FOO": "bar", "HOME": "/root"})
    return TestClient(app)


@pytest.fixture
def signed_post(client: TestClient, secret: str):
    def _post(payload: dict[str, Any], *, key: str | None = None, body: bytes | None = None):
        raw = json.dumps(payload).encode()
        headers = {
            "Content-Type": "application/json",
            "Date": formatdate(usegmt=True),
            "Digest": body_digest(raw),
        }
        headers["Signature"] = sign_request(key or secret, "POST", "/", headers)
        return client.post("/", content=body if body is not None else raw, headers=headers)

    return _post
