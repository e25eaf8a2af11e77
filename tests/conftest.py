import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Keep tests deterministic and offline-safe.
os.environ["GEMINI_API_KEY"] = ""
os.environ["LOG_JSON"] = "false"

from image_proxy.config import Settings  # noqa: E402
from image_proxy.main import create_app, get_image_client  # noqa: E402
from tests.stubs import StubImageClient  # noqa: E402


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    root = tmp_path / "frontend"
    root.mkdir()
    (root / "index.html").write_text("<h1>proxy</h1>", encoding="utf-8")
    return root


@pytest.fixture
def make_client(static_dir: Path):
    def _make(stub: StubImageClient | None = None, **overrides) -> TestClient:
        values = {"gemini_api_key": "test-key", "static_dir": str(static_dir)}
        values.update(overrides)
        app = create_app(Settings(**values))
        if stub is not None:
            app.dependency_overrides[get_image_client] = lambda: stub
        return TestClient(app)

    return _make
