"""
Shared fixtures: a temporary storage root and a TestClient wired to it.
"""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from file_gateway.main import app
from file_gateway.modules.files.service import StorageGateway, get_gateway, reset_gateway


@pytest.fixture
def storage_root(tmp_path: Path, monkeypatch) -> Path:
    root = tmp_path / "user_files"
    monkeypatch.setenv("STORAGE_ROOT", str(root))
    reset_gateway()
    yield root
    reset_gateway()


@pytest.fixture
def gateway(storage_root: Path) -> StorageGateway:
    return StorageGateway(storage_root)


@pytest.fixture
def client(gateway: StorageGateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def snapshot():
    """Relative path -> bytes for every file under a root."""
    def _snap(root: Path) -> dict:
        return {p.relative_to(root).as_posix(): p.read_bytes() for p in root.rglob("*") if p.is_file()}
    return _snap
