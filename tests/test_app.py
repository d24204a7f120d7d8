import pytest
from fastapi.testclient import TestClient
from app import create_app
from tlpcore.config import get_settings

@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    # 清除 lru_cache，确保 get_settings 重新读取环境变量
    get_settings.cache_clear()

    app = create_app()
    with TestClient(app) as c:
        yield c

    get_settings.cache_clear()

def test_app_root(client):
    """测试根路径"""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

def test_docs_exist(client):
    """测试 Swagger UI 是否存在"""
    response = client.get("/docs")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]

def test_routes_registered(client):
    paths = {r.path for r in client.app.routes}
    assert "/api/v1/health" in paths
    assert "/import/tlp" in paths
    assert "/export/tlp" in paths
