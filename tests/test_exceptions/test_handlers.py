"""异常处理器集成测试

树操作抛出的异常经 FastAPI 异常处理器转换为统一的 JSON 响应。
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ytree.exceptions import (
    ErrorCode,
    FormatError,
    register_exception_handlers,
)
from ytree.orm.tree import AncestryConfig, PathCodec


codec = PathCodec(AncestryConfig())


@pytest.fixture
def client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/paths/decode")
    def decode(path: str):
        return {"ids": codec.decode(path)}

    @app.get("/nodes/{node_id}")
    def get_node(node_id: int):
        from ytree.exceptions import Err
        raise Err.not_found(f"节点不存在: {node_id}", node_id=node_id)

    @app.delete("/nodes/{node_id}")
    def delete_node(node_id: int):
        from ytree.exceptions import IntegrityError
        raise IntegrityError(f"节点 {node_id} 仍有子节点", node_id=node_id)

    return TestClient(app)


class TestExceptionHandlers:
    """异常响应测试"""

    def test_success(self, client):
        response = client.get("/paths/decode", params={"path": "1/4/9"})

        assert response.status_code == 200
        assert response.json() == {"ids": [1, 4, 9]}

    def test_format_error_response(self, client):
        response = client.get("/paths/decode", params={"path": "1//9"})

        assert response.status_code == 422
        data = response.json()
        assert data["status"] == "error"
        assert data["error_code"] == ErrorCode.INVALID_FORMAT
        assert data["msg_details"]
        assert data["data"] == {}

    def test_not_found_response(self, client):
        response = client.get("/nodes/42")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NODE_NOT_FOUND"

    def test_integrity_response(self, client):
        response = client.delete("/nodes/7")

        assert response.status_code == 409
        assert response.json()["error_code"] == "RESTRICT_VIOLATION"

    def test_debug_info(self, client, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        response = client.get("/nodes/42")

        assert response.json()["debug_info"] == {"node_id": 42}

    def test_no_debug_info_by_default(self, client, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        response = client.get("/nodes/42")

        assert "debug_info" not in response.json()


def test_format_error_is_raised_directly():
    with pytest.raises(FormatError):
        codec.decode("/1")
