# API测试共享配置和固定装置

import pytest
import os
import sys
from pathlib import Path
from fastapi.testclient import TestClient

# 添加项目路径
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# 设置测试环境
os.environ['CONFIG_ENV'] = 'testing'

from api.main import app
from api.dependencies import get_pos_service


@pytest.fixture
def client(service):
    """使用内存存储的测试客户端"""
    app.dependency_overrides[get_pos_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def cart_with_items(client):
    """购物车中放入 麻辣招牌(豬肉片×2, 豆皮×1) 与 綜合煲"""
    client.post("/api/pos/builder/dish", json={"dish_id": "m1"})
    client.post("/api/pos/builder/addons", json={"addon_id": "a1", "delta": 2})
    client.post("/api/pos/builder/addons", json={"addon_id": "a10", "delta": 1})
    client.post("/api/pos/builder/commit")
    client.post("/api/pos/builder/dish", json={"dish_id": "m4"})
    response = client.post("/api/pos/builder/commit")
    return response.json()["data"]["cart"]


@pytest.fixture
def sample_order_id(client, cart_with_items):
    """送出订单并返回ID"""
    response = client.post("/api/pos/cart/submit")
    assert response.status_code == 200
    return response.json()["data"]["id"]
