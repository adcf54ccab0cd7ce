# 进货API测试

import pytest


@pytest.fixture
def sample_entry_id(client):
    response = client.post("/api/admin/stock", json={
        "name": "高麗菜", "quantity": 3, "unit": "顆", "cost": 150
    })
    assert response.status_code == 200
    return response.json()["data"]["id"]


class TestStockRecords:
    """进货记录测试"""

    def test_create(self, client):
        """测试登记进货"""
        response = client.post("/api/admin/stock", json={"name": "油", "quantity": 1, "cost": 300})
        data = response.json()
        assert data["success"] is True
        assert data["data"]["unit"] == "個"

    def test_create_incomplete(self, client, service):
        """测试信息不完整时不登记"""
        response = client.post("/api/admin/stock", json={"name": "油", "quantity": 1})
        assert response.json()["success"] is False
        assert len(service.stock) == 0

    def test_negative_quantity_rejected(self, client):
        """测试负数数量被拒绝"""
        response = client.post("/api/admin/stock", json={"name": "油", "quantity": -1, "cost": 10})
        assert response.status_code == 422

    def test_overview(self, client, sample_entry_id):
        """测试进货总览"""
        client.post("/api/admin/stock", json={"name": "油", "quantity": 1, "unit": "桶", "cost": 300})
        data = client.get("/api/admin/stock").json()["data"]

        assert data["summary"]["total_cost"] == 450
        assert data["summary"]["items"]["高麗菜"] == {"quantity": 3, "unit": "顆"}
        day_entries = next(iter(data["groups"].values()))
        assert len(day_entries) == 2
        assert {"name": "油", "unit": "桶"} in data["quick_items"]

    def test_delete(self, client, sample_entry_id):
        """测试删除进货记录"""
        response = client.delete(f"/api/admin/stock/{sample_entry_id}")
        assert response.json()["success"] is True

        response = client.delete(f"/api/admin/stock/{sample_entry_id}")
        assert response.status_code == 404


class TestStockEdit:
    """进货修正测试"""

    def test_edit_and_save(self, client, sample_entry_id):
        """测试修正后保存"""
        response = client.post(f"/api/admin/stock/{sample_entry_id}/edit")
        assert response.json()["data"]["name"] == "高麗菜"

        response = client.put("/api/admin/stock/edit", json={"quantity": 4, "cost": 200, "date": "2024-03-10"})
        assert response.json()["data"]["quantity"] == 4

        response = client.post("/api/admin/stock/edit/save")
        data = response.json()["data"]
        assert data["cost"] == 200
        assert data["timestamp"].startswith("2024-03-10")

    def test_invalid_date(self, client, sample_entry_id):
        """测试无效日期"""
        client.post(f"/api/admin/stock/{sample_entry_id}/edit")
        response = client.put("/api/admin/stock/edit", json={"date": "10/03/2024"})
        assert response.json()["success"] is False

    def test_cancel(self, client, service, sample_entry_id):
        """测试放弃修正"""
        client.post(f"/api/admin/stock/{sample_entry_id}/edit")
        client.put("/api/admin/stock/edit", json={"cost": 1})
        client.post("/api/admin/stock/edit/cancel")

        assert service.stock.get(sample_entry_id).cost == 150
        response = client.post("/api/admin/stock/edit/save")
        assert response.status_code == 409

    def test_edit_unknown(self, client):
        """测试修正不存在的进货记录"""
        response = client.post("/api/admin/stock/stk-missing/edit")
        assert response.status_code == 404
