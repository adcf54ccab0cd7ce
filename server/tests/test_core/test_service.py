# 收银服务整体流程测试

import asyncio
from datetime import datetime

import httpx
import pytest

from pos.analytics import TimeRange
from pos.export import ExportError, SheetsExporter, StaticTokenProvider
from pos.order_ledger import EditState
from pos.service import PosService


def order_signature(service, now):
    """点一份麻辣招牌(豬肉片×2, 豆皮×1) 与一份綜合煲"""
    service.select_dish('m1')
    service.item_builder.adjust_addon('a1', 1)
    service.item_builder.adjust_addon('a1', 1)
    service.item_builder.adjust_addon('a10', 1)
    service.add_to_cart()
    service.select_dish('m4')
    service.add_to_cart()
    return service.submit_order(now)


class TestOrdering:
    """测试点餐流程"""

    def test_full_order_flow(self, service, now, assert_order_consistent):
        """测试从选餐到结账的完整流程"""
        order = order_signature(service, now)

        assert order.total_amount == 230
        assert service.cart.is_empty()
        assert service.orders.get(order.id) == order
        assert_order_consistent(order)

    def test_unknown_dish(self, service):
        """测试选择不存在的主餐"""
        assert service.select_dish('m999') is False
        assert service.item_builder.is_open is False

    def test_add_without_dish(self, service):
        """测试未选主餐时加入购物车"""
        assert service.add_to_cart() is None
        assert service.cart.is_empty()

    def test_submit_empty_cart(self, service, now):
        """测试空购物车结账"""
        assert service.submit_order(now) is None
        assert len(service.orders) == 0


class TestSalesOverview:
    """测试销量总览"""

    def test_today(self, service, now):
        """测试今日销量"""
        order_signature(service, now)
        order_signature(service, datetime(2024, 3, 14, 20, 0))

        overview = service.sales_overview(TimeRange.TODAY, now=now)
        assert overview["summary"] == {"total_revenue": 230, "total_count": 2, "order_count": 1}
        assert overview["ranking"] == [{"name": "麻辣招牌", "count": 1}, {"name": "綜合煲", "count": 1}]

    def test_orders_newest_first(self, service, now):
        """测试订单按新到旧排列"""
        older = order_signature(service, datetime(2024, 3, 15, 9, 0))
        newer = order_signature(service, datetime(2024, 3, 15, 11, 0))
        overview = service.sales_overview(TimeRange.TODAY, now=now)
        assert [o.id for o in overview["orders"]] == [newer.id, older.id]

    def test_custom_range(self, service):
        """测试自定义区间"""
        order_signature(service, datetime(2024, 1, 1, 23, 0))
        order_signature(service, datetime(2024, 1, 2, 0, 0))
        overview = service.sales_overview(TimeRange.CUSTOM, custom_start='2024-01-01',
                                          custom_end='2024-01-01')
        assert overview["summary"]["order_count"] == 1


class TestOrderEditing:
    """测试订单修正"""

    def test_edit_and_save(self, service, storage, now):
        """测试修正后保存并写回存储"""
        order = order_signature(service, now)

        session = service.start_order_edit(order.id)
        session.remove_item(1)
        updated = service.save_order_edit()

        assert updated.total_amount == 170
        assert service.order_editor is None
        assert storage.load_orders()[0].total_amount == 170

    def test_cancel(self, service, now):
        """测试放弃修正"""
        order = order_signature(service, now)
        session = service.start_order_edit(order.id)
        session.remove_item(0)
        service.cancel_order_edit()

        assert session.state == EditState.CANCELLED
        assert service.orders.get(order.id).total_amount == 230

    def test_unknown_order(self, service):
        """测试修正不存在的订单"""
        assert service.start_order_edit('ord-missing') is None

    def test_new_session_replaces_old(self, service, now):
        """测试打开新修正会取消旧修正"""
        first = order_signature(service, now)
        second = order_signature(service, now)
        old_session = service.start_order_edit(first.id)
        service.start_order_edit(second.id)

        assert old_session.state == EditState.CANCELLED
        assert service.order_editor.order_id == second.id

    def test_delete_order_closes_session(self, service, now):
        """测试删除正在修正的订单"""
        order = order_signature(service, now)
        service.start_order_edit(order.id)
        assert service.delete_order(order.id) is True
        assert service.order_editor is None
        assert service.save_order_edit() is None


class TestStock:
    """测试进货流程"""

    def test_stock_overview(self, service, now):
        """测试进货总览"""
        service.add_stock('高麗菜', 3, 150, '顆', now)
        service.add_stock('油', 1, 300, '桶', datetime(2024, 3, 14, 8))

        overview = service.stock_overview()
        assert overview["summary"]["total_cost"] == 450
        assert list(overview["groups"]) == ['2024-03-15', '2024-03-14']
        assert [i.name for i in overview["quick_items"]][-1] == '油'

    def test_stock_edit(self, service, now):
        """测试修正进货记录"""
        entry = service.add_stock('高麗菜', 3, 150, '顆', now)
        session = service.start_stock_edit(entry.id)
        session.set_cost(180)
        updated = service.save_stock_edit()

        assert updated.cost == 180
        assert service.stock.get(entry.id).cost == 180
        assert service.stock_editor is None

    def test_invalid_stock_input_ignored(self, service, storage, now):
        """测试负数进货数量被忽略且不写入存储"""
        assert service.add_stock("高麗菜", -3, 150, "顆", now) is None
        assert len(service.stock) == 0
        assert storage.load_stock() == []

    def test_delete_stock(self, service, now):
        """测试删除正在修正的进货记录"""
        entry = service.add_stock('高麗菜', 3, 150, '顆', now)
        service.start_stock_edit(entry.id)
        assert service.delete_stock(entry.id) is True
        assert service.stock_editor is None
        assert service.delete_stock(entry.id) is False


class TestFinanceAndExport:
    """测试本月盈余与导出"""

    def test_finance(self, service, now):
        """测试本月盈余"""
        order_signature(service, now)
        service.add_stock('高麗菜', 3, 150, '顆', now)
        assert service.finance(now) == {
            "year": 2024, "month": 3, "income": 230, "expense": 150, "profit": 80
        }

    def test_mock_export(self, service, now):
        """测试模拟导出"""
        order_signature(service, now)
        result = asyncio.run(service.export())
        assert result["mock"] is True
        assert result["exported"] is True

    def test_failed_export_keeps_data(self, storage, now):
        """测试导出失败不影响本地数据"""
        exporter = SheetsExporter(
            token_provider=StaticTokenProvider("token"),
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        service = PosService(storage=storage, exporter=exporter)
        order = order_signature(service, now)
        service.add_stock('高麗菜', 3, 150, '顆', now)

        with pytest.raises(ExportError):
            asyncio.run(service.export())

        assert service.orders.orders == [order]
        assert len(service.stock) == 1
        assert storage.load_orders() == [order]
