# 测试配置和固定装置

import pytest
import os
import sys
from datetime import datetime
from pathlib import Path

# 添加项目路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# 设置测试环境
os.environ['CONFIG_ENV'] = 'testing'

from db.manager import DatabaseManager
from db.storage import PosStorage
from pos.builder import ItemBuilder
from pos.catalog import DEFAULT_CATALOG
from pos.models import CartItem, OrderRecord, StockEntry
from pos.pricing import calculate_item_total, calculate_order_total
from pos.service import PosService


@pytest.fixture
def catalog():
    return DEFAULT_CATALOG


@pytest.fixture
def test_db():
    """测试数据库实例（内存数据库）"""
    db = DatabaseManager(":memory:", auto_connect=True)
    yield db
    db.close()


@pytest.fixture
def storage(test_db):
    return PosStorage(test_db)


@pytest.fixture
def service(storage):
    """带内存存储的收银服务"""
    return PosService(storage=storage)


@pytest.fixture
def now():
    """固定的当前时间：2024-03-15 12:00"""
    return datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture
def make_item(catalog):
    """按主餐ID和加料生成已定价的明细"""
    def _make(dish_id: str, addons: dict = None, spice: str = '微辣') -> CartItem:
        builder = ItemBuilder(catalog)
        builder.select_dish(catalog.get_dish(dish_id))
        builder.select_spice(spice)
        for addon_id, qty in (addons or {}).items():
            builder.adjust_addon(addon_id, qty)
        return builder.commit()
    return _make


@pytest.fixture
def make_order(make_item):
    """生成历史订单"""
    counter = {"n": 0}

    def _make(timestamp: datetime, dish_ids=('m1',)) -> OrderRecord:
        counter["n"] += 1
        items = [make_item(dish_id) for dish_id in dish_ids]
        return OrderRecord(
            id=f"ord-test-{counter['n']}",
            timestamp=timestamp,
            items=items,
            total_amount=calculate_order_total(items)
        )
    return _make


@pytest.fixture
def make_stock():
    counter = {"n": 0}

    def _make(timestamp: datetime, name: str = '高麗菜', quantity: float = 1,
              cost: float = 100, unit: str = '顆') -> StockEntry:
        counter["n"] += 1
        return StockEntry(
            id=f"stk-test-{counter['n']}",
            timestamp=timestamp,
            name=name,
            quantity=quantity,
            unit=unit,
            cost=cost
        )
    return _make


@pytest.fixture
def assert_order_consistent(catalog):
    """校验订单明细小计与订单总额"""
    def _check(order: OrderRecord):
        for item in order.items:
            assert item.total_price == calculate_item_total(item.dish, item.addons, catalog)
            assert all(qty > 0 for qty in item.addons.values())
        assert order.total_amount == sum(item.total_price for item in order.items)
    return _check
