# 收银与后台操作的统一入口，供界面层调用

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from db.storage import PosStorage
from .analytics import (
    DateLike, TimeRange, filter_by_time_range, group_by_date, monthly_finance,
    product_ranking, sales_summary, stock_summary
)
from .builder import ItemBuilder
from .cart import Cart
from .catalog import DEFAULT_CATALOG, Catalog
from .export import GrantTokenProvider, SheetsExporter
from .models import CartItem, OrderRecord, StockEntry
from .order_ledger import OrderEditSession, OrderLedger
from .stock_ledger import StockEditSession, StockLedger

logger = logging.getLogger(__name__)


class PosService:
    """
    收银服务

    持有菜单目录、购物车、配置器、两本账本以及当前打开的修正会话；
    任一账本变更后立即写回存储
    """

    def __init__(self, storage: PosStorage = None, catalog: Catalog = None,
                 exporter: SheetsExporter = None):
        self.catalog = catalog or DEFAULT_CATALOG
        self.storage = storage

        if storage is not None:
            orders = storage.load_orders()
            entries = storage.load_stock()
            frequent = storage.load_frequent()
            logger.info(f"载入历史数据: 订单 {len(orders)} 笔，进货 {len(entries)} 笔，常用品项 {len(frequent)} 个")
        else:
            orders, entries, frequent = [], [], None

        self.orders = OrderLedger(orders, on_change=self._save_orders)
        self.stock = StockLedger(entries, frequent, on_change=self._save_stock)
        self.cart = Cart()
        self.item_builder = ItemBuilder(self.catalog)
        self.order_editor: Optional[OrderEditSession] = None
        self.stock_editor: Optional[StockEditSession] = None
        self.exporter = exporter or SheetsExporter()

    def _save_orders(self):
        if self.storage is not None:
            self.storage.save_orders(self.orders.orders)

    def _save_stock(self):
        if self.storage is not None:
            self.storage.save_stock_with_frequent(self.stock.entries, self.stock.frequent_items)

    # ===== 点餐 =====

    def select_dish(self, dish_id: str) -> bool:
        dish = self.catalog.get_dish(dish_id)
        if dish is None:
            return False
        self.item_builder.select_dish(dish)
        return True

    def add_to_cart(self) -> Optional[CartItem]:
        item = self.item_builder.commit()
        if item is not None:
            self.cart.add(item)
        return item

    def submit_order(self, now: datetime = None) -> Optional[OrderRecord]:
        """提交购物车，订单写入账本；空购物车不做任何操作"""
        order = self.cart.submit(now)
        if order is not None:
            self.orders.append(order)
        return order

    # ===== 销量分析 =====

    def sales_overview(self, time_range: TimeRange = TimeRange.TODAY, now: datetime = None,
                       custom_start: DateLike = None, custom_end: DateLike = None) -> Dict[str, Any]:
        filtered = filter_by_time_range(self.orders.orders, time_range, now, custom_start, custom_end)
        return {
            "orders": sorted(filtered, key=lambda o: o.timestamp, reverse=True),
            "summary": sales_summary(filtered),
            "ranking": product_ranking(filtered)
        }

    def start_order_edit(self, order_id: str) -> Optional[OrderEditSession]:
        order = self.orders.get(order_id)
        if order is None:
            return None
        if self.order_editor is not None:
            self.order_editor.cancel()
        self.order_editor = OrderEditSession(self.orders, order, self.catalog)
        return self.order_editor

    def save_order_edit(self) -> Optional[OrderRecord]:
        if self.order_editor is None:
            return None
        updated = self.order_editor.save()
        self.order_editor = None
        return updated

    def cancel_order_edit(self):
        if self.order_editor is not None:
            self.order_editor.cancel()
            self.order_editor = None

    def delete_order(self, order_id: str) -> bool:
        if self.order_editor is not None and self.order_editor.order_id == order_id:
            self.cancel_order_edit()
        return self.orders.delete(order_id)

    # ===== 进货 =====

    def add_stock(self, name: str, quantity: Optional[float], cost: Optional[float],
                  unit: str = None, now: datetime = None) -> Optional[StockEntry]:
        return self.stock.record(name, quantity, cost, unit, now)

    def stock_overview(self) -> Dict[str, Any]:
        entries = self.stock.entries
        return {
            "summary": stock_summary(entries),
            "groups": group_by_date(entries),
            "quick_items": self.stock.quick_items()
        }

    def start_stock_edit(self, entry_id: str) -> Optional[StockEditSession]:
        entry = self.stock.get(entry_id)
        if entry is None:
            return None
        if self.stock_editor is not None:
            self.stock_editor.cancel()
        self.stock_editor = StockEditSession(self.stock, entry)
        return self.stock_editor

    def save_stock_edit(self) -> Optional[StockEntry]:
        if self.stock_editor is None:
            return None
        updated = self.stock_editor.save()
        self.stock_editor = None
        return updated

    def cancel_stock_edit(self):
        if self.stock_editor is not None:
            self.stock_editor.cancel()
            self.stock_editor = None

    def delete_stock(self, entry_id: str) -> bool:
        if self.stock_editor is not None and self.stock_editor.original.id == entry_id:
            self.cancel_stock_edit()
        return self.stock.delete(entry_id)

    # ===== 盈余与导出 =====

    def finance(self, now: datetime = None) -> Dict[str, Any]:
        return monthly_finance(self.orders.orders, self.stock.entries, now)

    async def export(self, grant: Dict[str, Any] = None) -> Dict[str, Any]:
        """
        以调用时的账本快照导出报表

        grant 为前端授权弹窗的回传结果，提供时优先于配置中的授权
        """
        orders = self.orders.orders
        entries = self.stock.entries
        token_provider = GrantTokenProvider(grant) if grant else None
        return await self.exporter.export(orders, entries, token_provider=token_provider)
