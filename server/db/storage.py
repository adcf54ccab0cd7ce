# 本地持久化：订单、进货、常用品项三个存储槽

import json
import logging
import sqlite3
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import TypeAdapter, ValidationError

from pos.models import FrequentStockItem, OrderRecord, StockEntry
from pos.stock_ledger import default_frequent_items
from .manager import DatabaseManager

logger = logging.getLogger(__name__)

ORDERS_KEY = 'tofu-pos-orders'
STOCK_KEY = 'tofu-pos-stock'
FREQUENT_KEY = 'tofu-pos-frequent'

DEFAULT_KEYS = {
    'orders': ORDERS_KEY,
    'stock': STOCK_KEY,
    'frequent': FREQUENT_KEY,
}

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

_UPSERT = """
    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
"""


class PosStorage:
    """
    键值存储

    每个槽位保存一个JSON数组；读取时数据缺失或损坏不会抛异常，
    而是回退为空列表（常用品项回退为默认列表）
    """

    def __init__(self, db: DatabaseManager, keys: Dict[str, str] = None):
        self.db = db
        self.keys = dict(DEFAULT_KEYS)
        if keys:
            self.keys.update(keys)
        self.db.execute_single(_SCHEMA)

    def get_raw(self, key: str) -> Optional[str]:
        row = self.db.execute_single("SELECT value FROM kv_store WHERE key = ?", [key]).fetchone()
        return row[0] if row else None

    def set_raw(self, key: str, value: str):
        self.db.execute_single(_UPSERT, [key, value])

    def _load_list(self, key: str, model: Type, default: Callable[[], List[Any]]) -> List[Any]:
        try:
            raw = self.get_raw(key)
        except sqlite3.Error as e:
            logger.warning(f"读取存储槽 {key} 失败，使用默认值: {str(e)}")
            return default()

        if raw is None:
            return default()

        try:
            return TypeAdapter(List[model]).validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"存储槽 {key} 数据损坏，使用默认值: {str(e)[:200]}")
            return default()

    def _dump_list(self, model: Type, values: List[Any]) -> str:
        payload = TypeAdapter(List[model]).dump_python(list(values), mode='json')
        return json.dumps(payload, ensure_ascii=False)

    def _save_list(self, key: str, model: Type, values: List[Any]):
        self.set_raw(key, self._dump_list(model, values))
        logger.debug(f"已写入存储槽 {key}，共 {len(values)} 条")

    def load_orders(self) -> List[OrderRecord]:
        return self._load_list(self.keys['orders'], OrderRecord, list)

    def load_stock(self) -> List[StockEntry]:
        return self._load_list(self.keys['stock'], StockEntry, list)

    def load_frequent(self) -> List[FrequentStockItem]:
        return self._load_list(self.keys['frequent'], FrequentStockItem, default_frequent_items)

    def save_orders(self, orders: List[OrderRecord]):
        self._save_list(self.keys['orders'], OrderRecord, orders)

    def save_stock(self, entries: List[StockEntry]):
        self._save_list(self.keys['stock'], StockEntry, entries)

    def save_frequent(self, items: List[FrequentStockItem]):
        self._save_list(self.keys['frequent'], FrequentStockItem, items)

    def save_stock_with_frequent(self, entries: List[StockEntry], items: List[FrequentStockItem]):
        """
        在同一事务中写入进货记录与常用品项

        任一槽位写入失败时两者都回滚，保持进货记录与常用品项一致
        """
        rows = [
            (self.keys['stock'], self._dump_list(StockEntry, entries)),
            (self.keys['frequent'], self._dump_list(FrequentStockItem, items)),
        ]
        with self.db.transaction() as conn:
            for key, value in rows:
                conn.execute(_UPSERT, [key, value])
        logger.debug(f"已写入进货 {len(entries)} 条、常用品项 {len(items)} 个")
