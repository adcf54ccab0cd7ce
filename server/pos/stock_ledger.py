# 进货账本：进货记录的增删改与常用品项学习

import logging
import math
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from .catalog import (
    ALWAYS_KNOWN_STOCK_NAMES, DEFAULT_FREQUENT_STOCK_ITEMS, DEFAULT_STOCK_UNIT,
    PRESET_STOCK_ITEMS
)
from .models import FrequentStockItem, StockEntry, generate_stock_id
from .order_ledger import EDIT_DATE_FORMAT, EditState

logger = logging.getLogger(__name__)


def _valid_amount(value) -> bool:
    return value is not None and not math.isnan(value) and value >= 0


def default_frequent_items() -> List[FrequentStockItem]:
    return [FrequentStockItem(name=name, unit=unit) for name, unit in DEFAULT_FREQUENT_STOCK_ITEMS]


class StockLedger:
    """进货账本，同时维护常用品项列表"""

    def __init__(self, entries: Iterable[StockEntry] = None,
                 frequent_items: Iterable[FrequentStockItem] = None,
                 on_change: Callable[[], None] = None):
        self._entries: List[StockEntry] = list(entries or [])
        if frequent_items is None:
            frequent_items = default_frequent_items()
        self._frequent: List[FrequentStockItem] = []
        for item in frequent_items:
            if not self._is_frequent(item.name):
                self._frequent.append(item)
        self.on_change = on_change

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    def _is_frequent(self, name: str) -> bool:
        return any(item.name == name for item in self._frequent)

    @property
    def entries(self) -> List[StockEntry]:
        return list(self._entries)

    @property
    def frequent_items(self) -> List[FrequentStockItem]:
        return list(self._frequent)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> Optional[StockEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def quick_items(self) -> List[FrequentStockItem]:
        """快速选择列表：预设品项 + 已学习的常用品项"""
        presets = [FrequentStockItem(name=name, unit=unit) for name, unit in PRESET_STOCK_ITEMS]
        return presets + self.frequent_items

    def append(self, entry: StockEntry):
        """追加进货记录；非预设且未登记的品项名会自动记为常用品项"""
        self._entries.append(entry)
        logger.info(f"新增进货 {entry.id}: {entry.name} {entry.quantity}{entry.unit}，花费 {entry.cost}")

        if entry.name not in ALWAYS_KNOWN_STOCK_NAMES and not self._is_frequent(entry.name):
            self._frequent.append(FrequentStockItem(name=entry.name, unit=entry.unit))
            logger.info(f"登记常用品项: {entry.name} ({entry.unit})")

        self._changed()

    def record(self, name: str, quantity: Optional[float], cost: Optional[float],
               unit: str = None, now: datetime = None) -> Optional[StockEntry]:
        """
        按操作员输入登记一笔进货

        品名、数量、花费缺一不可，数量与花费须为非负数，否则不做任何操作；
        单位为空时使用默认单位

        Returns:
            新建的进货记录，或 None
        """
        name = (name or '').strip()
        if not name or quantity is None or cost is None:
            logger.debug("进货信息不完整，忽略登记")
            return None
        if not _valid_amount(quantity) or not _valid_amount(cost):
            logger.debug(f"进货数量或花费无效，忽略登记: {quantity}, {cost}")
            return None

        entry = StockEntry(
            id=generate_stock_id(),
            timestamp=now or datetime.now(),
            name=name,
            quantity=quantity,
            unit=(unit or '').strip() or DEFAULT_STOCK_UNIT,
            cost=cost
        )
        self.append(entry)
        return entry

    def update(self, entry: StockEntry) -> bool:
        for i, existing in enumerate(self._entries):
            if existing.id == entry.id:
                self._entries[i] = entry
                logger.info(f"修正进货 {entry.id}: {entry.name}")
                self._changed()
                return True
        logger.debug(f"进货记录 {entry.id} 不存在，忽略修正")
        return False

    def delete(self, entry_id: str) -> bool:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        if len(self._entries) == before:
            return False
        logger.info(f"删除进货 {entry_id}")
        self._changed()
        return True


class StockEditSession:
    """进货记录的修正会话，只能修改日期、数量、花费"""

    def __init__(self, ledger: StockLedger, entry: StockEntry):
        self.ledger = ledger
        self.original = entry
        self.edit_date = entry.timestamp.strftime(EDIT_DATE_FORMAT)
        self.quantity = entry.quantity
        self.cost = entry.cost
        self.state = EditState.EDITING

    @property
    def is_editing(self) -> bool:
        return self.state == EditState.EDITING

    def set_date(self, date_str: str) -> bool:
        if not self.is_editing:
            return False
        try:
            datetime.strptime(date_str, EDIT_DATE_FORMAT)
        except ValueError:
            return False
        self.edit_date = date_str
        return True

    def set_quantity(self, quantity: float) -> bool:
        if not self.is_editing or not _valid_amount(quantity):
            return False
        self.quantity = quantity
        return True

    def set_cost(self, cost: float) -> bool:
        if not self.is_editing or not _valid_amount(cost):
            return False
        self.cost = cost
        return True

    def save(self) -> Optional[StockEntry]:
        if not self.is_editing:
            return None

        if self.edit_date == self.original.timestamp.strftime(EDIT_DATE_FORMAT):
            timestamp = self.original.timestamp
        else:
            timestamp = datetime.strptime(self.edit_date, EDIT_DATE_FORMAT)

        updated = self.original.model_copy(update={
            "timestamp": timestamp,
            "quantity": self.quantity,
            "cost": self.cost
        })
        self.state = EditState.SAVED
        if not self.ledger.update(updated):
            return None
        return updated

    def cancel(self):
        if self.is_editing:
            self.state = EditState.CANCELLED

    def to_dict(self):
        return {
            "entry_id": self.original.id,
            "name": self.original.name,
            "unit": self.original.unit,
            "state": self.state.value,
            "edit_date": self.edit_date,
            "quantity": self.quantity,
            "cost": self.cost
        }
