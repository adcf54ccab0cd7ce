# 订单账本：历史订单的追加、修正、删除

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .builder import BuilderMode, ItemBuilder
from .catalog import Catalog, Dish
from .models import CartItem, OrderRecord
from .pricing import calculate_order_total

logger = logging.getLogger(__name__)

EDIT_DATE_FORMAT = "%Y-%m-%d"
EDIT_TIME_FORMAT = "%H:%M"


class OrderLedger:
    """
    订单账本

    按插入顺序保存订单；update 不重新计算总额，由调用方保证
    total_amount 与明细一致（见 OrderEditSession.save）
    """

    def __init__(self, orders: Iterable[OrderRecord] = None,
                 on_change: Callable[[], None] = None):
        self._orders: List[OrderRecord] = list(orders or [])
        self.on_change = on_change

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    @property
    def orders(self) -> List[OrderRecord]:
        return list(self._orders)

    def __len__(self) -> int:
        return len(self._orders)

    def get(self, order_id: str) -> Optional[OrderRecord]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def append(self, order: OrderRecord):
        self._orders.append(order)
        logger.info(f"新增订单 {order.id}，金额 {order.total_amount}，共 {len(order.items)} 份")
        self._changed()

    def update(self, order: OrderRecord) -> bool:
        """整笔替换同ID订单，不存在时返回 False"""
        for i, existing in enumerate(self._orders):
            if existing.id == order.id:
                self._orders[i] = order
                logger.info(f"修正订单 {order.id}，金额 {existing.total_amount} -> {order.total_amount}")
                self._changed()
                return True
        logger.debug(f"订单 {order.id} 不存在，忽略修正")
        return False

    def delete(self, order_id: str) -> bool:
        before = len(self._orders)
        self._orders = [o for o in self._orders if o.id != order_id]
        if len(self._orders) == before:
            return False
        logger.info(f"删除订单 {order_id}")
        self._changed()
        return True

    def sorted_recent(self) -> List[OrderRecord]:
        """按时间倒序排列，时间相同时保持插入顺序"""
        return sorted(self._orders, key=lambda o: o.timestamp, reverse=True)


class EditState(str, Enum):
    EDITING = 'editing'
    SAVED = 'saved'
    CANCELLED = 'cancelled'


class OrderEditSession:
    """
    单笔订单的修正会话

    在订单明细的独立副本上操作，只有 save() 才会写回账本；
    cancel() 或直接丢弃会话对账本没有任何影响
    """

    def __init__(self, ledger: OrderLedger, order: OrderRecord, catalog: Catalog = None):
        self.ledger = ledger
        self.original = order
        self.order_id = order.id
        self.edit_date = order.timestamp.strftime(EDIT_DATE_FORMAT)
        self.edit_time = order.timestamp.strftime(EDIT_TIME_FORMAT)
        self.items: List[CartItem] = [item.model_copy(deep=True) for item in order.items]
        self.item_builder = ItemBuilder(catalog)
        self.state = EditState.EDITING

    @property
    def is_editing(self) -> bool:
        return self.state == EditState.EDITING

    def total(self) -> int:
        return calculate_order_total(self.items)

    def set_datetime(self, date_str: str = None, time_str: str = None) -> bool:
        """修改日期(YYYY-MM-DD)和时间(HH:MM)，格式错误时不做修改"""
        if not self.is_editing:
            return False
        new_date = date_str if date_str is not None else self.edit_date
        new_time = time_str if time_str is not None else self.edit_time
        try:
            datetime.strptime(new_date, EDIT_DATE_FORMAT)
            datetime.strptime(new_time, EDIT_TIME_FORMAT)
        except ValueError:
            logger.debug(f"无效的日期时间: {new_date} {new_time}")
            return False
        self.edit_date = new_date
        self.edit_time = new_time
        return True

    def remove_item(self, index: int) -> bool:
        if not self.is_editing or not 0 <= index < len(self.items):
            return False
        del self.items[index]
        return True

    def start_add_item(self, dish: Dish):
        if self.is_editing:
            self.item_builder.select_dish(dish)

    def start_edit_item(self, index: int) -> bool:
        if not self.is_editing or not 0 <= index < len(self.items):
            return False
        self.item_builder.edit_item(self.items[index], index)
        return True

    def commit_item(self) -> Optional[CartItem]:
        """提交内层配置器：新增模式追加明细，编辑模式替换原位置的明细"""
        if not self.is_editing:
            return None
        mode = self.item_builder.mode
        index = self.item_builder.index
        item = self.item_builder.commit()
        if item is None:
            return None

        if mode == BuilderMode.EDIT and 0 <= index < len(self.items):
            self.items[index] = item
        else:
            self.items.append(item)
        return item

    def cancel_item(self):
        self.item_builder.cancel()

    def _resolve_timestamp(self) -> datetime:
        if (self.edit_date == self.original.timestamp.strftime(EDIT_DATE_FORMAT)
                and self.edit_time == self.original.timestamp.strftime(EDIT_TIME_FORMAT)):
            return self.original.timestamp
        return datetime.strptime(f"{self.edit_date} {self.edit_time}",
                                 f"{EDIT_DATE_FORMAT} {EDIT_TIME_FORMAT}")

    def save(self) -> Optional[OrderRecord]:
        """重新计算总额并写回账本"""
        if not self.is_editing:
            return None

        items = list(self.items)
        updated = OrderRecord(
            id=self.order_id,
            timestamp=self._resolve_timestamp(),
            items=items,
            total_amount=calculate_order_total(items)
        )
        self.item_builder.cancel()
        self.state = EditState.SAVED
        if not self.ledger.update(updated):
            return None
        return updated

    def cancel(self):
        if self.is_editing:
            self.item_builder.cancel()
            self.state = EditState.CANCELLED

    def to_dict(self):
        return {
            "order_id": self.order_id,
            "state": self.state.value,
            "edit_date": self.edit_date,
            "edit_time": self.edit_time,
            "items": [item.model_dump(mode='json') for item in self.items],
            "total": self.total(),
            "item_builder": self.item_builder.to_dict()
        }
