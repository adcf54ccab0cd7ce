# 购物车：当前交易的明细集合

import logging
from datetime import datetime
from typing import List, Optional

from .models import CartItem, OrderRecord, generate_order_id
from .pricing import calculate_order_total

logger = logging.getLogger(__name__)


class Cart:
    """当前交易的购物车，提交后清空"""

    def __init__(self):
        self._items: List[CartItem] = []

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def add(self, item: CartItem):
        self._items.append(item)

    def remove(self, cart_id: int) -> bool:
        """移除指定明细，不存在时不做任何操作"""
        before = len(self._items)
        self._items = [item for item in self._items if item.cart_id != cart_id]
        return len(self._items) != before

    def total(self) -> int:
        return calculate_order_total(self._items)

    def clear(self):
        self._items = []

    def submit(self, now: datetime = None) -> Optional[OrderRecord]:
        """
        提交购物车，生成订单并清空购物车

        订单中的明细是购物车的深拷贝，之后修改购物车不会影响历史订单
        空购物车返回 None
        """
        if not self._items:
            logger.debug("购物车为空，忽略提交")
            return None

        snapshot = [item.model_copy(deep=True) for item in self._items]
        order = OrderRecord(
            id=generate_order_id(),
            timestamp=now or datetime.now(),
            items=snapshot,
            total_amount=calculate_order_total(snapshot)
        )
        self._items = []
        return order
