# 单份餐点配置器：选择主餐、辣度、加料后生成 CartItem

import logging
from enum import Enum
from typing import Any, Dict, Optional

from .catalog import DEFAULT_CATALOG, Catalog, Dish
from .models import CartItem, next_time_id
from .pricing import calculate_item_total

logger = logging.getLogger(__name__)


class BuilderMode(str, Enum):
    ADD = 'add'
    EDIT = 'edit'


class ItemBuilder:
    """
    餐点配置器

    状态: 关闭 -> 编辑中(add/edit) -> 提交 或 取消
    加料表中永远不保存数量为0的项
    """

    def __init__(self, catalog: Catalog = None):
        self.catalog = catalog or DEFAULT_CATALOG
        self._reset()

    def _reset(self):
        self.is_open = False
        self.mode = BuilderMode.ADD
        self.index = -1
        self.dish: Optional[Dish] = None
        self.spice = self.catalog.default_spice_id
        self.addons: Dict[str, int] = {}
        self._cart_id: Optional[int] = None

    def select_dish(self, dish: Dish):
        """选择主餐，以新增模式打开配置器，辣度和加料恢复默认"""
        self._reset()
        self.is_open = True
        self.dish = dish

    def edit_item(self, item: CartItem, index: int = -1):
        """以编辑模式打开已有明细，保留原明细ID"""
        self._reset()
        self.is_open = True
        self.mode = BuilderMode.EDIT
        self.index = index
        self.dish = item.dish
        self.spice = item.spice
        self.addons = {addon_id: qty for addon_id, qty in item.addons.items() if qty > 0}
        self._cart_id = item.cart_id

    def select_spice(self, spice_id: str) -> bool:
        if not self.is_open or not self.catalog.has_spice(spice_id):
            return False
        self.spice = spice_id
        return True

    def adjust_addon(self, addon_id: str, delta: int) -> int:
        """
        调整加料数量

        新数量 = max(0, 当前数量 + delta)，为0时移除该项

        Returns:
            调整后的数量
        """
        if not self.is_open:
            return 0

        new_qty = max(0, self.addons.get(addon_id, 0) + delta)
        if new_qty == 0:
            self.addons.pop(addon_id, None)
        else:
            self.addons[addon_id] = new_qty
        return new_qty

    def addon_quantity(self, addon_id: str) -> int:
        return self.addons.get(addon_id, 0)

    def preview_total(self) -> Optional[int]:
        if self.dish is None:
            return None
        return calculate_item_total(self.dish, self.addons, self.catalog)

    def commit(self) -> Optional[CartItem]:
        """
        生成明细并关闭配置器

        未选择主餐时不做任何操作，返回 None
        """
        if not self.is_open or self.dish is None:
            logger.debug("配置器未选择主餐，忽略提交")
            return None

        if self.mode == BuilderMode.EDIT and self._cart_id is not None:
            cart_id = self._cart_id
        else:
            cart_id = next_time_id()

        item = CartItem(
            cart_id=cart_id,
            dish=self.dish,
            spice=self.spice,
            addons=dict(self.addons),
            total_price=calculate_item_total(self.dish, self.addons, self.catalog)
        )
        self._reset()
        return item

    def cancel(self):
        self._reset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_open": self.is_open,
            "mode": self.mode.value,
            "index": self.index,
            "dish": self.dish.model_dump() if self.dish else None,
            "spice": self.spice,
            "addons": dict(self.addons),
            "preview_total": self.preview_total()
        }
