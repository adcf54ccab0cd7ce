# 计价：单份餐点小计与订单总额的唯一计算入口

from typing import Dict, Iterable

from .catalog import DEFAULT_CATALOG, Catalog, Dish
from .models import CartItem


def calculate_item_total(dish: Dish, addons: Dict[str, int], catalog: Catalog = None) -> int:
    """
    计算单份餐点小计

    小计 = 主餐单价 + Σ(加料单价 × 数量)
    目录中不存在的加料ID按0计价，不抛异常

    Args:
        dish: 主餐
        addons: 加料数量 {addon_id: quantity}
        catalog: 菜单目录，默认使用内置目录

    Returns:
        小计金额
    """
    catalog = catalog or DEFAULT_CATALOG
    total = dish.unit_price
    for addon_id, quantity in addons.items():
        addon = catalog.get_addon(addon_id)
        if addon is None:
            continue
        total += addon.unit_price * quantity
    return total


def calculate_order_total(items: Iterable[CartItem]) -> int:
    """订单总额 = Σ 明细小计"""
    return sum(item.total_price for item in items)
