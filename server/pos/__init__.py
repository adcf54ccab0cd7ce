# 收银核心：菜单、计价、购物车、订单与进货账本、统计

from .catalog import Addon, Catalog, DEFAULT_CATALOG, Dish, SpiceLevel
from .models import CartItem, FrequentStockItem, OrderRecord, StockEntry
from .pricing import calculate_item_total, calculate_order_total
from .builder import BuilderMode, ItemBuilder
from .cart import Cart
from .order_ledger import EditState, OrderEditSession, OrderLedger
from .stock_ledger import StockEditSession, StockLedger
from .analytics import TimeRange

__all__ = [
    "Addon", "Catalog", "DEFAULT_CATALOG", "Dish", "SpiceLevel",
    "CartItem", "FrequentStockItem", "OrderRecord", "StockEntry",
    "calculate_item_total", "calculate_order_total",
    "BuilderMode", "ItemBuilder", "Cart",
    "EditState", "OrderEditSession", "OrderLedger",
    "StockEditSession", "StockLedger",
    "TimeRange"
]
