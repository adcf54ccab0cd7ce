# 点餐模块（配置器、购物车、结账）

from .routes import router as orders_router
from .models import SelectDishRequest, SelectSpiceRequest, AdjustAddonRequest

__all__ = [
    "orders_router",
    "SelectDishRequest",
    "SelectSpiceRequest",
    "AdjustAddonRequest"
]
