# 后台管理模块（销量分析、订单修正、本月盈余、报表导出）

from .routes import router as admin_router
from .models import EditOrderDatetimeRequest, EditItemDishRequest

__all__ = [
    "admin_router",
    "EditOrderDatetimeRequest",
    "EditItemDishRequest"
]
