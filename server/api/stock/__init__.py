# 进货模块

from .routes import router as stock_router
from .models import CreateStockRequest, EditStockRequest

__all__ = [
    "stock_router",
    "CreateStockRequest",
    "EditStockRequest"
]
