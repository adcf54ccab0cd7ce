# 订单、明细、进货记录等数据模型

import time
from datetime import datetime
from typing import Annotated, Dict, List
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from .catalog import DEFAULT_STOCK_UNIT, Dish

_last_time_id = 0


def next_time_id() -> int:
    """
    生成单调递增的时间序号（毫秒）

    同一毫秒内多次调用时顺延，保证当前进程内不重复
    """
    global _last_time_id
    candidate = time.time_ns() // 1_000_000
    if candidate <= _last_time_id:
        candidate = _last_time_id + 1
    _last_time_id = candidate
    return candidate


def generate_order_id() -> str:
    return f"ord-{next_time_id()}"


def generate_stock_id() -> str:
    return f"stk-{next_time_id()}"


def _normalize_timestamp(value: datetime) -> datetime:
    # 带时区的时间统一转成本地时间，便于按本地日期筛选
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


LocalDateTime = Annotated[datetime, AfterValidator(_normalize_timestamp)]


class CartItem(BaseModel):
    """已定价的单份餐点"""
    model_config = ConfigDict(frozen=True)

    cart_id: int = Field(..., description="明细ID")
    dish: Dish = Field(..., description="主餐")
    spice: str = Field(..., description="辣度ID")
    addons: Dict[str, int] = Field(default_factory=dict, description="加料数量 {addon_id: quantity}")
    total_price: int = Field(..., ge=0, description="小计")

    @field_validator('addons')
    @classmethod
    def drop_empty_addons(cls, value: Dict[str, int]) -> Dict[str, int]:
        return {addon_id: qty for addon_id, qty in value.items() if qty > 0}


class OrderRecord(BaseModel):
    """历史订单"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="订单ID")
    timestamp: LocalDateTime = Field(..., description="下单时间")
    items: List[CartItem] = Field(default_factory=list, description="订单明细")
    total_amount: int = Field(..., ge=0, description="订单总额")


class StockEntry(BaseModel):
    """进货记录"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="进货记录ID")
    timestamp: LocalDateTime = Field(..., description="进货时间")
    name: str = Field(..., min_length=1, description="品项名称")
    quantity: float = Field(..., ge=0, description="数量")
    unit: str = Field(DEFAULT_STOCK_UNIT, description="单位")
    cost: float = Field(..., ge=0, description="本笔总花费")


class FrequentStockItem(BaseModel):
    """常用进货品项"""
    model_config = ConfigDict(frozen=True)

    name: str
    unit: str = DEFAULT_STOCK_UNIT
