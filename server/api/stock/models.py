# 进货相关的请求模型

from typing import Optional
from pydantic import BaseModel, Field


class CreateStockRequest(BaseModel):
    """登记进货请求模型"""
    name: str = Field("", description="品项名称")
    quantity: Optional[float] = Field(None, ge=0, description="数量")
    unit: Optional[str] = Field(None, description="单位，留空使用默认单位")
    cost: Optional[float] = Field(None, ge=0, description="本笔总花费")


class EditStockRequest(BaseModel):
    """修正进货请求模型（品项名称不可修改）"""
    date: Optional[str] = Field(None, description="日期 (YYYY-MM-DD)")
    quantity: Optional[float] = Field(None, ge=0, description="数量")
    cost: Optional[float] = Field(None, ge=0, description="本笔总花费")
