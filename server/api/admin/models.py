# 后台管理相关的请求模型

from typing import Optional
from pydantic import BaseModel, Field


class EditOrderDatetimeRequest(BaseModel):
    """修改订单时间请求模型"""
    date: Optional[str] = Field(None, description="日期 (YYYY-MM-DD)")
    time: Optional[str] = Field(None, description="时间 (HH:MM)")


class EditItemDishRequest(BaseModel):
    """订单修正中新增餐点请求模型"""
    dish_id: str = Field(..., description="主餐ID")


class EditItemSpiceRequest(BaseModel):
    spice_id: str = Field(..., description="辣度ID")


class EditItemAddonRequest(BaseModel):
    addon_id: str = Field(..., description="加料ID")
    delta: int = Field(..., description="数量变化，可为负数")


class ExportGrantRequest(BaseModel):
    """Google 授权弹窗回传结果（二者择一）"""
    access_token: Optional[str] = Field(None, description="授权成功时的 access token")
    error: Optional[str] = Field(None, description="授权失败原因，如 access_denied")
