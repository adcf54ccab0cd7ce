# 点餐相关的请求模型

from pydantic import BaseModel, Field


class SelectDishRequest(BaseModel):
    """选择主餐请求模型"""
    dish_id: str = Field(..., description="主餐ID")


class SelectSpiceRequest(BaseModel):
    """选择辣度请求模型"""
    spice_id: str = Field(..., description="辣度ID")


class AdjustAddonRequest(BaseModel):
    """调整加料请求模型"""
    addon_id: str = Field(..., description="加料ID")
    delta: int = Field(..., description="数量变化，可为负数")
