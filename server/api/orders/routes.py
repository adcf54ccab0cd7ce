# 点餐相关API路由：菜单、餐点配置器、购物车、结账

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, Path

from .models import SelectDishRequest, SelectSpiceRequest, AdjustAddonRequest
from api.dependencies import get_pos_service
from pos.service import PosService
from utils.response import create_success_response, create_error_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/pos", tags=["点餐"])


def _cart_data(service: PosService) -> Dict[str, Any]:
    return {
        "items": [item.model_dump(mode='json') for item in service.cart.items],
        "count": len(service.cart),
        "total": service.cart.total()
    }


@router.get("/menu", response_model=Dict[str, Any])
async def get_menu(service: PosService = Depends(get_pos_service)):
    """获取菜单：主餐、辣度、加料"""
    catalog = service.catalog
    return create_success_response(
        data={
            "dishes": [d.model_dump() for d in catalog.dishes],
            "spice_levels": [s.model_dump() for s in catalog.spice_levels],
            "addons": [a.model_dump() for a in catalog.addons],
            "default_spice": catalog.default_spice_id
        },
        message="菜单查询成功"
    )


@router.get("/builder", response_model=Dict[str, Any])
async def get_builder(service: PosService = Depends(get_pos_service)):
    """查看配置器当前状态"""
    return create_success_response(data=service.item_builder.to_dict(), message="查询成功")


@router.post("/builder/dish", response_model=Dict[str, Any])
async def select_dish(
    request: SelectDishRequest,
    service: PosService = Depends(get_pos_service)
):
    """选择主餐并打开配置器"""
    if not service.select_dish(request.dish_id):
        raise HTTPException(status_code=404, detail=f"主餐 {request.dish_id} 不存在")
    return create_success_response(data=service.item_builder.to_dict(), message="已选择主餐")


@router.post("/builder/spice", response_model=Dict[str, Any])
async def select_spice(
    request: SelectSpiceRequest,
    service: PosService = Depends(get_pos_service)
):
    if not service.item_builder.select_spice(request.spice_id):
        return create_error_response(f"无法选择辣度: {request.spice_id}", data=service.item_builder.to_dict())
    return create_success_response(data=service.item_builder.to_dict(), message="已选择辣度")


@router.post("/builder/addons", response_model=Dict[str, Any])
async def adjust_addon(
    request: AdjustAddonRequest,
    service: PosService = Depends(get_pos_service)
):
    """调整加料数量"""
    if not service.item_builder.is_open:
        return create_error_response("请先选择主餐")
    service.item_builder.adjust_addon(request.addon_id, request.delta)
    return create_success_response(data=service.item_builder.to_dict(), message="已调整加料")


@router.post("/builder/commit", response_model=Dict[str, Any])
async def add_to_cart(service: PosService = Depends(get_pos_service)):
    """将配置好的餐点加入购物车"""
    item = service.add_to_cart()
    if item is None:
        return create_error_response("请先选择主餐")
    return create_success_response(
        data={"item": item.model_dump(mode='json'), "cart": _cart_data(service)},
        message=f"已加入 {item.dish.name}，小计 {item.total_price}"
    )


@router.post("/builder/cancel", response_model=Dict[str, Any])
async def cancel_builder(service: PosService = Depends(get_pos_service)):
    service.item_builder.cancel()
    return create_success_response(data=service.item_builder.to_dict(), message="已取消")


@router.get("/cart", response_model=Dict[str, Any])
async def get_cart(service: PosService = Depends(get_pos_service)):
    return create_success_response(data=_cart_data(service), message="查询成功")


@router.delete("/cart/{cart_id}", response_model=Dict[str, Any])
async def remove_from_cart(
    cart_id: int = Path(..., description="明细ID"),
    service: PosService = Depends(get_pos_service)
):
    """移除购物车明细（不存在时忽略）"""
    service.cart.remove(cart_id)
    return create_success_response(data=_cart_data(service), message="已移除")


@router.post("/cart/submit", response_model=Dict[str, Any])
async def submit_order(service: PosService = Depends(get_pos_service)):
    """
    结账

    购物车为空时不建立订单
    """
    order = service.submit_order()
    if order is None:
        return create_error_response("购物车为空，无法送出订单")
    return create_success_response(
        data=order.model_dump(mode='json'),
        message="訂單已送出！"
    )
