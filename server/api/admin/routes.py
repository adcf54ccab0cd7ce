# 后台管理API路由：销量分析、订单修正、本月盈余、报表导出

import logging
from typing import Dict, Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query

from .models import (
    EditOrderDatetimeRequest, EditItemDishRequest, EditItemSpiceRequest,
    EditItemAddonRequest, ExportGrantRequest
)
from api.dependencies import get_pos_service
from pos.analytics import TimeRange
from pos.export import AuthorizationError, ExportError
from pos.order_ledger import OrderEditSession
from pos.service import PosService
from utils.response import create_success_response, create_error_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin", tags=["后台管理"])


def _require_order_editor(service: PosService) -> OrderEditSession:
    if service.order_editor is None:
        raise HTTPException(status_code=409, detail="没有正在修正的订单")
    return service.order_editor


# ===== 销量分析 =====

@router.get("/sales", response_model=Dict[str, Any])
async def get_sales(
    time_range: TimeRange = Query(TimeRange.TODAY, alias="range", description="时间区间"),
    start: Optional[str] = Query(None, description="自定义开始日期 (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="自定义结束日期 (YYYY-MM-DD)"),
    service: PosService = Depends(get_pos_service)
):
    """
    销量分析

    返回区间内订单（新到旧）、营收汇总、主餐销量排行
    """
    overview = service.sales_overview(time_range, custom_start=start, custom_end=end)
    return create_success_response(
        data={
            "range": time_range.value,
            "orders": [o.model_dump(mode='json') for o in overview["orders"]],
            "summary": overview["summary"],
            "ranking": overview["ranking"]
        },
        message=f"销量查询成功，共 {len(overview['orders'])} 笔订单"
    )


@router.delete("/orders/{order_id}", response_model=Dict[str, Any])
async def delete_order(
    order_id: str = Path(..., description="订单ID"),
    service: PosService = Depends(get_pos_service)
):
    if not service.delete_order(order_id):
        raise HTTPException(status_code=404, detail=f"订单 {order_id} 不存在")
    return create_success_response(data={"order_id": order_id}, message="订单已删除")


# ===== 订单修正 =====

@router.post("/orders/{order_id}/edit", response_model=Dict[str, Any])
async def start_order_edit(
    order_id: str = Path(..., description="订单ID"),
    service: PosService = Depends(get_pos_service)
):
    """打开订单修正（在副本上编辑，保存前不影响账本）"""
    session = service.start_order_edit(order_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"订单 {order_id} 不存在")
    return create_success_response(data=session.to_dict(), message="开始修正订单")


@router.get("/orders/edit", response_model=Dict[str, Any])
async def get_order_edit(service: PosService = Depends(get_pos_service)):
    session = _require_order_editor(service)
    return create_success_response(data=session.to_dict(), message="查询成功")


@router.put("/orders/edit/datetime", response_model=Dict[str, Any])
async def set_order_datetime(
    request: EditOrderDatetimeRequest,
    service: PosService = Depends(get_pos_service)
):
    session = _require_order_editor(service)
    if not session.set_datetime(request.date, request.time):
        return create_error_response("日期或时间格式错误", data=session.to_dict())
    return create_success_response(data=session.to_dict(), message="已修改时间")


@router.delete("/orders/edit/items/{index}", response_model=Dict[str, Any])
async def remove_order_item(
    index: int = Path(..., ge=0, description="明细序号"),
    service: PosService = Depends(get_pos_service)
):
    session = _require_order_editor(service)
    if not session.remove_item(index):
        return create_error_response(f"明细序号 {index} 不存在", data=session.to_dict())
    return create_success_response(data=session.to_dict(), message="已移除餐点")


@router.post("/orders/edit/items", response_model=Dict[str, Any])
async def start_add_order_item(
    request: EditItemDishRequest,
    service: PosService = Depends(get_pos_service)
):
    """为修正中的订单新增餐点：选择主餐后打开内层配置器"""
    session = _require_order_editor(service)
    dish = service.catalog.get_dish(request.dish_id)
    if dish is None:
        raise HTTPException(status_code=404, detail=f"主餐 {request.dish_id} 不存在")
    session.start_add_item(dish)
    return create_success_response(data=session.to_dict(), message="已选择主餐")


@router.post("/orders/edit/items/{index}/edit", response_model=Dict[str, Any])
async def start_edit_order_item(
    index: int = Path(..., ge=0, description="明细序号"),
    service: PosService = Depends(get_pos_service)
):
    session = _require_order_editor(service)
    if not session.start_edit_item(index):
        return create_error_response(f"明细序号 {index} 不存在", data=session.to_dict())
    return create_success_response(data=session.to_dict(), message="开始编辑餐点")


@router.post("/orders/edit/builder/spice", response_model=Dict[str, Any])
async def set_order_item_spice(
    request: EditItemSpiceRequest,
    service: PosService = Depends(get_pos_service)
):
    session = _require_order_editor(service)
    if not session.item_builder.select_spice(request.spice_id):
        return create_error_response(f"无法选择辣度: {request.spice_id}", data=session.to_dict())
    return create_success_response(data=session.to_dict(), message="已选择辣度")


@router.post("/orders/edit/builder/addons", response_model=Dict[str, Any])
async def adjust_order_item_addon(
    request: EditItemAddonRequest,
    service: PosService = Depends(get_pos_service)
):
    session = _require_order_editor(service)
    if not session.item_builder.is_open:
        return create_error_response("没有正在编辑的餐点", data=session.to_dict())
    session.item_builder.adjust_addon(request.addon_id, request.delta)
    return create_success_response(data=session.to_dict(), message="已调整加料")


@router.post("/orders/edit/builder/commit", response_model=Dict[str, Any])
async def commit_order_item(service: PosService = Depends(get_pos_service)):
    session = _require_order_editor(service)
    item = session.commit_item()
    if item is None:
        return create_error_response("没有正在编辑的餐点", data=session.to_dict())
    return create_success_response(data=session.to_dict(), message="餐点已更新")


@router.post("/orders/edit/builder/cancel", response_model=Dict[str, Any])
async def cancel_order_item(service: PosService = Depends(get_pos_service)):
    session = _require_order_editor(service)
    session.cancel_item()
    return create_success_response(data=session.to_dict(), message="已取消餐点编辑")


@router.post("/orders/edit/save", response_model=Dict[str, Any])
async def save_order_edit(service: PosService = Depends(get_pos_service)):
    """保存修正：重新计算总额后写回账本"""
    _require_order_editor(service)
    updated = service.save_order_edit()
    if updated is None:
        raise HTTPException(status_code=404, detail="订单已不存在")
    return create_success_response(
        data=updated.model_dump(mode='json'),
        message=f"订单已更新，金额 {updated.total_amount}"
    )


@router.post("/orders/edit/cancel", response_model=Dict[str, Any])
async def cancel_order_edit(service: PosService = Depends(get_pos_service)):
    service.cancel_order_edit()
    return create_success_response(message="已放弃修正")


# ===== 本月盈余与导出 =====

@router.get("/finance", response_model=Dict[str, Any])
async def get_finance(service: PosService = Depends(get_pos_service)):
    """本月收入、支出、盈余（仅供参考）"""
    return create_success_response(data=service.finance(), message="查询成功")


@router.post("/export", response_model=Dict[str, Any])
async def export_report(
    request: Optional[ExportGrantRequest] = None,
    service: PosService = Depends(get_pos_service)
):
    """
    导出报表到 Google 试算表

    可附带前端授权弹窗的回传结果；操作员拒绝授权时静默结束，
    其他失败返回错误说明，本地数据不受影响
    """
    grant = request.model_dump(exclude_none=True) if request is not None else None
    try:
        result = await service.export(grant=grant)
    except AuthorizationError as e:
        return create_error_response(f"{str(e)}\n請確認 Google 授權設定後再試。")
    except ExportError as e:
        return create_error_response(str(e))

    return create_success_response(data=result, message=result.get("message") or "已取消匯出")
