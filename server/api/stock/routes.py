# 进货相关API路由

import logging
from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, Path

from .models import CreateStockRequest, EditStockRequest
from api.dependencies import get_pos_service
from pos.service import PosService
from utils.response import create_success_response, create_error_response

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/stock", tags=["进货"])


@router.get("", response_model=Dict[str, Any])
async def get_stock(service: PosService = Depends(get_pos_service)):
    """
    进货总览

    返回总花费、各品项累计数量、按日期分组的记录以及快速选择品项
    """
    overview = service.stock_overview()
    return create_success_response(
        data={
            "summary": overview["summary"],
            "groups": {
                day: [e.model_dump(mode='json') for e in entries]
                for day, entries in overview["groups"].items()
            },
            "quick_items": [item.model_dump() for item in overview["quick_items"]]
        },
        message="查询成功"
    )


@router.post("", response_model=Dict[str, Any])
async def create_stock(
    request: CreateStockRequest,
    service: PosService = Depends(get_pos_service)
):
    """登记进货，品项名称、数量、花费缺一不可"""
    entry = service.add_stock(request.name, request.quantity, request.cost, request.unit)
    if entry is None:
        return create_error_response("请填写品项、数量与花费")
    return create_success_response(data=entry.model_dump(mode='json'), message=f"已登记进货 {entry.name}")


@router.delete("/{entry_id}", response_model=Dict[str, Any])
async def delete_stock(
    entry_id: str = Path(..., description="进货记录ID"),
    service: PosService = Depends(get_pos_service)
):
    if not service.delete_stock(entry_id):
        raise HTTPException(status_code=404, detail=f"进货记录 {entry_id} 不存在")
    return create_success_response(data={"entry_id": entry_id}, message="进货记录已删除")


@router.post("/{entry_id}/edit", response_model=Dict[str, Any])
async def start_stock_edit(
    entry_id: str = Path(..., description="进货记录ID"),
    service: PosService = Depends(get_pos_service)
):
    session = service.start_stock_edit(entry_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"进货记录 {entry_id} 不存在")
    return create_success_response(data=session.to_dict(), message="开始修正进货记录")


@router.put("/edit", response_model=Dict[str, Any])
async def update_stock_edit(
    request: EditStockRequest,
    service: PosService = Depends(get_pos_service)
):
    session = service.stock_editor
    if session is None:
        raise HTTPException(status_code=409, detail="没有正在修正的进货记录")

    if request.date is not None and not session.set_date(request.date):
        return create_error_response("日期格式错误", data=session.to_dict())
    if request.quantity is not None:
        session.set_quantity(request.quantity)
    if request.cost is not None:
        session.set_cost(request.cost)
    return create_success_response(data=session.to_dict(), message="已修改")


@router.post("/edit/save", response_model=Dict[str, Any])
async def save_stock_edit(service: PosService = Depends(get_pos_service)):
    if service.stock_editor is None:
        raise HTTPException(status_code=409, detail="没有正在修正的进货记录")
    updated = service.save_stock_edit()
    if updated is None:
        raise HTTPException(status_code=404, detail="进货记录已不存在")
    return create_success_response(data=updated.model_dump(mode='json'), message="进货记录已更新")


@router.post("/edit/cancel", response_model=Dict[str, Any])
async def cancel_stock_edit(service: PosService = Depends(get_pos_service)):
    service.cancel_stock_edit()
    return create_success_response(message="已放弃修正")
