# 路由共用的依赖项

from fastapi import HTTPException, Request

from pos.service import PosService


def get_pos_service(request: Request) -> PosService:
    """获取应用级收银服务实例（启动时创建）"""
    service = getattr(request.app.state, "pos_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="收银服务尚未初始化")
    return service
