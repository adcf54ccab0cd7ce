# FastAPI主应用

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from utils.config import Config
from utils.logger import setup_logging
from api.middleware import setup_middleware

from api.orders import orders_router
from api.admin import admin_router
from api.stock import stock_router

from db.manager import DatabaseManager
from db.storage import PosStorage
from pos.export import SheetsExporter
from pos.service import PosService

# 全局配置实例
config = Config()

setup_logging(config.config)
logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f') + "Z"


def create_pos_service(db: DatabaseManager) -> PosService:
    """根据配置组装收银服务"""
    storage = PosStorage(db, keys=config.get("storage.keys"))
    exporter = SheetsExporter.from_config(config.get("google", {}))
    return PosService(storage=storage, exporter=exporter)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("Tofu POS 服务启动中...")
    logger.info(f"环境: {config.env}")

    with DatabaseManager(config.get_storage_config()["path"]) as db:
        app.state.pos_service = create_pos_service(db)

        yield

        logger.info("Tofu POS 服务关闭中...")


app = FastAPI(
    title=config.config['app']['name'],
    version=config.config['app']['version'],
    description=config.config['app']['description'],
    debug=config.config['app']['debug'],
    lifespan=lifespan
)

setup_middleware(app, config.config)

app.include_router(orders_router, tags=["点餐"])
app.include_router(admin_router, tags=["后台管理"])
app.include_router(stock_router, tags=["进货"])


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """HTTP异常处理"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "data": None,
            "timestamp": _utc_now()
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """通用异常处理"""
    logger.error(f"未处理的异常: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "服务器内部错误",
            "data": None,
            "timestamp": _utc_now()
        }
    )


@app.get("/")
async def root():
    """根路径健康检查"""
    return {
        "message": "Tofu POS 服务运行中",
        "version": config.config['app']['version'],
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": config.config['app']['version'],
        "environment": config.env
    }


@app.get("/api/info")
async def api_info():
    """API信息端点"""
    return {
        "name": config.config['app']['name'],
        "version": config.config['app']['version'],
        "description": config.config['app']['description'],
        "environment": config.env,
        "endpoints": {
            "pos": "/api/pos",
            "admin": "/api/admin",
            "stock": "/api/admin/stock"
        }
    }


if __name__ == "__main__":
    import uvicorn

    server_config = config.config['server']

    uvicorn.run(
        "api.main:app",
        host=server_config.get('host', '127.0.0.1'),
        port=server_config.get('port', 8000),
        reload=server_config.get('reload', False),
        workers=1,
        log_level="debug" if config.config['app']['debug'] else "info"
    )
