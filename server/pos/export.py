# 报表导出：将销量与进货记录上传到 Google 试算表

import logging
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
from urllib.parse import quote

import httpx

from .models import OrderRecord, StockEntry

logger = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4"
SALES_SHEET_TITLE = "Sheet1"
STOCK_SHEET_TITLE = "進貨紀錄"
SALES_HEADER = ["商品名稱", "售出數量", "單價", "總額"]
STOCK_HEADER = ["日期", "品項", "數量", "單位", "成本"]

TokenProvider = Callable[[], Awaitable[str]]


class AuthorizationDeclined(Exception):
    """操作员拒绝授权，静默结束导出"""


class AuthorizationError(Exception):
    """授权失败（非拒绝）"""


class ExportError(Exception):
    """导出过程失败"""


def token_from_grant_response(response: Dict[str, Any]) -> str:
    """
    解析授权回调结果

    Raises:
        AuthorizationDeclined: error 为 access_denied（操作员关闭或拒绝授权）
        AuthorizationError: 其他错误，或缺少 access_token
    """
    error = response.get("error")
    if error == "access_denied":
        raise AuthorizationDeclined(error)
    if error:
        raise AuthorizationError(f"Google 登入失敗: {error}")
    token = response.get("access_token")
    if not token:
        raise AuthorizationError("授权结果缺少 access_token")
    return token


class StaticTokenProvider:
    """使用配置中预先取得的 access token"""

    def __init__(self, access_token: str):
        self.access_token = access_token

    async def __call__(self) -> str:
        if not self.access_token:
            raise AuthorizationError("未配置 Google access token")
        return self.access_token


class GrantTokenProvider:
    """使用前端授权弹窗回传的结果（access_token 或 error）"""

    def __init__(self, grant: Dict[str, Any]):
        self.grant = grant

    async def __call__(self) -> str:
        return token_from_grant_response(self.grant)


def build_sales_rows(orders: Iterable[OrderRecord]) -> List[List[Any]]:
    """销量表：按主餐名称汇总份数，单价取第一次出现时的单价"""
    stats: Dict[str, Dict[str, int]] = {}
    for order in orders:
        for item in order.items:
            stat = stats.setdefault(item.dish.name, {"count": 0, "price": item.dish.unit_price})
            stat["count"] += 1

    rows: List[List[Any]] = [list(SALES_HEADER)]
    for name, stat in stats.items():
        rows.append([name, stat["count"], stat["price"], stat["count"] * stat["price"]])
    return rows


def build_stock_rows(entries: Iterable[StockEntry]) -> List[List[Any]]:
    rows: List[List[Any]] = [list(STOCK_HEADER)]
    for entry in entries:
        rows.append([
            entry.timestamp.strftime("%Y-%m-%d"),
            entry.name,
            entry.quantity,
            entry.unit,
            entry.cost
        ])
    return rows


class SheetsExporter:
    """
    Google 试算表导出

    未提供授权方式时进入模拟模式，不发出任何请求
    导出只读取传入的快照，成功或失败都不会修改本地账本
    """

    def __init__(self, token_provider: Optional[TokenProvider] = None,
                 api_base: str = SHEETS_API_BASE, timeout: float = 10.0,
                 transport: httpx.AsyncBaseTransport = None):
        self.token_provider = token_provider
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
        self.transport = transport
        self.mock_mode = token_provider is None

        if self.mock_mode:
            logger.warning("Google 授权配置缺失，导出将使用模拟模式")

    @classmethod
    def from_config(cls, google_config: Dict[str, Any]) -> "SheetsExporter":
        access_token = (google_config or {}).get("access_token") or ""
        # 未替换的 ${ENV} 占位符视为未配置
        if access_token.startswith("${"):
            access_token = ""
        return cls(
            token_provider=StaticTokenProvider(access_token) if access_token else None,
            api_base=(google_config or {}).get("api_base", SHEETS_API_BASE),
            timeout=(google_config or {}).get("timeout", 10.0)
        )

    async def export(self, orders: List[OrderRecord], entries: List[StockEntry],
                     today: date = None,
                     token_provider: Optional[TokenProvider] = None) -> Dict[str, Any]:
        """
        建立试算表并写入销量表与进货表

        Args:
            token_provider: 本次导出使用的授权方式，默认使用配置中的授权

        Returns:
            导出结果；操作员拒绝授权时 exported 为 False，不视为错误

        Raises:
            AuthorizationError: 授权失败
            ExportError: 调用 Google API 失败
        """
        today = today or date.today()
        title = f"Tofu POS 報表 - {today.strftime('%Y/%m/%d')}"
        sales_rows = build_sales_rows(orders)
        stock_rows = build_stock_rows(entries)

        token_provider = token_provider or self.token_provider
        if token_provider is None:
            logger.info(f"模拟导出报表: {title}，销量 {len(sales_rows) - 1} 行，进货 {len(stock_rows) - 1} 行")
            return {
                "exported": True,
                "mock": True,
                "spreadsheet_id": None,
                "title": title,
                "message": "模擬上傳成功！"
            }

        try:
            access_token = await token_provider()
        except AuthorizationDeclined:
            logger.info("操作员取消了 Google 授权")
            return {
                "exported": False,
                "mock": False,
                "spreadsheet_id": None,
                "title": title,
                "message": None
            }
        except AuthorizationError as e:
            logger.error(f"Google 授权失败: {str(e)}")
            raise

        try:
            spreadsheet_id = await self._upload(access_token, title, sales_rows, stock_rows)
        except httpx.HTTPStatusError as e:
            logger.error(f"Google API 返回错误: {e.response.status_code} - {e.response.text[:200]}")
            raise ExportError(f"上傳失敗 (HTTP {e.response.status_code})，請稍後再試。")
        except httpx.RequestError as e:
            logger.error(f"Google API 请求失败: {str(e)}")
            raise ExportError(f"上傳失敗，無法連線到 Google: {str(e)}")
        except (KeyError, ValueError) as e:
            logger.error(f"Google API 返回数据异常: {str(e)}")
            raise ExportError("上傳失敗，Google 回傳資料異常。")

        logger.info(f"报表导出成功: {title} ({spreadsheet_id})")
        return {
            "exported": True,
            "mock": False,
            "spreadsheet_id": spreadsheet_id,
            "title": title,
            "message": "成功建立試算表並上傳資料！"
        }

    async def _upload(self, access_token: str, title: str,
                      sales_rows: List[List[Any]], stock_rows: List[List[Any]]) -> str:
        headers = {"Authorization": f"Bearer {access_token}"}
        async with httpx.AsyncClient(base_url=self.api_base, headers=headers,
                                     timeout=self.timeout, transport=self.transport) as client:
            response = await client.post("/spreadsheets", json={"properties": {"title": title}})
            response.raise_for_status()
            spreadsheet_id = response.json()["spreadsheetId"]

            await self._write_values(client, spreadsheet_id, f"{SALES_SHEET_TITLE}!A1", sales_rows)

            response = await client.post(
                f"/spreadsheets/{spreadsheet_id}:batchUpdate",
                json={"requests": [{"addSheet": {"properties": {"title": STOCK_SHEET_TITLE}}}]}
            )
            response.raise_for_status()

            await self._write_values(client, spreadsheet_id, f"{STOCK_SHEET_TITLE}!A1", stock_rows)

        return spreadsheet_id

    async def _write_values(self, client: httpx.AsyncClient, spreadsheet_id: str,
                            cell_range: str, rows: List[List[Any]]):
        response = await client.put(
            f"/spreadsheets/{spreadsheet_id}/values/{quote(cell_range, safe='!')}",
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": rows}
        )
        response.raise_for_status()
