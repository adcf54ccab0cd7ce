# 报表导出测试

import asyncio
import json
from datetime import date, datetime

import httpx
import pytest

from pos.export import (
    SALES_HEADER, STOCK_HEADER, AuthorizationDeclined, AuthorizationError,
    ExportError, GrantTokenProvider, SheetsExporter, StaticTokenProvider, build_sales_rows,
    build_stock_rows, token_from_grant_response
)


class RecordingHandler:
    """记录请求并模拟 Google Sheets API"""

    def __init__(self, fail_status: int = None):
        self.requests = []
        self.fail_status = fail_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status:
            return httpx.Response(self.fail_status, json={"error": {"message": "boom"}})
        if request.method == "POST" and request.url.path.endswith("/spreadsheets"):
            return httpx.Response(200, json={"spreadsheetId": "sheet-123"})
        return httpx.Response(200, json={})


def make_exporter(handler, token_provider=None):
    return SheetsExporter(
        token_provider=token_provider or StaticTokenProvider("token-abc"),
        transport=httpx.MockTransport(handler)
    )


@pytest.fixture
def sample_data(make_order, make_stock, now):
    orders = [make_order(now, ('m1', 'm2')), make_order(now, ('m1',))]
    entries = [make_stock(datetime(2024, 3, 14, 9), '高麗菜', 3, 150, '顆')]
    return orders, entries


class TestRows:
    """测试报表行生成"""

    def test_sales_rows(self, sample_data):
        """测试销量表按主餐汇总"""
        orders, _ = sample_data
        rows = build_sales_rows(orders)
        assert rows[0] == SALES_HEADER
        assert rows[1:] == [["麻辣招牌", 2, 100, 200], ["麻辣總匯", 1, 80, 80]]

    def test_stock_rows(self, sample_data):
        """测试进货表逐笔列出"""
        _, entries = sample_data
        rows = build_stock_rows(entries)
        assert rows == [STOCK_HEADER, ["2024-03-14", "高麗菜", 3, "顆", 150]]

    def test_empty_inputs_only_headers(self):
        """测试没有数据时只有表头"""
        assert build_sales_rows([]) == [SALES_HEADER]
        assert build_stock_rows([]) == [STOCK_HEADER]


class TestGrantResponse:
    """测试授权回传结果解析"""

    def test_access_token(self):
        """测试取得 access token"""
        assert token_from_grant_response({"access_token": "abc"}) == "abc"

    def test_access_denied(self):
        """测试操作员拒绝授权"""
        with pytest.raises(AuthorizationDeclined):
            token_from_grant_response({"error": "access_denied"})

    def test_other_error(self):
        """测试其他授权错误"""
        with pytest.raises(AuthorizationError):
            token_from_grant_response({"error": "invalid_client"})

    def test_missing_token(self):
        """测试回传结果缺少 token"""
        with pytest.raises(AuthorizationError):
            token_from_grant_response({})


class TestSheetsExporter:
    """测试试算表导出"""

    def test_mock_mode_without_token(self, sample_data):
        """测试未配置授权时使用模拟模式"""
        exporter = SheetsExporter.from_config({"access_token": "${GOOGLE_ACCESS_TOKEN}"})
        assert exporter.mock_mode is True

        result = asyncio.run(exporter.export(*sample_data, today=date(2024, 3, 15)))
        assert result["exported"] is True
        assert result["mock"] is True
        assert result["title"] == "Tofu POS 報表 - 2024/03/15"

    def test_from_config_with_token(self):
        """测试按配置建立导出器"""
        exporter = SheetsExporter.from_config({"access_token": "real-token", "timeout": 5})
        assert exporter.mock_mode is False
        assert exporter.timeout == 5

    def test_upload_sequence(self, sample_data):
        """测试建立试算表与写入两张工作表的请求顺序"""
        handler = RecordingHandler()
        exporter = make_exporter(handler)

        result = asyncio.run(exporter.export(*sample_data, today=date(2024, 3, 15)))

        assert result["exported"] is True
        assert result["mock"] is False
        assert result["spreadsheet_id"] == "sheet-123"
        assert [r.method for r in handler.requests] == ["POST", "PUT", "POST", "PUT"]
        assert all(r.headers["Authorization"] == "Bearer token-abc" for r in handler.requests)

        create = json.loads(handler.requests[0].content)
        assert create == {"properties": {"title": "Tofu POS 報表 - 2024/03/15"}}

        sales = handler.requests[1]
        assert sales.url.params["valueInputOption"] == "USER_ENTERED"
        assert json.loads(sales.content)["values"][0] == SALES_HEADER

        add_sheet = json.loads(handler.requests[2].content)
        assert add_sheet["requests"][0]["addSheet"]["properties"]["title"] == "進貨紀錄"
        assert handler.requests[2].url.path.endswith("sheet-123:batchUpdate")

        stock = json.loads(handler.requests[3].content)
        assert stock["values"][0] == STOCK_HEADER
        assert len(stock["values"]) == 2

    def test_declined_is_silent(self, sample_data):
        """测试拒绝授权时静默结束"""
        async def declined():
            raise AuthorizationDeclined("access_denied")

        handler = RecordingHandler()
        exporter = make_exporter(handler, token_provider=declined)

        result = asyncio.run(exporter.export(*sample_data))
        assert result["exported"] is False
        assert result["message"] is None
        assert handler.requests == []

    def test_authorization_failure(self, sample_data):
        """测试授权失败"""
        handler = RecordingHandler()
        exporter = make_exporter(handler, token_provider=StaticTokenProvider(""))

        with pytest.raises(AuthorizationError):
            asyncio.run(exporter.export(*sample_data))
        assert handler.requests == []

    def test_http_error(self, sample_data):
        """测试 Google API 返回错误状态"""
        exporter = make_exporter(RecordingHandler(fail_status=500))
        with pytest.raises(ExportError) as exc_info:
            asyncio.run(exporter.export(*sample_data))
        assert "500" in str(exc_info.value)

    def test_connection_error(self, sample_data):
        """测试无法连线"""
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        exporter = make_exporter(unreachable)
        with pytest.raises(ExportError):
            asyncio.run(exporter.export(*sample_data))

    def test_failed_export_does_not_touch_inputs(self, sample_data):
        """测试导出失败不修改传入数据"""
        orders, entries = sample_data
        before = (list(orders), list(entries))
        with pytest.raises(ExportError):
            asyncio.run(make_exporter(RecordingHandler(fail_status=403)).export(orders, entries))
        assert (orders, entries) == before


class TestGrantExport:
    """测试使用授权弹窗回传结果导出"""

    def test_grant_token_used(self, sample_data):
        """测试授权成功时使用回传的 token，覆盖配置中的授权"""
        handler = RecordingHandler()
        exporter = make_exporter(handler)

        result = asyncio.run(exporter.export(
            *sample_data, token_provider=GrantTokenProvider({"access_token": "grant-token"})
        ))

        assert result["exported"] is True
        assert all(r.headers["Authorization"] == "Bearer grant-token" for r in handler.requests)

    def test_grant_leaves_mock_mode(self, sample_data):
        """测试未配置授权时，附带授权结果仍会真正上传"""
        handler = RecordingHandler()
        exporter = SheetsExporter(transport=httpx.MockTransport(handler))
        assert exporter.mock_mode is True

        result = asyncio.run(exporter.export(
            *sample_data, token_provider=GrantTokenProvider({"access_token": "grant-token"})
        ))
        assert result["mock"] is False
        assert len(handler.requests) == 4

    def test_grant_declined(self, sample_data):
        """测试授权弹窗被关闭时静默结束"""
        handler = RecordingHandler()
        exporter = make_exporter(handler)

        result = asyncio.run(exporter.export(
            *sample_data, token_provider=GrantTokenProvider({"error": "access_denied"})
        ))
        assert result["exported"] is False
        assert handler.requests == []

    def test_grant_error(self, sample_data):
        """测试授权失败时抛出授权错误"""
        exporter = make_exporter(RecordingHandler())
        with pytest.raises(AuthorizationError):
            asyncio.run(exporter.export(
                *sample_data, token_provider=GrantTokenProvider({"error": "invalid_client"})
            ))
