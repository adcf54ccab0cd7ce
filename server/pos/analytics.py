# 统计分析：时间区间筛选、销量汇总、进货汇总、本月盈余
# 所有函数只读，不修改账本

import calendar
from collections import Counter
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from .models import OrderRecord, StockEntry

T = TypeVar('T', OrderRecord, StockEntry)

DateLike = Union[str, date, None]


class TimeRange(str, Enum):
    TODAY = 'today'
    THREE_DAYS = '3days'
    SEVEN_DAYS = '7days'
    TWO_WEEKS = '2weeks'
    ONE_MONTH = '1month'
    THREE_MONTHS = '3months'
    SIX_MONTHS = '6months'
    ONE_YEAR = '1year'
    CUSTOM = 'custom'


_DAY_OFFSETS = {
    TimeRange.THREE_DAYS: 3,
    TimeRange.SEVEN_DAYS: 7,
    TimeRange.TWO_WEEKS: 14,
}

_MONTH_OFFSETS = {
    TimeRange.ONE_MONTH: 1,
    TimeRange.THREE_MONTHS: 3,
    TimeRange.SIX_MONTHS: 6,
    TimeRange.ONE_YEAR: 12,
}


def shift_months(value: datetime, months: int) -> datetime:
    """往前推若干个月，日期超出目标月份天数时取月末"""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _parse_date(value: DateLike) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def resolve_time_window(time_range: Union[TimeRange, str], now: datetime = None,
                        custom_start: DateLike = None,
                        custom_end: DateLike = None) -> Optional[Tuple[datetime, datetime]]:
    """
    计算筛选区间 [start, end]

    - today: 本地零点 ~ now
    - 预设区间: now 减去固定的日历偏移 ~ now
    - custom: 开始日零点 ~ 结束日 23:59:59.999999（含结束日整天）

    Returns:
        (start, end)；自定义区间缺少开始或结束日期时返回 None，表示不筛选
    """
    now = now or datetime.now()
    time_range = TimeRange(time_range)

    if time_range == TimeRange.CUSTOM:
        start_day = _parse_date(custom_start)
        end_day = _parse_date(custom_end)
        if start_day is None or end_day is None:
            return None
        return datetime.combine(start_day, time.min), datetime.combine(end_day, time.max)

    if time_range == TimeRange.TODAY:
        start = datetime.combine(now.date(), time.min)
    elif time_range in _DAY_OFFSETS:
        start = now - timedelta(days=_DAY_OFFSETS[time_range])
    else:
        start = shift_months(now, _MONTH_OFFSETS[time_range])
    return start, now


def filter_by_time_range(records: Iterable[T], time_range: Union[TimeRange, str] = TimeRange.TODAY,
                         now: datetime = None, custom_start: DateLike = None,
                         custom_end: DateLike = None) -> List[T]:
    """按时间区间筛选订单或进货记录，保持原有顺序"""
    records = list(records)
    window = resolve_time_window(time_range, now, custom_start, custom_end)
    if window is None:
        return records
    start, end = window
    return [r for r in records if start <= r.timestamp <= end]


def sales_summary(orders: Iterable[OrderRecord]) -> Dict[str, int]:
    orders = list(orders)
    return {
        "total_revenue": sum(o.total_amount for o in orders),
        "total_count": sum(len(o.items) for o in orders),
        "order_count": len(orders)
    }


def product_ranking(orders: Iterable[OrderRecord]) -> List[Dict[str, Any]]:
    """
    各主餐销量排行

    按份数降序；份数相同时按首次出现的顺序排列
    """
    counts: Counter = Counter()
    for order in orders:
        for item in order.items:
            counts[item.dish.name] += 1
    ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return [{"name": name, "count": count} for name, count in ranked]


def stock_summary(entries: Iterable[StockEntry]) -> Dict[str, Any]:
    """
    进货汇总

    total_cost 为全部记录的花费合计；各品项累计数量按名称分组，
    单位取该品项第一次出现时的单位
    """
    total_cost = 0
    items: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        total_cost += entry.cost
        if entry.name not in items:
            items[entry.name] = {"quantity": 0, "unit": entry.unit}
        items[entry.name]["quantity"] += entry.quantity
    return {"total_cost": total_cost, "items": items}


def group_by_date(entries: Iterable[StockEntry]) -> Dict[str, List[StockEntry]]:
    """按日期分组，日期与组内记录都按时间倒序"""
    groups: Dict[str, List[StockEntry]] = {}
    for entry in sorted(entries, key=lambda e: e.timestamp, reverse=True):
        groups.setdefault(entry.timestamp.strftime("%Y-%m-%d"), []).append(entry)
    return groups


def _in_month(value: datetime, now: datetime) -> bool:
    return value.year == now.year and value.month == now.month


def monthly_finance(orders: Iterable[OrderRecord], entries: Iterable[StockEntry],
                    now: datetime = None) -> Dict[str, Any]:
    """
    本月盈余

    只统计与 now 同年同月的订单与进货；每次调用重新计算
    """
    now = now or datetime.now()
    income = sum(o.total_amount for o in orders if _in_month(o.timestamp, now))
    expense = sum(e.cost for e in entries if _in_month(e.timestamp, now))
    return {
        "year": now.year,
        "month": now.month,
        "income": income,
        "expense": expense,
        "profit": income - expense
    }
