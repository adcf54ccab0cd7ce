# 菜单目录：主餐、辣度、加料等静态参考数据

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Dish(BaseModel):
    """主餐"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="主餐ID")
    name: str = Field(..., description="主餐名称")
    unit_price: int = Field(..., ge=0, description="单价")


class SpiceLevel(BaseModel):
    """辣度"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="辣度ID")
    label: str = Field(..., description="显示文字")
    display_hint: str = Field("", description="显示提示（颜色）")


class Addon(BaseModel):
    """加料"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="加料ID")
    name: str = Field(..., description="加料名称")
    unit_price: int = Field(..., ge=0, description="单价")


MAIN_DISHES: List[Dish] = [
    Dish(id='m1', name='麻辣招牌', unit_price=100),
    Dish(id='m2', name='麻辣總匯', unit_price=80),
    Dish(id='m4', name='綜合煲', unit_price=60),
    Dish(id='m8', name='綜合麵', unit_price=60),
    Dish(id='m3', name='香豆腐煲', unit_price=60),
    Dish(id='m7', name='香豆腐麵', unit_price=60),
    Dish(id='m5', name='鴨血煲', unit_price=60),
    Dish(id='m9', name='鴨血麵', unit_price=60),
    Dish(id='m10', name='乾泡麵', unit_price=60),
    Dish(id='m6', name='豬肉麵', unit_price=60),
]

SPICINESS_LEVELS: List[SpiceLevel] = [
    SpiceLevel(id='大辣', label='大辣', display_hint='red-600'),
    SpiceLevel(id='中辣', label='中辣', display_hint='red-500'),
    SpiceLevel(id='小辣', label='小辣', display_hint='red-400'),
    SpiceLevel(id='微辣', label='微辣', display_hint='orange-300'),
    SpiceLevel(id='不辣', label='不辣', display_hint='slate-300'),
]

DEFAULT_SPICE_ID = '微辣'

ADD_ONS: List[Addon] = [
    Addon(id='a1', name='豬肉片', unit_price=30),
    Addon(id='a2', name='牛肉片', unit_price=30),
    Addon(id='a3', name='臭豆腐', unit_price=20),
    Addon(id='a4', name='鴨血', unit_price=20),
    Addon(id='a11', name='菜', unit_price=20),
    Addon(id='a5', name='金針菇', unit_price=20),
    Addon(id='a6', name='玉米筍', unit_price=20),
    Addon(id='a12', name='餛飩', unit_price=30),
    Addon(id='a8', name='貢丸', unit_price=20),
    Addon(id='a7', name='起司球', unit_price=20),
    Addon(id='a13', name='龍蝦沙拉丸', unit_price=20),
    Addon(id='a9', name='魚蛋', unit_price=20),
    Addon(id='a14', name='蟹肉棒', unit_price=20),
    Addon(id='a10', name='豆皮', unit_price=10),
    Addon(id='a15', name='麻辣湯', unit_price=35),
    Addon(id='a16', name='王子麵', unit_price=15),
    Addon(id='a17', name='烏龍麵', unit_price=15),
    Addon(id='a18', name='冬粉', unit_price=15),
]


class Catalog:
    """
    菜单目录

    进程启动时构建，之后只读
    """

    def __init__(self, dishes: List[Dish] = None, spice_levels: List[SpiceLevel] = None,
                 addons: List[Addon] = None, default_spice_id: str = DEFAULT_SPICE_ID):
        self.dishes = list(dishes if dishes is not None else MAIN_DISHES)
        self.spice_levels = list(spice_levels if spice_levels is not None else SPICINESS_LEVELS)
        self.addons = list(addons if addons is not None else ADD_ONS)
        self.default_spice_id = default_spice_id

        self._dishes_by_id: Dict[str, Dish] = {d.id: d for d in self.dishes}
        self._spices_by_id: Dict[str, SpiceLevel] = {s.id: s for s in self.spice_levels}
        self._addons_by_id: Dict[str, Addon] = {a.id: a for a in self.addons}

    def get_dish(self, dish_id: str) -> Optional[Dish]:
        return self._dishes_by_id.get(dish_id)

    def get_spice(self, spice_id: str) -> Optional[SpiceLevel]:
        return self._spices_by_id.get(spice_id)

    def get_addon(self, addon_id: str) -> Optional[Addon]:
        return self._addons_by_id.get(addon_id)

    def has_spice(self, spice_id: str) -> bool:
        return spice_id in self._spices_by_id


DEFAULT_CATALOG = Catalog()


# ===== 进货品项 =====

# 这些品项不会被自动记为常用品项
ALWAYS_KNOWN_STOCK_NAMES = ['小臭', '鴨血', '高麗菜', '豆卷', '王子麵']

# 快速选择的预设品项（名称, 单位）
PRESET_STOCK_ITEMS = [
    ('小臭', '包'),
    ('鴨血', '片'),
    ('王子麵', '箱'),
]

# 常用品项列表的初始值
DEFAULT_FREQUENT_STOCK_ITEMS = [
    ('高麗菜', '顆'),
    ('豆卷', '包'),
]

DEFAULT_STOCK_UNIT = '個'
