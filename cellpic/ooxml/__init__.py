"""
OOXML 处理模块 - 包解压/关系解析/工作表→绘图→锚点→图片

子模块：
- package_store: 解压与部件读取
- relationships: .rels 关系解析
- sheet_locator: 工作表名称 → 工作表部件
- drawing_locator: 工作表部件 → 绘图部件
- anchor_matcher: 单元格 → 锚点
- image_resolver: 锚点 embed → 媒体部件
"""

from .anchor_matcher import AnchorMatcher
from .drawing_locator import DrawingLocator
from .image_resolver import ImageResolver, format_from_suffix
from .package_store import PackageStore
from .relationships import RelationshipResolver, rels_path_for, resolve_target
from .sheet_locator import SheetLocator

__all__ = [
    "PackageStore",
    "RelationshipResolver",
    "SheetLocator",
    "DrawingLocator",
    "AnchorMatcher",
    "ImageResolver",
    "format_from_suffix",
    "rels_path_for",
    "resolve_target",
]
