"""
绘图定位器 - 工作表部件 → 绘图部件路径

每个工作表至多一个 <drawing r:id="..."/>；没有时即"该表无图片"，
与"有绘图但目标单元格无图片"(NoPictureAtCell) 区分。
"""

from __future__ import annotations

import logging

from ..interfaces import CorruptPackageError, IDrawingLocator, NoDrawingError
from ..models import Package
from .namespaces import OFFICE_REL, SPREADSHEETML, find_child, get_ns_attr
from .package_store import PackageStore
from .relationships import RelationshipResolver

logger = logging.getLogger(__name__)


class DrawingLocator(IDrawingLocator):
    """绘图定位器实现"""

    def __init__(self, store: PackageStore, resolver: RelationshipResolver):
        self.store = store
        self.resolver = resolver

    def find_drawing_part(self, package: Package, worksheet_part: str) -> str:
        worksheet = self.store.read_xml(package, worksheet_part)
        drawing = find_child(worksheet, "drawing", SPREADSHEETML)
        if drawing is None:
            raise NoDrawingError(f"工作表无绘图: {worksheet_part}")

        rel_id = get_ns_attr(drawing, "id", OFFICE_REL)
        if not rel_id:
            raise CorruptPackageError(f"drawing 元素缺少 r:id: {worksheet_part}")

        part = self.resolver.resolve(package, worksheet_part, rel_id)
        logger.debug("绘图 %s -> %s", worksheet_part, part)
        return part
