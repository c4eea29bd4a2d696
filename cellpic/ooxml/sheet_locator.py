"""
工作表定位器 - 工作表名称 → 工作表部件路径

流程：
1) 经包根 _rels/.rels 的 officeDocument 关系找到工作簿部件（缺省 xl/workbook.xml）
2) 在 sheets/sheet 声明中按 name 精确匹配（区分大小写，首个命中）
3) 取其 r:id，经工作簿 .rels 解析出工作表部件
"""

from __future__ import annotations

import logging

from ..interfaces import CorruptPackageError, ISheetLocator, SheetNotFoundError
from ..models import Package, SheetRef
from .namespaces import (
    OFFICE_REL,
    REL_TYPE_OFFICE_DOCUMENT,
    SPREADSHEETML,
    find_child,
    find_children,
    get_ns_attr,
)
from .package_store import PackageStore
from .relationships import RelationshipResolver, rels_path_for

logger = logging.getLogger(__name__)

DEFAULT_WORKBOOK_PART = "xl/workbook.xml"


class SheetLocator(ISheetLocator):
    """工作表定位器实现"""

    def __init__(self, store: PackageStore, resolver: RelationshipResolver):
        self.store = store
        self.resolver = resolver

    def workbook_part(self, package: Package) -> str:
        """定位工作簿部件"""
        if self.store.has_part(package, rels_path_for("")):
            rel = self.resolver.find_by_type(package, "", REL_TYPE_OFFICE_DOCUMENT)
            if rel is not None:
                return rel.target
        return DEFAULT_WORKBOOK_PART

    def list_sheets(self, package: Package, workbook_part: str | None = None) -> list[SheetRef]:
        workbook_part = workbook_part or self.workbook_part(package)
        workbook = self.store.read_xml(package, workbook_part)
        sheets = find_child(workbook, "sheets", SPREADSHEETML)
        if sheets is None:
            return []

        out: list[SheetRef] = []
        for idx, sh in enumerate(find_children(sheets, "sheet", SPREADSHEETML)):
            name = sh.attrib.get("name")
            rel_id = get_ns_attr(sh, "id", OFFICE_REL)
            if name is None or not rel_id:
                raise CorruptPackageError(f"工作表声明缺少 name/r:id (第{idx + 1}个)")
            out.append(
                SheetRef(
                    index=idx,
                    name=name,
                    rel_id=rel_id,
                    state=sh.attrib.get("state", "visible"),
                )
            )
        return out

    def find_sheet(
        self, package: Package, sheet_name: str, workbook_part: str | None = None
    ) -> SheetRef:
        for sheet in self.list_sheets(package, workbook_part):
            if sheet.name == sheet_name:
                return sheet
        raise SheetNotFoundError(f"工作表不存在: {sheet_name}")

    def find_sheet_part(self, package: Package, sheet_name: str) -> str:
        """工作表名称 → 工作表部件路径"""
        workbook_part = self.workbook_part(package)
        sheet = self.find_sheet(package, sheet_name, workbook_part)
        part = self.resolver.resolve(package, workbook_part, sheet.rel_id)
        logger.debug("工作表 %r -> %s", sheet_name, part)
        return part
