"""
关系解析器 - 读取部件的 .rels 伴随文件

.rels 路径规则：
    xl/workbook.xml            → xl/_rels/workbook.xml.rels
    xl/worksheets/sheet1.xml   → xl/worksheets/_rels/sheet1.xml.rels
    ""(包根)                   → _rels/.rels

Target 相对于源部件所在目录解析（不是包根），"/" 开头视为包根绝对路径。
"""

from __future__ import annotations

import logging
import posixpath
from urllib.parse import unquote

from ..interfaces import (
    CorruptPackageError,
    IRelationshipResolver,
    RelationshipNotFoundError,
)
from ..models import Package, Relationship
from .namespaces import PACKAGE_REL_NS, find_children
from .package_store import PackageStore, normalize_part_path

logger = logging.getLogger(__name__)


def rels_path_for(part_path: str) -> str:
    """部件路径 → 对应 .rels 路径"""
    directory, filename = posixpath.split(part_path.lstrip("/"))
    return posixpath.join(directory, "_rels", f"{filename}.rels")


def resolve_target(source_part: str, target: str) -> str:
    """将 Target 归一化为包根相对路径"""
    target = unquote(target.strip())
    if target.startswith("/"):
        return normalize_part_path(target)
    base_dir = posixpath.dirname(source_part.lstrip("/"))
    return normalize_part_path(posixpath.join(base_dir, target))


class RelationshipResolver(IRelationshipResolver):
    """关系解析器实现"""

    def __init__(self, store: PackageStore):
        self.store = store

    def load(self, package: Package, part_path: str) -> dict[str, Relationship]:
        """加载部件的全部关系（同一文件内ID重复时保留首个）"""
        rels_path = rels_path_for(part_path)
        if not self.store.has_part(package, rels_path):
            raise CorruptPackageError(f"关系文件不存在: {rels_path}")
        root = self.store.read_xml(package, rels_path)

        rels: dict[str, Relationship] = {}
        for rel in find_children(root, "Relationship", (PACKAGE_REL_NS,)):
            rel_id = rel.attrib.get("Id")
            target = rel.attrib.get("Target")
            if not rel_id or target is None:
                raise CorruptPackageError(f"关系记录缺少 Id/Target: {rels_path}")
            if rel_id in rels:
                continue
            mode = rel.attrib.get("TargetMode", "Internal")
            if mode.lower() != "external":
                target = resolve_target(part_path, target)
            rels[rel_id] = Relationship(
                source_part=part_path,
                rel_id=rel_id,
                target=target,
                rel_type=rel.attrib.get("Type", ""),
                target_mode=mode,
            )
        return rels

    def get(self, package: Package, part_path: str, rel_id: str) -> Relationship:
        rels = self.load(package, part_path)
        rel = rels.get(rel_id)
        if rel is None:
            raise RelationshipNotFoundError(
                f"关系ID不存在: {rel_id} (于 {rels_path_for(part_path)})"
            )
        return rel

    def resolve(self, package: Package, part_path: str, rel_id: str) -> str:
        """关系ID → 目标部件路径"""
        rel = self.get(package, part_path, rel_id)
        if rel.is_external:
            raise CorruptPackageError(f"关系指向外部资源: {rel_id} -> {rel.target}")
        logger.debug("关系解析: %s[%s] -> %s", part_path, rel_id, rel.target)
        return rel.target

    def find_by_type(self, package: Package, part_path: str, rel_type: str) -> Relationship | None:
        """按关系类型后缀查找首个关系（如 /officeDocument）"""
        for rel in self.load(package, part_path).values():
            if rel.rel_type.endswith(rel_type) and not rel.is_external:
                return rel
        return None

