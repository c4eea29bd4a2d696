"""
锚点匹配器 - 查找覆盖目标单元格的双单元格锚点

规则：
1) 按文档顺序遍历 xdr:twoCellAnchor（mc:AlternateContent 内的取首个分支）
2) from.col ≤ col ≤ to.col 且 from.row ≤ row ≤ to.row 即命中（边界包含）
3) 取第一个命中的锚点；锚点可能重叠，先出现者优先（不代表视觉上在最上层）
4) 从命中锚点的 a:blip 读取 r:embed

角标倒置（from > to）按 corner_policy 处理：
- normalize: 按轴取 min/max 后再判断
- strict: 抛 CorruptPackageError

测试要点：
- test_boundary_inclusion: 边界包含
- test_first_match_wins: 重叠时先出现者优先
- test_inverted_corners_strict: 角标倒置
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from xml.etree import ElementTree as ET

from ..config import RuntimeConfig, get_config
from ..interfaces import CorruptPackageError, IAnchorMatcher, NoPictureAtCellError
from ..models import Anchor, AnchorMarker, CellRef, MatchedAnchor
from .namespaces import (
    DRAWINGML,
    OFFICE_REL,
    SPREADSHEET_DRAWING,
    element_text,
    find_child,
    find_children,
    get_ns_attr,
    iter_descendants,
    local_name,
)

logger = logging.getLogger(__name__)

MC_NS = ("http://schemas.openxmlformats.org/markup-compatibility/2006",)


class AnchorMatcher(IAnchorMatcher):
    """锚点匹配器实现（无调用期状态，可跨线程复用）"""

    def __init__(self, config: RuntimeConfig | None = None):
        config = config or get_config()
        self.corner_policy = config.anchors.corner_policy
        self.pictures_only = config.anchors.pictures_only

    def _anchor_elements(self, drawing_root: ET.Element) -> Iterator[ET.Element]:
        wanted = {f"{{{uri}}}twoCellAnchor" for uri in SPREADSHEET_DRAWING}
        by_uri = any(el.tag in wanted for el in drawing_root.iter())
        for node in drawing_root:
            name = local_name(node.tag)
            if node.tag in wanted or (not by_uri and name == "twoCellAnchor"):
                yield node
            elif name == "AlternateContent":
                branches = find_children(node, "Choice", MC_NS) or find_children(node, "Fallback", MC_NS)
                if branches:
                    yield from find_children(branches[0], "twoCellAnchor", SPREADSHEET_DRAWING)

    def _marker(self, anchor_el: ET.Element, name: str, index: int) -> AnchorMarker:
        marker = find_child(anchor_el, name, SPREADSHEET_DRAWING)
        if marker is None:
            raise CorruptPackageError(f"锚点缺少 xdr:{name} (锚点#{index})")
        col = element_text(find_child(marker, "col", SPREADSHEET_DRAWING))
        row = element_text(find_child(marker, "row", SPREADSHEET_DRAWING))
        try:
            return AnchorMarker(column=int(col), row=int(row))
        except (TypeError, ValueError) as e:
            raise CorruptPackageError(
                f"锚点坐标无效 (锚点#{index} xdr:{name}: col={col!r} row={row!r})"
            ) from e

    def _parse_anchor(self, anchor_el: ET.Element, index: int) -> Anchor:
        embed = None
        for blip in iter_descendants(anchor_el, "blip", DRAWINGML):
            embed = get_ns_attr(blip, "embed", OFFICE_REL)
            break

        name = None
        for c_nv_pr in iter_descendants(anchor_el, "cNvPr", SPREADSHEET_DRAWING):
            name = c_nv_pr.attrib.get("name")
            break

        return Anchor(
            index=index,
            start=self._marker(anchor_el, "from", index),
            end=self._marker(anchor_el, "to", index),
            embed_rel_id=embed or None,
            name=name,
        )

    def iter_anchors(self, drawing_root: ET.Element) -> Iterator[Anchor]:
        for index, anchor_el in enumerate(self._anchor_elements(drawing_root)):
            yield self._parse_anchor(anchor_el, index)

    def find_anchor(self, drawing_root: ET.Element, target: CellRef) -> MatchedAnchor:
        """返回第一个覆盖目标单元格的锚点"""
        for anchor in self.iter_anchors(drawing_root):
            if anchor.is_inverted and self.corner_policy == "strict":
                raise CorruptPackageError(
                    f"锚点角标倒置 (锚点#{anchor.index}: from={anchor.start.model_dump()} "
                    f"to={anchor.end.model_dump()})"
                )
            if not anchor.contains(target):
                continue
            if anchor.embed_rel_id is None:
                if self.pictures_only:
                    logger.debug("跳过非图片锚点 #%s", anchor.index)
                    continue
                raise NoPictureAtCellError(
                    f"单元格 {target.to_a1()} 处的锚点#{anchor.index} 无图片引用"
                )
            logger.debug("单元格 %s 命中锚点#%s (%s)", target.to_a1(), anchor.index, anchor.embed_rel_id)
            return MatchedAnchor(anchor=anchor, embed_rel_id=anchor.embed_rel_id)

        raise NoPictureAtCellError(f"单元格 {target.to_a1()} 处无图片")
