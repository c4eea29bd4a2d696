"""
OOXML 命名空间与元素查找

元素按命名空间URI匹配（过渡版与严格版都接受），文档中不存在对应URI时
才退回按本地名匹配。前缀(r/xdr/a)只是约定写法，不参与查找。
"""

from __future__ import annotations

from collections.abc import Iterator
from xml.etree import ElementTree as ET

PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

# 过渡版(Transitional) / 严格版(Strict)
SPREADSHEETML = (
    "http://schemas.openxmlformats.org/spreadsheetml/2006/main",
    "http://purl.oclc.org/ooxml/spreadsheetml/main",
)
OFFICE_REL = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "http://purl.oclc.org/ooxml/officeDocument/relationships",
)
SPREADSHEET_DRAWING = (
    "http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing",
    "http://purl.oclc.org/ooxml/drawingml/spreadsheetDrawing",
)
DRAWINGML = (
    "http://schemas.openxmlformats.org/drawingml/2006/main",
    "http://purl.oclc.org/ooxml/drawingml/main",
)

# 包根 officeDocument 关系类型（按后缀匹配，兼容两种前缀）
REL_TYPE_OFFICE_DOCUMENT = "/officeDocument"


def local_name(tag: str) -> str:
    """'{uri}name' → 'name'"""
    return tag.rsplit("}", 1)[-1]


def namespace_of(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def _qualified(uris: tuple[str, ...], name: str) -> set[str]:
    return {f"{{{uri}}}{name}" for uri in uris}


def find_children(parent: ET.Element, name: str, uris: tuple[str, ...]) -> list[ET.Element]:
    """直接子元素：先按URI匹配，无结果时退回本地名匹配"""
    wanted = _qualified(uris, name)
    matched = [child for child in parent if child.tag in wanted]
    if matched:
        return matched
    return [child for child in parent if local_name(child.tag) == name]


def find_child(parent: ET.Element, name: str, uris: tuple[str, ...]) -> ET.Element | None:
    children = find_children(parent, name, uris)
    return children[0] if children else None


def iter_descendants(parent: ET.Element, name: str, uris: tuple[str, ...]) -> Iterator[ET.Element]:
    """后代元素（文档顺序，不含自身）"""
    wanted = _qualified(uris, name)
    descendants = list(parent.iter())[1:]
    matched = [el for el in descendants if el.tag in wanted]
    if not matched:
        matched = [el for el in descendants if local_name(el.tag) == name]
    yield from matched


def get_ns_attr(el: ET.Element, name: str, uris: tuple[str, ...]) -> str | None:
    """带命名空间的属性（如 r:id / r:embed）"""
    for key in _qualified(uris, name):
        if key in el.attrib:
            return el.attrib[key]
    for key, value in el.attrib.items():
        if namespace_of(key) is not None and local_name(key) == name:
            return value
    return None


def element_text(el: ET.Element | None) -> str | None:
    if el is None:
        return None
    t = (el.text or "").strip()
    return t or None
