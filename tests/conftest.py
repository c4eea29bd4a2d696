"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(make_xlsx, extractor, red_png):
        path = make_xlsx([("Sheet1", [{"from": (2, 2), "to": (5, 5), "image": red_png}])])
        image = extractor.extract(path, "Sheet1", 3, 3)
"""

from __future__ import annotations

import tempfile
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Generator
from xml.sax.saxutils import quoteattr

import pytest
from PIL import Image

from cellpic.config import RuntimeConfig
from cellpic.config.runtime_config import PackageConfig
from cellpic.pipeline import CellImageExtractor


# ============================================================================
# OOXML 常量
# ============================================================================

TRANSITIONAL = {
    "main": "http://schemas.openxmlformats.org/spreadsheetml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "xdr": "http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
}
STRICT = {
    "main": "http://purl.oclc.org/ooxml/spreadsheetml/main",
    "r": "http://purl.oclc.org/ooxml/officeDocument/relationships",
    "xdr": "http://purl.oclc.org/ooxml/drawingml/spreadsheetDrawing",
    "a": "http://purl.oclc.org/ooxml/drawingml/main",
}
PKG_REL = "http://schemas.openxmlformats.org/package/2006/relationships"
XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'


def _rels_xml(rel_base: str, entries: list[tuple[str, str, str]]) -> str:
    items = "".join(
        f'<Relationship Id="{rid}" Type="{rel_base}/{rtype}" Target="{target}"/>'
        for rid, rtype, target in entries
    )
    return f'{XML_DECL}<Relationships xmlns="{PKG_REL}">{items}</Relationships>'


def _marker(x: str, tag: str, col: int, row: int) -> str:
    return (
        f"<{x}:{tag}><{x}:col>{col}</{x}:col><{x}:colOff>0</{x}:colOff>"
        f"<{x}:row>{row}</{x}:row><{x}:rowOff>0</{x}:rowOff></{x}:{tag}>"
    )


def _anchor_xml(anchor: dict[str, Any], idx: int, rid: str | None, p: dict[str, str]) -> str:
    x, a, r = p["xdr"], p["a"], p["r"]
    (fc, fr), (tc, tr) = anchor["from"], anchor["to"]
    if rid is not None:
        body = (
            f'<{x}:pic><{x}:nvPicPr><{x}:cNvPr id="{idx + 2}" name="Picture {idx + 1}"/>'
            f"<{x}:cNvPicPr/></{x}:nvPicPr>"
            f'<{x}:blipFill><{a}:blip {r}:embed="{rid}"/>'
            f"<{a}:stretch><{a}:fillRect/></{a}:stretch></{x}:blipFill>"
            f'<{x}:spPr><{a}:prstGeom prst="rect"><{a}:avLst/></{a}:prstGeom></{x}:spPr></{x}:pic>'
        )
    else:
        body = (
            f'<{x}:sp><{x}:nvSpPr><{x}:cNvPr id="{idx + 2}" name="Shape {idx + 1}"/>'
            f"<{x}:cNvSpPr/></{x}:nvSpPr>"
            f'<{x}:spPr><{a}:prstGeom prst="rect"><{a}:avLst/></{a}:prstGeom></{x}:spPr></{x}:sp>'
        )
    return (
        f'<{x}:twoCellAnchor editAs="oneCell">'
        f'{_marker(x, "from", fc, fr)}{_marker(x, "to", tc, tr)}{body}<{x}:clientData/>'
        f"</{x}:twoCellAnchor>"
    )


def build_xlsx_parts(
    sheets: list[tuple[str, list[dict[str, Any]] | None]],
    *,
    strict: bool = False,
    prefixes: dict[str, str] | None = None,
) -> dict[str, bytes]:
    """
    生成最小 xlsx 部件集合

    sheets: [(工作表名, 锚点列表)]，锚点列表为 None 表示工作表无 drawing 元素；
    锚点: {"from": (col, row), "to": (col, row), "image": bytes | None, "ext": "png"}
    """
    ns = STRICT if strict else TRANSITIONAL
    p = {"r": "r", "xdr": "xdr", "a": "a", **(prefixes or {})}
    rel_base = ns["r"]
    parts: dict[str, str | bytes] = {}

    parts["_rels/.rels"] = _rels_xml(rel_base, [("rId1", "officeDocument", "xl/workbook.xml")])

    sheet_decls = []
    wb_rels = []
    media_no = 0
    for i, (name, anchors) in enumerate(sheets, start=1):
        sheet_decls.append(f'<sheet name={quoteattr(name)} sheetId="{i}" {p["r"]}:id="rId{i}"/>')
        wb_rels.append((f"rId{i}", "worksheet", f"worksheets/sheet{i}.xml"))

        drawing_el = f'<drawing {p["r"]}:id="rId1"/>' if anchors is not None else ""
        parts[f"xl/worksheets/sheet{i}.xml"] = (
            f'{XML_DECL}<worksheet xmlns="{ns["main"]}" xmlns:{p["r"]}="{ns["r"]}">'
            f"<sheetData/>{drawing_el}</worksheet>"
        )
        if anchors is None:
            continue

        parts[f"xl/worksheets/_rels/sheet{i}.xml.rels"] = _rels_xml(
            rel_base, [("rId1", "drawing", f"../drawings/drawing{i}.xml")]
        )

        anchor_xml = []
        drawing_rels = []
        for idx, anchor in enumerate(anchors):
            rid = None
            if anchor.get("image") is not None:
                media_no += 1
                rid = f"rId{len(drawing_rels) + 1}"
                media_name = f"image{media_no}.{anchor.get('ext', 'png')}"
                drawing_rels.append((rid, "image", f"../media/{media_name}"))
                parts[f"xl/media/{media_name}"] = anchor["image"]
            anchor_xml.append(_anchor_xml(anchor, idx, rid, p))

        parts[f"xl/drawings/drawing{i}.xml"] = (
            f'{XML_DECL}<{p["xdr"]}:wsDr xmlns:{p["xdr"]}="{ns["xdr"]}" '
            f'xmlns:{p["a"]}="{ns["a"]}" xmlns:{p["r"]}="{ns["r"]}">'
            f'{"".join(anchor_xml)}</{p["xdr"]}:wsDr>'
        )
        parts[f"xl/drawings/_rels/drawing{i}.xml.rels"] = _rels_xml(rel_base, drawing_rels)

    parts["xl/workbook.xml"] = (
        f'{XML_DECL}<workbook xmlns="{ns["main"]}" xmlns:{p["r"]}="{ns["r"]}">'
        f'<sheets>{"".join(sheet_decls)}</sheets></workbook>'
    )
    parts["xl/_rels/workbook.xml.rels"] = _rels_xml(rel_base, wb_rels)
    parts["[Content_Types].xml"] = (
        f'{XML_DECL}<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
        '<Default Extension="xml" ContentType="application/xml"/>'
        '<Default Extension="png" ContentType="image/png"/>'
        '<Default Extension="jpeg" ContentType="image/jpeg"/>'
        "</Types>"
    )
    return {k: v.encode("utf-8") if isinstance(v, str) else v for k, v in parts.items()}


def write_zip(path: Path, parts: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in parts.items():
            zf.writestr(name, data)
    return path


def png_bytes(color: tuple[int, int, int], size: tuple[int, int] = (4, 3)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def work_root(temp_dir: Path) -> Path:
    """解压根目录（用于检查临时目录是否泄漏）"""
    root = temp_dir / "work"
    root.mkdir()
    return root


@pytest.fixture(scope="session")
def red_png() -> bytes:
    return png_bytes((255, 0, 0))


@pytest.fixture(scope="session")
def blue_png() -> bytes:
    return png_bytes((0, 0, 255))


@pytest.fixture
def make_xlsx(temp_dir: Path) -> Callable[..., Path]:
    """
    xlsx 工厂

    extra_parts 覆盖/新增部件，drop_parts 删除部件，用于构造损坏的包
    """

    def _make(
        sheets: list[tuple[str, list[dict[str, Any]] | None]],
        filename: str = "book.xlsx",
        *,
        strict: bool = False,
        prefixes: dict[str, str] | None = None,
        extra_parts: dict[str, str | bytes] | None = None,
        drop_parts: tuple[str, ...] = (),
    ) -> Path:
        parts = build_xlsx_parts(sheets, strict=strict, prefixes=prefixes)
        for name, data in (extra_parts or {}).items():
            parts[name] = data.encode("utf-8") if isinstance(data, str) else data
        for name in drop_parts:
            parts.pop(name, None)
        return write_zip(temp_dir / filename, parts)

    return _make


# ============================================================================
# 配置与提取器 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config(work_root: Path) -> RuntimeConfig:
    """运行期配置（解压到 work_root）"""
    return RuntimeConfig(package=PackageConfig(temp_dir=str(work_root)))


@pytest.fixture
def extractor(runtime_config: RuntimeConfig) -> CellImageExtractor:
    return CellImageExtractor(runtime_config)
