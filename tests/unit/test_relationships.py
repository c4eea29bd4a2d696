"""
关系解析单元测试
"""

import pytest

from cellpic.interfaces import CorruptPackageError, RelationshipNotFoundError
from cellpic.ooxml import PackageStore, RelationshipResolver, rels_path_for, resolve_target

PKG_REL = "http://schemas.openxmlformats.org/package/2006/relationships"
IMAGE_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"


def _rels(*entries: str) -> str:
    return f'<Relationships xmlns="{PKG_REL}">{"".join(entries)}</Relationships>'


class TestPaths:
    """路径规则测试"""

    @pytest.mark.parametrize(
        "part,expected",
        [
            ("xl/workbook.xml", "xl/_rels/workbook.xml.rels"),
            ("xl/worksheets/sheet1.xml", "xl/worksheets/_rels/sheet1.xml.rels"),
            ("xl/drawings/drawing1.xml", "xl/drawings/_rels/drawing1.xml.rels"),
            ("", "_rels/.rels"),
        ],
    )
    def test_rels_path_for(self, part: str, expected: str):
        assert rels_path_for(part) == expected

    @pytest.mark.parametrize(
        "source,target,expected",
        [
            ("xl/workbook.xml", "worksheets/sheet1.xml", "xl/worksheets/sheet1.xml"),
            ("xl/worksheets/sheet1.xml", "../drawings/drawing1.xml", "xl/drawings/drawing1.xml"),
            ("xl/drawings/drawing1.xml", "../media/image1.png", "xl/media/image1.png"),
            ("xl/drawings/drawing1.xml", "/xl/media/image1.png", "xl/media/image1.png"),
            ("xl/drawings/drawing1.xml", "../media/my%20image.png", "xl/media/my image.png"),
            ("", "xl/workbook.xml", "xl/workbook.xml"),
        ],
    )
    def test_resolve_target(self, source: str, target: str, expected: str):
        """测试 Target 以源部件所在目录为基准解析"""
        assert resolve_target(source, target) == expected

    def test_resolve_target_escaping(self):
        """测试越出包根"""
        with pytest.raises(CorruptPackageError):
            resolve_target("xl/workbook.xml", "../../evil.xml")


class TestRelationshipResolver:
    """关系解析器测试"""

    @pytest.fixture
    def resolver(self, runtime_config) -> RelationshipResolver:
        return RelationshipResolver(PackageStore(runtime_config))

    def _open(self, resolver, make_xlsx, drawing_rels: str | None, red_png: bytes):
        extra = {}
        if drawing_rels is not None:
            extra["xl/drawings/_rels/drawing1.xml.rels"] = drawing_rels
        book = make_xlsx(
            [("Sheet1", [{"from": (0, 0), "to": (1, 1), "image": red_png}])],
            extra_parts=extra,
        )
        return resolver.store.opened(book)

    def test_resolve(self, resolver, make_xlsx, red_png):
        with self._open(resolver, make_xlsx, None, red_png) as package:
            assert resolver.resolve(package, "xl/workbook.xml", "rId1") == "xl/worksheets/sheet1.xml"
            assert resolver.resolve(package, "xl/drawings/drawing1.xml", "rId1") == "xl/media/image1.png"

    def test_ids_scoped_per_rels_file(self, resolver, make_xlsx, red_png):
        """测试同一ID在不同 .rels 中指向不同目标"""
        with self._open(resolver, make_xlsx, None, red_png) as package:
            targets = {
                resolver.resolve(package, "xl/workbook.xml", "rId1"),
                resolver.resolve(package, "xl/worksheets/sheet1.xml", "rId1"),
                resolver.resolve(package, "xl/drawings/drawing1.xml", "rId1"),
            }
            assert len(targets) == 3

    def test_relationship_not_found(self, resolver, make_xlsx, red_png):
        with self._open(resolver, make_xlsx, None, red_png) as package:
            with pytest.raises(RelationshipNotFoundError):
                resolver.resolve(package, "xl/workbook.xml", "rId99")

    def test_missing_rels_file(self, resolver, make_xlsx, red_png):
        """测试 .rels 缺失"""
        with self._open(resolver, make_xlsx, None, red_png) as package:
            with pytest.raises(CorruptPackageError):
                resolver.resolve(package, "xl/media/image1.png", "rId1")

    def test_malformed_rels_file(self, resolver, make_xlsx, red_png):
        with self._open(resolver, make_xlsx, "<Relationships>", red_png) as package:
            with pytest.raises(CorruptPackageError):
                resolver.resolve(package, "xl/drawings/drawing1.xml", "rId1")

    def test_external_target(self, resolver, make_xlsx, red_png):
        """测试外部链接目标"""
        rels = _rels(
            f'<Relationship Id="rId1" Type="{IMAGE_TYPE}" '
            'Target="http://example.com/a.png" TargetMode="External"/>'
        )
        with self._open(resolver, make_xlsx, rels, red_png) as package:
            rel = resolver.load(package, "xl/drawings/drawing1.xml")["rId1"]
            assert rel.is_external
            assert rel.target == "http://example.com/a.png"
            with pytest.raises(CorruptPackageError):
                resolver.resolve(package, "xl/drawings/drawing1.xml", "rId1")

    def test_duplicate_id_first_wins(self, resolver, make_xlsx, red_png):
        """测试同一文件内ID重复时首个生效"""
        rels = _rels(
            f'<Relationship Id="rId1" Type="{IMAGE_TYPE}" Target="../media/image1.png"/>',
            f'<Relationship Id="rId1" Type="{IMAGE_TYPE}" Target="../media/other.png"/>',
        )
        with self._open(resolver, make_xlsx, rels, red_png) as package:
            assert resolver.resolve(package, "xl/drawings/drawing1.xml", "rId1") == "xl/media/image1.png"

    def test_record_missing_target(self, resolver, make_xlsx, red_png):
        rels = _rels(f'<Relationship Id="rId1" Type="{IMAGE_TYPE}"/>')
        with self._open(resolver, make_xlsx, rels, red_png) as package:
            with pytest.raises(CorruptPackageError):
                resolver.load(package, "xl/drawings/drawing1.xml")

    def test_find_by_type(self, resolver, make_xlsx, red_png):
        """测试按类型查找包根关系"""
        with self._open(resolver, make_xlsx, None, red_png) as package:
            rel = resolver.find_by_type(package, "", "/officeDocument")
            assert rel is not None
            assert rel.target == "xl/workbook.xml"
            assert resolver.find_by_type(package, "", "/customXml") is None
