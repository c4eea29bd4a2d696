"""
模块接口契约 - 定义各模块的抽象接口与异常体系

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 目标单元格等调用参数显式传递，实现类不保存调用期状态

使用方式：
    from cellpic.interfaces import IAnchorMatcher

    class MyAnchorMatcher(IAnchorMatcher):
        def find_anchor(self, drawing_root, target) -> MatchedAnchor:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

if TYPE_CHECKING:
    from .models import (
        Anchor,
        CellRef,
        ExtractedImage,
        MatchedAnchor,
        MediaRef,
        Package,
        Relationship,
        SheetRef,
    )


# ============================================================================
# 包存储接口
# ============================================================================

class IPackageStore(ABC):
    """包存储接口 - 解压到私有工作目录并按部件路径读取"""

    @abstractmethod
    def open(self, package_path: Path) -> Package:
        """
        解压源文件到独立的临时工作目录

        Args:
            package_path: 源 xlsx 文件路径

        Returns:
            Package（持有工作目录）

        Raises:
            PackageNotFoundError: 源文件不存在
            UnsupportedFormatError: 扩展名/文件签名不匹配
            CorruptPackageError: ZIP 无法解压
        """
        ...

    @abstractmethod
    def read_part(self, package: Package, part_path: str) -> bytes:
        """
        读取部件原始字节

        Raises:
            CorruptPackageError: 部件不存在
        """
        ...

    @abstractmethod
    def read_xml(self, package: Package, part_path: str) -> ET.Element:
        """读取并解析XML部件（格式错误抛 CorruptPackageError）"""
        ...

    @abstractmethod
    def close(self, package: Package) -> None:
        """删除工作目录（所有退出路径都必须调用）"""
        ...

    @abstractmethod
    def opened(self, package_path: Path) -> AbstractContextManager[Package]:
        """open/close 的上下文管理器形式"""
        ...


# ============================================================================
# 关系解析与定位接口
# ============================================================================

class IRelationshipResolver(ABC):
    """关系解析器接口 - 读取部件的 .rels 伴随文件"""

    @abstractmethod
    def load(self, package: Package, part_path: str) -> dict[str, Relationship]:
        """
        加载部件的全部关系记录

        Returns:
            {rel_id: Relationship}

        Raises:
            CorruptPackageError: .rels 缺失或格式错误
        """
        ...

    @abstractmethod
    def resolve(self, package: Package, part_path: str, rel_id: str) -> str:
        """
        解析关系ID为目标部件路径（相对包根）

        Raises:
            RelationshipNotFoundError: .rels 中无此ID
            CorruptPackageError: .rels 缺失/格式错误，或目标越界/为外部链接
        """
        ...


class ISheetLocator(ABC):
    """工作表定位器接口 - 工作表名称 → 工作表部件路径"""

    @abstractmethod
    def list_sheets(self, package: Package, workbook_part: str | None = None) -> list[SheetRef]:
        """按文档顺序列出工作簿中的工作表声明"""
        ...

    @abstractmethod
    def find_sheet_part(self, package: Package, sheet_name: str) -> str:
        """
        按名称（精确匹配，区分大小写，首个命中）定位工作表部件

        Raises:
            SheetNotFoundError: 无匹配工作表
        """
        ...


class IDrawingLocator(ABC):
    """绘图定位器接口 - 工作表部件 → 绘图部件路径"""

    @abstractmethod
    def find_drawing_part(self, package: Package, worksheet_part: str) -> str:
        """
        Raises:
            NoDrawingError: 工作表未声明 drawing 元素
        """
        ...


class IAnchorMatcher(ABC):
    """锚点匹配器接口 - 在绘图部件中查找覆盖目标单元格的锚点"""

    @abstractmethod
    def iter_anchors(self, drawing_root: ET.Element) -> Iterator[Anchor]:
        """按文档顺序产出所有双单元格锚点"""
        ...

    @abstractmethod
    def find_anchor(self, drawing_root: ET.Element, target: CellRef) -> MatchedAnchor:
        """
        返回文档顺序中第一个包含目标单元格的锚点

        Raises:
            NoPictureAtCellError: 无锚点覆盖目标单元格，或命中锚点无 embed 引用
        """
        ...


class IImageResolver(ABC):
    """图片解析器接口 - embed 关系ID → 媒体部件"""

    @abstractmethod
    def resolve_media(self, package: Package, drawing_part: str, rel_id: str) -> MediaRef:
        """基于绘图部件自身的 .rels 解析媒体路径"""
        ...


class IImageWriter(ABC):
    """图片输出接口"""

    @abstractmethod
    def write(
        self,
        image: ExtractedImage,
        save_path: Path,
        output_format: str | None = None,
    ) -> Path:
        """
        写出图片（格式一致时原样写字节，否则经 Pillow 转码）

        Raises:
            ImageWriteError: 无法输出为目标格式
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class ErrorKind(str, Enum):
    """错误类别"""
    NOT_FOUND = "NotFound"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    CORRUPT_PACKAGE = "CorruptPackage"
    SHEET_NOT_FOUND = "SheetNotFound"
    NO_DRAWING = "NoDrawing"
    NO_PICTURE_AT_CELL = "NoPictureAtCell"
    RELATIONSHIP_NOT_FOUND = "RelationshipNotFound"
    IMAGE_WRITE = "ImageWrite"


class CellPicError(Exception):
    """基础异常"""
    kind: ErrorKind


class PackageNotFoundError(CellPicError):
    """源文件不存在"""
    kind = ErrorKind.NOT_FOUND


class UnsupportedFormatError(CellPicError):
    """不支持的文件格式"""
    kind = ErrorKind.UNSUPPORTED_FORMAT


class CorruptPackageError(CellPicError):
    """包结构损坏"""
    kind = ErrorKind.CORRUPT_PACKAGE


class SheetNotFoundError(CellPicError):
    """工作表不存在"""
    kind = ErrorKind.SHEET_NOT_FOUND


class NoDrawingError(CellPicError):
    """工作表无绘图"""
    kind = ErrorKind.NO_DRAWING


class NoPictureAtCellError(CellPicError):
    """目标单元格无图片"""
    kind = ErrorKind.NO_PICTURE_AT_CELL


class RelationshipNotFoundError(CellPicError):
    """关系ID不存在"""
    kind = ErrorKind.RELATIONSHIP_NOT_FOUND


class ImageWriteError(CellPicError):
    """图片输出错误"""
    kind = ErrorKind.IMAGE_WRITE
