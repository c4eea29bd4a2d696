"""
cellpic - 从 xlsx 指定工作表/单元格提取内嵌图片

模块结构：
- config/     运行期配置加载
- models/     数据模型定义
- ooxml/      包解压与关系解析（工作表 → 绘图 → 锚点 → 图片）
- pipeline/   提取编排与图片输出
- cli         命令行入口
"""

from .interfaces import (
    CellPicError,
    CorruptPackageError,
    ErrorKind,
    ImageWriteError,
    NoDrawingError,
    NoPictureAtCellError,
    PackageNotFoundError,
    RelationshipNotFoundError,
    SheetNotFoundError,
    UnsupportedFormatError,
)
from .models import CellRef, ExtractedImage
from .pipeline import CellImageExtractor, get_image

__version__ = "0.1.0"

__all__ = [
    "get_image",
    "CellImageExtractor",
    "CellRef",
    "ExtractedImage",
    "ErrorKind",
    "CellPicError",
    "PackageNotFoundError",
    "UnsupportedFormatError",
    "CorruptPackageError",
    "SheetNotFoundError",
    "NoDrawingError",
    "NoPictureAtCellError",
    "RelationshipNotFoundError",
    "ImageWriteError",
]
