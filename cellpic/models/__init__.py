"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Package / Relationship / SheetRef: 包结构
- CellRef / Anchor / MatchedAnchor: 单元格与锚点几何
- MediaRef / ExtractedImage: 媒体引用与产物
- ExtractionJob: 单次提取的状态机
"""

from .anchor import Anchor, AnchorMarker, CellRef, MatchedAnchor
from .extraction import (
    ExtractedImage,
    ExtractionJob,
    ExtractionState,
    ExtractionTrace,
    MediaRef,
)
from .package import Package, Relationship, SheetRef

__all__ = [
    "Package",
    "Relationship",
    "SheetRef",
    "CellRef",
    "Anchor",
    "AnchorMarker",
    "MatchedAnchor",
    "MediaRef",
    "ExtractedImage",
    "ExtractionTrace",
    "ExtractionJob",
    "ExtractionState",
]
