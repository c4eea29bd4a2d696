"""
流水线模块 - 提取编排与输出

子模块：
- stages: 流水线各阶段定义
- extractor: 流水线执行器
- image_writer: 图片写出/转码
"""

from .extractor import CellImageExtractor, get_image
from .image_writer import ImageWriter
from .stages import EXTRACTION_STAGES, PipelineStage, StageEnum

__all__ = [
    "PipelineStage",
    "StageEnum",
    "EXTRACTION_STAGES",
    "CellImageExtractor",
    "ImageWriter",
    "get_image",
]
