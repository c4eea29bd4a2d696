"""
流水线阶段定义

职责：
1. 定义各阶段的名称与完成后到达的状态
2. 阶段严格串行：每一阶段消费上一阶段解析出的部件路径

测试要点：
- test_stage_order: 阶段顺序与状态机一致
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..models import ExtractionState


class StageEnum(str, Enum):
    """流水线阶段枚举"""
    RESOLVE_SHEET = "RESOLVE_SHEET"
    RESOLVE_DRAWING = "RESOLVE_DRAWING"
    MATCH_ANCHOR = "MATCH_ANCHOR"
    RESOLVE_MEDIA = "RESOLVE_MEDIA"
    READ_MEDIA = "READ_MEDIA"


@dataclass(frozen=True)
class PipelineStage:
    """流水线阶段"""
    name: str
    reaches: ExtractionState  # 阶段成功后的状态


# 提取流水线各阶段配置
EXTRACTION_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.RESOLVE_SHEET.value, ExtractionState.SHEET_RESOLVED),
    PipelineStage(StageEnum.RESOLVE_DRAWING.value, ExtractionState.DRAWING_RESOLVED),
    PipelineStage(StageEnum.MATCH_ANCHOR.value, ExtractionState.ANCHOR_MATCHED),
    PipelineStage(StageEnum.RESOLVE_MEDIA.value, ExtractionState.MEDIA_RESOLVED),
    PipelineStage(StageEnum.READ_MEDIA.value, ExtractionState.DONE),
]
