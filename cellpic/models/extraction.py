"""
提取任务模型 - 单次提取的状态机与产物

状态流转：
    START → SHEET_RESOLVED → DRAWING_RESOLVED → ANCHOR_MATCHED → MEDIA_RESOLVED → DONE
任一步骤可转入 FAILED；DONE/FAILED 为终态
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, Field

from ..interfaces import ErrorKind
from .anchor import CellRef


class ExtractionState(str, Enum):
    """提取状态枚举"""
    START = "start"
    SHEET_RESOLVED = "sheet_resolved"
    DRAWING_RESOLVED = "drawing_resolved"
    ANCHOR_MATCHED = "anchor_matched"
    MEDIA_RESOLVED = "media_resolved"
    DONE = "done"
    FAILED = "failed"


# 正常路径的状态顺序
STATE_ORDER: list[ExtractionState] = [
    ExtractionState.START,
    ExtractionState.SHEET_RESOLVED,
    ExtractionState.DRAWING_RESOLVED,
    ExtractionState.ANCHOR_MATCHED,
    ExtractionState.MEDIA_RESOLVED,
    ExtractionState.DONE,
]


class MediaRef(BaseModel):
    """媒体引用"""
    part_path: str = Field(..., description="如 xl/media/image1.png")
    format: str | None = Field(None, description="原生格式(PNG/JPEG...)，按扩展名推断")

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.part_path).suffix.lower()


class ExtractionTrace(BaseModel):
    """解析路径记录"""
    sheet_part: str | None = None
    drawing_part: str | None = None
    anchor_index: int | None = None
    embed_rel_id: str | None = None
    media_part: str | None = None


class ExtractedImage(BaseModel):
    """提取出的原始图片"""
    data: bytes
    media: MediaRef
    trace: ExtractionTrace = Field(default_factory=ExtractionTrace)

    @property
    def format(self) -> str | None:
        return self.media.format

    @property
    def filename(self) -> str:
        return PurePosixPath(self.media.part_path).name


class ExtractionJob(BaseModel):
    """单次提取任务"""
    job_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    package_path: Path
    sheet_name: str
    cell: CellRef

    state: ExtractionState = ExtractionState.START
    trace: ExtractionTrace = Field(default_factory=ExtractionTrace)

    error_kind: ErrorKind | None = None
    errors: list[str] = Field(default_factory=list, description="错误信息")

    created_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def is_terminal(self) -> bool:
        return self.state in (ExtractionState.DONE, ExtractionState.FAILED)

    def advance(self, state: ExtractionState) -> None:
        """推进到下一状态（只允许按顺序前进一步）"""
        if self.is_terminal:
            raise ValueError(f"任务已结束: {self.state.value}")
        expected = STATE_ORDER[STATE_ORDER.index(self.state) + 1]
        if state != expected:
            raise ValueError(f"非法状态转换: {self.state.value} -> {state.value}")
        self.state = state
        if state == ExtractionState.DONE:
            self.finished_at = datetime.now()

    def mark_failed(self, kind: ErrorKind | None, error: str) -> None:
        """标记为失败（kind 为 None 表示非预期异常）"""
        if self.is_terminal:
            raise ValueError(f"任务已结束: {self.state.value}")
        self.state = ExtractionState.FAILED
        self.error_kind = kind
        self.finished_at = datetime.now()
        self.errors.append(error)
