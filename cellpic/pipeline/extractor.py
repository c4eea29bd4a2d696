"""
流水线执行器 - 编排提取各阶段

职责：
1. 解压源文件到独立工作目录
2. 按顺序执行 工作表 → 绘图 → 锚点 → 媒体 各阶段
3. 推进任务状态机，失败时记录错误类别
4. 无论成功失败都清理工作目录

测试要点：
- test_extract_success: 完整提取
- TestFailures: 各失败类别、任务状态与清理
- test_idempotent: 重复提取结果一致
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..config import RuntimeConfig, get_config
from ..interfaces import CellPicError
from ..models import (
    Anchor,
    CellRef,
    ExtractedImage,
    ExtractionJob,
    Package,
)
from ..ooxml import (
    AnchorMatcher,
    DrawingLocator,
    ImageResolver,
    PackageStore,
    RelationshipResolver,
    SheetLocator,
)
from .image_writer import ImageWriter
from .stages import EXTRACTION_STAGES, PipelineStage, StageEnum

logger = logging.getLogger(__name__)


class CellImageExtractor:
    """单元格图片提取器（实例无调用期状态，可在多线程间共享）"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()

        self.store = PackageStore(self.config)
        self.resolver = RelationshipResolver(self.store)
        self.sheet_locator = SheetLocator(self.store, self.resolver)
        self.drawing_locator = DrawingLocator(self.store, self.resolver)
        self.anchor_matcher = AnchorMatcher(self.config)
        self.image_resolver = ImageResolver(self.store, self.resolver)
        self.writer = ImageWriter(self.config)

    @staticmethod
    def create_job(
        package_path: str | Path,
        sheet_name: str,
        row: int,
        column: int,
    ) -> ExtractionJob:
        """创建提取任务（行列为0基）"""
        return ExtractionJob(
            package_path=Path(package_path),
            sheet_name=sheet_name,
            cell=CellRef(row=row, column=column),
        )

    def execute(self, job: ExtractionJob) -> ExtractedImage:
        """执行流水线"""
        logger.info(
            f"[{job.job_id}] 开始提取: {job.package_path.name} "
            f"sheet={job.sheet_name!r} cell={job.cell.to_a1()}"
        )
        context: dict[str, Any] = {}

        try:
            with self.store.opened(job.package_path) as package:
                for stage in EXTRACTION_STAGES:
                    self._execute_stage(job, stage, package, context)
        except CellPicError as e:
            logger.error(f"[{job.job_id}] 提取失败 ({e.kind.value}): {e}")
            job.mark_failed(e.kind, str(e))
            raise
        except Exception as e:
            logger.exception(f"[{job.job_id}] 提取异常")
            job.mark_failed(None, str(e))
            raise

        logger.info(f"[{job.job_id}] 提取完成: {job.trace.media_part}")
        return context["image"]

    def _execute_stage(
        self,
        job: ExtractionJob,
        stage: PipelineStage,
        package: Package,
        context: dict[str, Any],
    ) -> None:
        """执行单个阶段"""
        logger.debug(f"[{job.job_id}] 开始阶段: {stage.name}")

        if stage.name == StageEnum.RESOLVE_SHEET.value:
            job.trace.sheet_part = self.sheet_locator.find_sheet_part(package, job.sheet_name)

        elif stage.name == StageEnum.RESOLVE_DRAWING.value:
            job.trace.drawing_part = self.drawing_locator.find_drawing_part(
                package, job.trace.sheet_part
            )

        elif stage.name == StageEnum.MATCH_ANCHOR.value:
            drawing_root = self.store.read_xml(package, job.trace.drawing_part)
            matched = self.anchor_matcher.find_anchor(drawing_root, job.cell)
            job.trace.anchor_index = matched.index
            job.trace.embed_rel_id = matched.embed_rel_id

        elif stage.name == StageEnum.RESOLVE_MEDIA.value:
            media = self.image_resolver.resolve_media(
                package, job.trace.drawing_part, job.trace.embed_rel_id
            )
            job.trace.media_part = media.part_path
            context["media"] = media

        elif stage.name == StageEnum.READ_MEDIA.value:
            media = context["media"]
            data = self.store.read_part(package, media.part_path)
            context["image"] = ExtractedImage(
                data=data,
                media=media,
                trace=job.trace.model_copy(),
            )

        job.advance(stage.reaches)

    # === 便捷入口 ===

    def extract(
        self,
        package_path: str | Path,
        sheet_name: str,
        row: int,
        column: int,
    ) -> ExtractedImage:
        """提取目标单元格处的原始图片（行列为0基）"""
        return self.execute(self.create_job(package_path, sheet_name, row, column))

    def extract_to(
        self,
        package_path: str | Path,
        sheet_name: str,
        row: int,
        column: int,
        save_path: str | Path,
        output_format: str | None = None,
    ) -> Path:
        """提取并写出到文件，返回写出的路径"""
        image = self.extract(package_path, sheet_name, row, column)
        return self.writer.write(image, Path(save_path), output_format)

    def list_anchors(self, package_path: str | Path, sheet_name: str) -> list[Anchor]:
        """列出工作表绘图中的全部双单元格锚点"""
        with self.store.opened(Path(package_path)) as package:
            sheet_part = self.sheet_locator.find_sheet_part(package, sheet_name)
            drawing_part = self.drawing_locator.find_drawing_part(package, sheet_part)
            drawing_root = self.store.read_xml(package, drawing_part)
            return list(self.anchor_matcher.iter_anchors(drawing_root))


def get_image(
    package_path: str | Path,
    sheet_name: str,
    row: int,
    column: int,
    save_path: str | Path | None = None,
    output_format: str | None = None,
    config: RuntimeConfig | None = None,
) -> ExtractedImage:
    """
    获取指定单元格处的原始图片

    Args:
        package_path: xlsx 文件路径
        sheet_name: 工作表名称（精确匹配）
        row: 行索引（0基）
        column: 列索引（0基）
        save_path: 给定时同时写出到该路径
        output_format: 输出格式（默认按 save_path 扩展名，与原生一致时原样写出）

    Returns:
        ExtractedImage
    """
    extractor = CellImageExtractor(config)
    image = extractor.extract(package_path, sheet_name, row, column)
    if save_path is not None:
        extractor.writer.write(image, Path(save_path), output_format)
    return image
