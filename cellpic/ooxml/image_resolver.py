"""
图片解析器 - embed 关系ID → 媒体部件

基于绘图部件自身的 .rels 解析；原生格式按扩展名推断并原样传递，不做像素解码。
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from ..interfaces import CorruptPackageError, IImageResolver
from ..models import MediaRef, Package
from .package_store import PackageStore
from .relationships import RelationshipResolver

logger = logging.getLogger(__name__)

MEDIA_FORMATS: dict[str, str] = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".jpe": "JPEG",
    ".gif": "GIF",
    ".bmp": "BMP",
    ".dib": "BMP",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".webp": "WEBP",
    ".emf": "EMF",
    ".wmf": "WMF",
    ".svg": "SVG",
}


def format_from_suffix(path: str) -> str | None:
    """扩展名 → 格式标记（未知返回None）"""
    return MEDIA_FORMATS.get(PurePosixPath(path).suffix.lower())


class ImageResolver(IImageResolver):
    """图片解析器实现"""

    def __init__(self, store: PackageStore, resolver: RelationshipResolver):
        self.store = store
        self.resolver = resolver

    def resolve_media(self, package: Package, drawing_part: str, rel_id: str) -> MediaRef:
        part = self.resolver.resolve(package, drawing_part, rel_id)
        if not self.store.has_part(package, part):
            raise CorruptPackageError(f"媒体文件不存在: {part}")
        media = MediaRef(part_path=part, format=format_from_suffix(part))
        logger.debug("媒体 %s[%s] -> %s (%s)", drawing_part, rel_id, part, media.format)
        return media
