"""
图片输出 - 将提取结果写到文件

职责：
1. 目标格式与原生格式一致（或未指定）时原样写出字节
2. 否则用 Pillow 解码后转码为目标格式
3. 矢量格式（EMF/WMF/SVG）不做转码

测试要点：
- test_write_native_bytes: 原样写出
- test_convert_png_to_jpeg: 转码
- test_vector_conversion_rejected: 矢量格式转码报错
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path, PurePosixPath

from PIL import Image

from ..config import RuntimeConfig, get_config
from ..interfaces import IImageWriter, ImageWriteError
from ..models import ExtractedImage
from ..ooxml import format_from_suffix

logger = logging.getLogger(__name__)

VECTOR_FORMATS = {"EMF", "WMF", "SVG"}

FORMAT_ALIASES = {
    "JPG": "JPEG",
    "JPE": "JPEG",
    "TIF": "TIFF",
    "DIB": "BMP",
}

FORMAT_SUFFIXES = {
    "JPEG": ".jpg",
    "TIFF": ".tif",
}


def normalize_format(fmt: str) -> str:
    fmt = fmt.strip().lstrip(".").upper()
    return FORMAT_ALIASES.get(fmt, fmt)


def default_filename(image: ExtractedImage, output_format: str | None = None) -> str:
    """未指定输出路径时的文件名：媒体文件名，扩展名随输出格式"""
    name = PurePosixPath(image.filename)
    if not output_format:
        return name.name
    fmt = normalize_format(output_format)
    if fmt == image.format:
        return name.name
    return name.with_suffix(FORMAT_SUFFIXES.get(fmt, "." + fmt.lower())).name


class ImageWriter(IImageWriter):
    """图片输出实现"""

    def __init__(self, config: RuntimeConfig | None = None):
        config = config or get_config()
        self.jpeg_quality = config.output.jpeg_quality
        self.overwrite = config.output.overwrite

    def target_format(
        self,
        image: ExtractedImage,
        save_path: Path,
        output_format: str | None = None,
    ) -> str | None:
        """确定输出格式：显式指定 > 保存路径扩展名 > 原生格式"""
        if output_format:
            return normalize_format(output_format)
        return format_from_suffix(save_path.name) or image.format

    def write(
        self,
        image: ExtractedImage,
        save_path: Path,
        output_format: str | None = None,
    ) -> Path:
        save_path = Path(save_path)
        if save_path.exists() and not self.overwrite:
            raise ImageWriteError(f"输出文件已存在: {save_path}")

        fmt = self.target_format(image, save_path, output_format)
        if fmt is None or fmt == image.format:
            data = image.data
        else:
            data = self.convert(image, fmt)

        save_path.parent.mkdir(parents=True, exist_ok=True)
        save_path.write_bytes(data)
        logger.info(f"图片已写出: {save_path} ({fmt or '原始'}, {len(data)} bytes)")
        return save_path

    def convert(self, image: ExtractedImage, fmt: str) -> bytes:
        """用 Pillow 转码"""
        if image.format in VECTOR_FORMATS or fmt in VECTOR_FORMATS:
            raise ImageWriteError(f"不支持矢量格式转码: {image.format} -> {fmt}")

        buf = BytesIO()
        try:
            with Image.open(BytesIO(image.data)) as im:
                im.load()
                out = im
                if fmt == "JPEG" and im.mode not in ("RGB", "L", "CMYK"):
                    out = im.convert("RGB")
                save_kwargs = {"quality": self.jpeg_quality} if fmt == "JPEG" else {}
                out.save(buf, format=fmt, **save_kwargs)
        except (OSError, ValueError, KeyError) as e:
            raise ImageWriteError(f"图片转码失败: {image.filename} -> {fmt}: {e}") from e
        return buf.getvalue()
