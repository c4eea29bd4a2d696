"""
包存储 - xlsx 解压与部件读取

职责：
- 校验源文件（存在性/扩展名/ZIP签名）
- 解压到独立的临时工作目录（每次调用唯一，互不冲突）
- 按包内路径读取部件字节/XML
- 无条件清理工作目录

测试要点：
- test_open_missing_file: 文件不存在
- test_open_wrong_extension: 扩展名不符
- test_open_bad_signature: 签名不符
- test_read_missing_part: 部件不存在
- test_opened_cleans_up_on_error: 异常时清理
"""

from __future__ import annotations

import logging
import posixpath
import shutil
import tempfile
import zipfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from xml.etree import ElementTree as ET

from ..config import RuntimeConfig, get_config
from ..interfaces import (
    CorruptPackageError,
    IPackageStore,
    PackageNotFoundError,
    UnsupportedFormatError,
)
from ..models import Package

logger = logging.getLogger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"

# 解压期间的底层异常（含损坏的 deflate 流、不支持的压缩方式与加密成员）
EXTRACT_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    RuntimeError,
    EOFError,
    OSError,
    ValueError,
)


def normalize_part_path(part_path: str) -> str:
    """包内路径归一化；越出包根时抛 CorruptPackageError"""
    path = part_path.replace("\\", "/").lstrip("/")
    normalized = posixpath.normpath(path) if path else ""
    if normalized in ("", ".") or normalized == ".." or normalized.startswith("../"):
        raise CorruptPackageError(f"非法部件路径: {part_path}")
    return normalized


class PackageStore(IPackageStore):
    """基于临时目录的包存储实现"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self.allowed_exts = self.config.normalized_exts()
        self.check_signature = self.config.package.check_signature
        self.temp_dir = self.config.package.temp_dir
        self.prefix = self.config.package.work_dir_prefix

    def _validate_source(self, package_path: Path) -> None:
        if not package_path.exists() or not package_path.is_file():
            raise PackageNotFoundError(f"文件不存在: {package_path}")
        if package_path.suffix.lower() not in self.allowed_exts:
            raise UnsupportedFormatError(
                f"不支持的文件类型: {package_path.suffix or '(无扩展名)'}，"
                f"仅支持 {', '.join(sorted(self.allowed_exts))}"
            )
        if self.check_signature:
            with open(package_path, "rb") as f:
                head = f.read(len(ZIP_SIGNATURE))
            if head != ZIP_SIGNATURE:
                raise UnsupportedFormatError(f"文件签名不是ZIP容器: {package_path}")

    def open(self, package_path: Path) -> Package:
        """解压到新的临时工作目录"""
        package_path = Path(package_path)
        self._validate_source(package_path)

        if self.temp_dir:
            Path(self.temp_dir).mkdir(parents=True, exist_ok=True)
        work_dir = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.temp_dir))

        extracted = False
        try:
            with zipfile.ZipFile(package_path, "r") as zf:
                zf.extractall(work_dir)
            extracted = True
        except EXTRACT_ERRORS as e:
            raise CorruptPackageError(f"解压失败: {package_path}: {e}") from e
        finally:
            if not extracted:
                shutil.rmtree(work_dir, ignore_errors=True)

        logger.debug("已解压 %s -> %s", package_path, work_dir)
        return Package(source_path=package_path, work_dir=work_dir)

    def _part_file(self, package: Package, part_path: str) -> Path:
        return package.work_dir.joinpath(*normalize_part_path(part_path).split("/"))

    def has_part(self, package: Package, part_path: str) -> bool:
        try:
            return self._part_file(package, part_path).is_file()
        except CorruptPackageError:
            return False

    def read_part(self, package: Package, part_path: str) -> bytes:
        """读取部件原始字节"""
        path = self._part_file(package, part_path)
        if not path.is_file():
            raise CorruptPackageError(f"部件不存在: {part_path}")
        return path.read_bytes()

    def read_xml(self, package: Package, part_path: str) -> ET.Element:
        """读取并解析XML部件"""
        data = self.read_part(package, part_path)
        try:
            return ET.fromstring(data)
        except ET.ParseError as e:
            raise CorruptPackageError(f"XML格式错误: {part_path}: {e}") from e

    def close(self, package: Package) -> None:
        """删除工作目录"""
        shutil.rmtree(package.work_dir, ignore_errors=True)
        logger.debug("已清理工作目录: %s", package.work_dir)

    @contextmanager
    def opened(self, package_path: Path) -> Iterator[Package]:
        """with 形式：无论成功失败都清理工作目录"""
        package = self.open(package_path)
        try:
            yield package
        finally:
            self.close(package)
