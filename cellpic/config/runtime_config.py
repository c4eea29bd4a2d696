"""
运行期配置 - 读取 config/runtime.yaml

职责：
- 加载包校验/锚点策略/输出/日志等运行参数
- 提供环境变量覆盖机制（CELLPIC_ 前缀，__ 分隔嵌套字段）
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

DEFAULT_CONFIG_PATH = Path("config/runtime.yaml")


class PackageConfig(BaseModel):
    """包读取配置"""

    allowed_exts: list[str] = Field(default_factory=lambda: [".xlsx"])
    check_signature: bool = True
    temp_dir: str | None = None  # None 表示系统临时目录
    work_dir_prefix: str = "cellpic_"


class AnchorConfig(BaseModel):
    """锚点匹配配置"""

    corner_policy: Literal["normalize", "strict"] = "normalize"
    pictures_only: bool = False


class OutputConfig(BaseModel):
    """输出配置"""

    jpeg_quality: int = Field(95, ge=1, le=100)
    overwrite: bool = True


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class RuntimeConfig(BaseSettings):
    """运行期配置（优先级：环境变量 > YAML/构造参数 > 默认值）"""

    package: PackageConfig = Field(default_factory=PackageConfig)
    anchors: AnchorConfig = Field(default_factory=AnchorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "CELLPIC_",
        "env_nested_delimiter": "__",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置（文件不存在时返回默认配置）"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", data)

        config = cls(
            package=cls._extract(runtime_opts, "package"),
            anchors=cls._extract(runtime_opts, "anchors"),
            output=cls._extract(runtime_opts, "output"),
            logging=cls._extract(runtime_opts, "logging"),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（支持 {default: x} 写法）"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if self.package.temp_dir:
            temp_dir = Path(self.package.temp_dir)
            if not temp_dir.is_absolute():
                self.package.temp_dir = str((base_dir / temp_dir).resolve())

    def normalized_exts(self) -> set[str]:
        """允许的扩展名（小写，带点）"""
        exts = set()
        for ext in self.package.allowed_exts:
            ext = ext.strip().lower()
            if ext and not ext.startswith("."):
                ext = "." + ext
            if ext:
                exts.add(ext)
        return exts


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
