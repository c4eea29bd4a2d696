"""
包模型 - 解压后的包、关系记录、工作表声明
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class Package(BaseModel):
    """解压后的包（单次提取独占）"""
    source_path: Path = Field(..., description="源 xlsx 路径")
    work_dir: Path = Field(..., description="私有解压目录")

    model_config = {"arbitrary_types_allowed": True}

    @property
    def is_open(self) -> bool:
        return self.work_dir.exists()


class Relationship(BaseModel):
    """关系记录（来自某部件的 .rels）"""
    source_part: str
    rel_id: str
    target: str = Field(..., description="解析后的包内路径（外部链接保留原值）")
    rel_type: str = ""
    target_mode: str = "Internal"

    @property
    def is_external(self) -> bool:
        return self.target_mode.lower() == "external"


class SheetRef(BaseModel):
    """工作表声明"""
    index: int
    name: str
    rel_id: str
    state: str = "visible"
