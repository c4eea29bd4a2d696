"""
锚点模型 - 目标单元格与绘图锚点

坐标约定：行列均为0基（与 xdr:from/xdr:to 中的 col/row 一致）
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

CELL_REF_RE = re.compile(r"^\$?([A-Z]+)\$?(\d+)$", re.I)


class CellRef(BaseModel):
    """目标单元格（0基）"""
    row: int = Field(..., ge=0, description="行索引(0基)")
    column: int = Field(..., ge=0, description="列索引(0基)")

    model_config = {"frozen": True}

    @classmethod
    def from_a1(cls, ref: str) -> CellRef:
        """A1记法(1基) → 0基坐标，如 "C3" → row=2, column=2"""
        m = CELL_REF_RE.match(ref.strip())
        if not m:
            raise ValueError(f"invalid cell ref: {ref}")
        col = 0
        for ch in m.group(1).upper():
            col = col * 26 + (ord(ch) - ord("A") + 1)
        row = int(m.group(2))
        if row < 1:
            raise ValueError(f"invalid cell ref: {ref}")
        return cls(row=row - 1, column=col - 1)

    def to_a1(self) -> str:
        letters = ""
        n = self.column + 1
        while n > 0:
            n, rem = divmod(n - 1, 26)
            letters = chr(ord("A") + rem) + letters
        return f"{letters}{self.row + 1}"


class AnchorMarker(BaseModel):
    """锚点角标（xdr:from / xdr:to）"""
    column: int
    row: int


class Anchor(BaseModel):
    """双单元格锚点（闭区间矩形）"""
    index: int = Field(..., description="在绘图部件中的文档顺序(0基)")
    start: AnchorMarker = Field(..., description="xdr:from")
    end: AnchorMarker = Field(..., description="xdr:to")
    embed_rel_id: str | None = Field(None, description="a:blip 的 r:embed")
    name: str | None = Field(None, description="cNvPr name")

    @property
    def is_inverted(self) -> bool:
        """from 在任一轴上大于 to"""
        return self.start.column > self.end.column or self.start.row > self.end.row

    def bounds(self) -> tuple[int, int, int, int]:
        """按轴归一化后的 (min_col, min_row, max_col, max_row)"""
        return (
            min(self.start.column, self.end.column),
            min(self.start.row, self.end.row),
            max(self.start.column, self.end.column),
            max(self.start.row, self.end.row),
        )

    def contains(self, cell: CellRef) -> bool:
        """判断是否覆盖目标单元格（边界包含）"""
        min_col, min_row, max_col, max_row = self.bounds()
        return min_col <= cell.column <= max_col and min_row <= cell.row <= max_row


class MatchedAnchor(BaseModel):
    """匹配结果"""
    anchor: Anchor
    embed_rel_id: str

    @property
    def index(self) -> int:
        return self.anchor.index
