"""
命令行入口 - 提取 xlsx 指定单元格处的图片

用法：
  cellpic book.xlsx --sheet Sheet1 --cell C3 -o out.png
  cellpic book.xlsx --sheet Sheet1 --row 2 --col 2 --format JPEG -o out.jpg
  cellpic book.xlsx --sheet Sheet1 --list-anchors
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import get_config, reload_config
from .interfaces import CellPicError
from .models import CellRef
from .pipeline import CellImageExtractor
from .pipeline.image_writer import default_filename


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="cellpic",
        description="Extract the picture anchored at a cell of an .xlsx worksheet.",
    )
    ap.add_argument("package", help="source .xlsx file")
    ap.add_argument("--sheet", required=True, help="worksheet name (exact match)")
    ap.add_argument("--cell", default="", help="A1-style cell, e.g. C3")
    ap.add_argument("--row", type=int, default=None, help="0-based row index")
    ap.add_argument("--col", type=int, default=None, help="0-based column index")
    ap.add_argument("-o", "--out", default="", help="output path (default: media file name)")
    ap.add_argument("--format", default="", help="output format, e.g. PNG/JPEG")
    ap.add_argument("--list-anchors", action="store_true", help="print anchors as JSON and exit")
    ap.add_argument("--config", default="", help="runtime config YAML")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def _target_cell(ap: argparse.ArgumentParser, args: argparse.Namespace) -> CellRef:
    if args.cell:
        if args.row is not None or args.col is not None:
            ap.error("--cell cannot be combined with --row/--col")
        try:
            return CellRef.from_a1(args.cell)
        except ValueError as e:
            ap.error(str(e))
    if args.row is None or args.col is None:
        ap.error("either --cell or both --row and --col are required")
    if args.row < 0 or args.col < 0:
        ap.error("--row/--col must be >= 0")
    return CellRef(row=args.row, column=args.col)


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    config = reload_config(args.config) if args.config else get_config()
    logging.basicConfig(
        level="DEBUG" if args.verbose else config.logging.log_level.upper(),
        format=config.logging.log_format,
    )

    extractor = CellImageExtractor(config)

    try:
        if args.list_anchors:
            anchors = extractor.list_anchors(args.package, args.sheet)
            out = [
                {
                    "index": a.index,
                    "from": CellRef(row=a.start.row, column=a.start.column).to_a1(),
                    "to": CellRef(row=a.end.row, column=a.end.column).to_a1(),
                    "embed": a.embed_rel_id,
                    "name": a.name,
                }
                for a in anchors
            ]
            print(json.dumps(out, ensure_ascii=False, indent=2))
            return 0

        cell = _target_cell(ap, args)
        image = extractor.extract(args.package, args.sheet, cell.row, cell.column)
        fmt = args.format or None
        save_path = Path(args.out) if args.out else Path(default_filename(image, fmt))
        written = extractor.writer.write(image, save_path, fmt)
    except CellPicError as e:
        print(f"{e.kind.value}: {e}", file=sys.stderr)
        return 1

    print(str(written))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
