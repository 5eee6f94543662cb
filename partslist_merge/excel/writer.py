from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.utils import get_column_letter

"""Local result sink.

Writes the assembled rows into `<output_dir>/<name>.xlsx`. When a template
workbook is configured it is copied first and the rows are written over its
first sheet. The workbook is built under a temporary name in the output
directory and renamed onto `<name>.xlsx` only once it is complete.
Only values, column widths and row heights are applied; colouring,
checkboxes and conditional formats belong to the presentation layer.
"""

__all__ = [
    "LocalWorkbookSink",
]

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Sheet1"
DEFAULT_OUTPUT_DIR = Path("./output")

# 設定値はピクセル単位 (openpyxl の列幅は文字数、行高はポイント)
PIXELS_PER_CHAR = 7.0
POINTS_PER_PIXEL = 0.75


class LocalWorkbookSink:
    def __init__(self, output_dir: Path | None = None, template_path: Path | None = None) -> None:
        self.output_dir = output_dir or DEFAULT_OUTPUT_DIR
        self.template_path = template_path

    def publish(
        self,
        name: str,
        rows: list[list[Any]],
        column_widths: dict[str, int] | None = None,
        row_height: int | None = None,
    ) -> str:
        """Persist rows as a workbook and return its path as a string."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        dest = self.output_dir / f"{name}.xlsx"
        fd, tmp_name = tempfile.mkstemp(prefix=f".{name}.", suffix=".xlsx", dir=self.output_dir)
        os.close(fd)
        tmp = Path(tmp_name)
        try:
            self._write(tmp, rows, column_widths, row_height)
        except Exception:
            # 書きかけのファイルは残さない
            tmp.unlink(missing_ok=True)
            raise
        os.replace(tmp, dest)
        logger.debug("published %s", dest)
        return str(dest)

    def _write(
        self,
        path: Path,
        rows: list[list[Any]],
        column_widths: dict[str, int] | None,
        row_height: int | None,
    ) -> None:
        df = pd.DataFrame(rows)

        if self.template_path is not None and self.template_path.exists():
            shutil.copyfile(self.template_path, path)
            with pd.ExcelFile(path, engine="openpyxl") as xls:
                sheet_name = str(xls.sheet_names[0])
            writer = pd.ExcelWriter(path, engine="openpyxl", mode="a", if_sheet_exists="overlay")
        else:
            if self.template_path is not None:
                logger.warning("template not found, writing plain workbook: %s", self.template_path)
            sheet_name = DEFAULT_SHEET_NAME
            writer = pd.ExcelWriter(path, engine="openpyxl")

        with writer:
            df.to_excel(writer, sheet_name=sheet_name, header=False, index=False)
            ws = writer.sheets[sheet_name]
            for letter, width in (column_widths or {}).items():
                ws.column_dimensions[letter].width = round(width / PIXELS_PER_CHAR, 2)
            if row_height:
                # ヘッダ行は除く
                for idx in range(2, len(rows) + 1):
                    ws.row_dimensions[idx].height = row_height * POINTS_PER_PIXEL
            logger.debug(
                "wrote %d rows x %s cols to %s",
                len(rows),
                get_column_letter(max(df.shape[1], 1)),
                path,
            )
