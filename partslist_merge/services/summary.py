from __future__ import annotations

from ..models.processing_result import RunResult

"""Summary line rendering.

Format (one line, space separated key=value pairs):
SUMMARY files={processed} rows={rows} name={output name} output={path or -}
"""


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a successful run.

    Examples:
        >>> r = RunResult(success=True, url="out/J1_P01_20240101-0000.xlsx",
        ...               processed_files=2, total_rows=5, name="J1_P01_20240101-0000")
        >>> render_summary_line(r)
        'SUMMARY files=2 rows=5 name=J1_P01_20240101-0000 output=out/J1_P01_20240101-0000.xlsx'
    """
    return (
        f"SUMMARY files={result.processed_files} "
        f"rows={result.total_rows} "
        f"name={result.name or '-'} "
        f"output={result.url or '-'}"
    )
