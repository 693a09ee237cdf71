"""
RICE Export Module
==================

Markdown and tabular renderings of a ranked backlog.
"""

from .exporter import (
    CSV_COLUMNS,
    build_exports,
    build_markdown,
    build_rows,
    format_number,
    rows_to_csv,
)

__all__ = [
    "CSV_COLUMNS",
    "build_exports",
    "build_markdown",
    "build_rows",
    "format_number",
    "rows_to_csv",
]
