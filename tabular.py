"""Serialize tabular data into delimited text for gnuplot here-documents.

Several datasets can be laterally concatenated into one block. Rows are
aligned by position and run to the longest dataset; shorter datasets
contribute empty cells once they run out, which gnuplot reads as missing
values::

    a,b,c
    1,2,10
    3,4,
"""
from __future__ import annotations

import numbers
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np
import pandas as pd

DEFAULT_PRECISION = 10


@runtime_checkable
class TabularData(Protocol):
    """Any object that knows how to render itself as delimited text."""

    def to_tabular_text(self, separator: str = ",", precision: int = DEFAULT_PRECISION) -> str:
        ...


def format_value(value: Any, precision: int = DEFAULT_PRECISION) -> str:
    """Format a single cell; missing values become empty cells."""
    if value is None:
        return ""
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "1" if value else "0"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        return format(float(value), f".{precision}g")
    return str(value)


def to_csv_string(data: Any, separator: str = ",", precision: int = DEFAULT_PRECISION) -> str:
    """Convert one or more datasets into a single delimited string.

    ``data`` may be:
      - a DataFrame
      - a sequence of DataFrames, concatenated side by side
      - a mapping of key -> DataFrame; columns are named ``<key>_<column>``
      - a string, taken as already-delimited text
      - any ``TabularData`` implementation
      - anything ``pandas.DataFrame`` accepts (dict of columns, records, ...)
    """
    if isinstance(data, pd.DataFrame):
        return _join_frames([("", data)], separator, precision)
    if isinstance(data, str):
        return _normalize_lines(data)
    if isinstance(data, Mapping) and data and all(isinstance(v, pd.DataFrame) for v in data.values()):
        return _join_frames([(str(k), df) for k, df in data.items()], separator, precision)
    if isinstance(data, Sequence) and all(isinstance(v, pd.DataFrame) for v in data):
        return _join_frames([("", df) for df in data], separator, precision)
    if isinstance(data, TabularData) and callable(data.to_tabular_text):
        return _normalize_lines(data.to_tabular_text(separator=separator, precision=precision))
    return _join_frames([("", pd.DataFrame(data))], separator, precision)


def _normalize_lines(text: str) -> str:
    # CRLF/CR line endings become "\n"; leading and trailing blank lines are dropped.
    return text.replace("\r\n", "\n").replace("\r", "\n").strip("\n")


def header_columns(text: str, separator: str = ",") -> list[str]:
    """Return the column names from the first line of delimited text."""
    first_line = text.split("\n", 1)[0].rstrip("\r")
    if not first_line:
        return []
    return first_line.split(separator)


def _join_frames(
    named_frames: list[tuple[str, pd.DataFrame]],
    separator: str,
    precision: int,
) -> str:
    if not named_frames:
        return ""

    header: list[str] = []
    for prefix, df in named_frames:
        header.extend(f"{prefix}_{col}" if prefix else str(col) for col in df.columns)
    lines = [separator.join(header)]

    rows = [list(df.itertuples(index=False, name=None)) for _, df in named_frames]
    longest = max(len(frame_rows) for frame_rows in rows)

    for i in range(longest):
        cells: list[str] = []
        for (_, df), frame_rows in zip(named_frames, rows):
            if i < len(frame_rows):
                cells.extend(format_value(v, precision) for v in frame_rows[i])
            else:
                cells.extend("" for _ in df.columns)
        lines.append(separator.join(cells))

    return "\n".join(lines).rstrip("\r\n")
