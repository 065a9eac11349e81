"""CSV readers for step and value tables.

Step tables have a header with ``weight``, ``value`` and ``sigma`` columns
(extra columns are ignored). Value tables only need ``value`` and ``sigma``.
Empty cells and ``NA``/``nan`` mark missing values.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from ageplateau.domain.steps import StepSequence

_MISSING = {"", "na", "nan", "null", "none"}


def _parse_cell(raw: str | None, *, column: str, line: int) -> float:
    text = (raw or "").strip()
    if text.lower() in _MISSING:
        return float("nan")
    try:
        return float(text)
    except ValueError as exc:
        raise ValueError(f"Invalid number {text!r} in column {column!r} on line {line}") from exc


def _read_columns(path: Path, required: tuple[str, ...]) -> dict[str, NDArray[np.float64]]:
    columns: dict[str, list[float]] = {name: [] for name in required}
    with open(path, newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"Empty or invalid CSV file: {path}")

        header = {name.strip().lower(): name for name in reader.fieldnames}
        missing = set(required) - set(header)
        if missing:
            raise ValueError(f"Missing required columns: {sorted(missing)}")

        for row in reader:
            for name in required:
                columns[name].append(
                    _parse_cell(row.get(header[name]), column=name, line=reader.line_num)
                )
    return {name: np.asarray(vals, dtype=np.float64) for name, vals in columns.items()}


def read_step_table(
    path: Path | str,
    *,
    hide: Iterable[int] = (),
    omit: Iterable[int] = (),
) -> StepSequence:
    """Read a ``weight,value,sigma`` CSV into a ``StepSequence``."""
    cols = _read_columns(Path(path), ("weight", "value", "sigma"))
    return StepSequence.from_arrays(
        cols["weight"], cols["value"], cols["sigma"], hide=hide, omit=omit
    )


def read_value_table(path: Path | str) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Read a ``value,sigma`` CSV into (values, sigmas) arrays."""
    cols = _read_columns(Path(path), ("value", "sigma"))
    return cols["value"], cols["sigma"]


__all__ = ["read_step_table", "read_value_table"]
