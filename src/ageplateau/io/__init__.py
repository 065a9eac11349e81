"""File readers for step tables."""

from ageplateau.io.step_table import read_step_table, read_value_table

__all__ = ["read_step_table", "read_value_table"]
