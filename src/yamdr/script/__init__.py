"""Embedded script engine for Script, DynamicTable, DynamicChart and Data blocks."""

from yamdr.script.dataset import Dataset
from yamdr.script.runtime import (
    OUTPUT_PREFIX,
    ScriptLine,
    ScriptRuntime,
    is_output_line,
    strip_output,
)

__all__ = [
    "OUTPUT_PREFIX",
    "Dataset",
    "ScriptLine",
    "ScriptRuntime",
    "is_output_line",
    "strip_output",
]
