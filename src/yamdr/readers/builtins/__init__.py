"""Built-in block readers.

Default registration order: Script, Code, Chart, Graph.
"""

from yamdr.readers.builtins.chart import ChartBlock, ChartBlockReader
from yamdr.readers.builtins.code import CodeBlock, CodeBlockReader
from yamdr.readers.builtins.graph import GraphBlock, GraphBlockReader
from yamdr.readers.builtins.script import (
    DataBlock,
    DynamicChartBlock,
    GlobalsBlock,
    InlineExpression,
    ScriptBlock,
    ScriptBlockReader,
    TableBlock,
)

__all__ = [
    "ChartBlock",
    "ChartBlockReader",
    "CodeBlock",
    "CodeBlockReader",
    "DataBlock",
    "DynamicChartBlock",
    "GlobalsBlock",
    "GraphBlock",
    "GraphBlockReader",
    "InlineExpression",
    "ScriptBlock",
    "ScriptBlockReader",
    "TableBlock",
]
