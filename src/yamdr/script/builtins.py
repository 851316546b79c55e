"""Builtins table and RestrictedPython guards exposed to document scripts.

Scripts are compiled with RestrictedPython, which rejects names and
attributes starting with an underscore and routes attribute access,
item access, iteration and writes through the guards below. The builtins
table is an allowlist of pure builtins plus exception types, so scripts
get no file, network or import access.
"""

from __future__ import annotations

import builtins
import operator
from types import MappingProxyType
from typing import Any

from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safer_getattr,
)

_ALLOWED = (
    # Values and containers
    "bool", "bytes", "complex", "dict", "float", "frozenset", "int", "list",
    "range", "set", "slice", "str", "tuple",
    # Functions
    "abs", "all", "any", "ascii", "bin", "callable", "chr", "divmod",
    "enumerate", "filter", "format", "hasattr", "hash", "hex", "isinstance",
    "iter", "len", "map", "max", "min", "next", "oct", "ord", "pow", "repr",
    "reversed", "round", "sorted", "sum", "zip",
    # Exceptions
    "ArithmeticError", "AssertionError", "AttributeError", "Exception",
    "IndexError", "KeyError", "LookupError", "NameError",
    "NotImplementedError", "OverflowError", "RuntimeError", "StopIteration",
    "TypeError", "ValueError", "ZeroDivisionError",
)

# Frame and code introspection reachable without an underscore.
_INTROSPECTION = frozenset({
    "ag_code", "ag_frame", "cr_code", "cr_frame", "f_back", "f_builtins",
    "f_code", "f_globals", "f_locals", "gi_code", "gi_frame", "gi_yieldfrom",
    "tb_frame", "tb_next",
})

_INPLACE = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
    "@=": operator.imatmul,
    "<<=": operator.ilshift,
    ">>=": operator.irshift,
    "&=": operator.iand,
    "^=": operator.ixor,
    "|=": operator.ior,
}

_MISSING = object()


def guarded_getattr(obj: Any, name: str, *default: Any) -> Any:
    """``getattr`` for scripts: no private, introspection or format attributes."""
    if name in _INTROSPECTION:
        raise AttributeError(f"{name!r} is not available to scripts")
    if name == "format_map" and (obj is str or isinstance(obj, str)):
        raise NotImplementedError("Using format_map() on a str is not safe.")
    if name == "format" and obj is str:
        raise NotImplementedError("Using format() on a str is not safe.")
    value = safer_getattr(obj, name, _MISSING)
    if value is _MISSING:
        if default:
            return default[0]
        raise AttributeError(f"{type(obj).__name__!r} object has no attribute {name!r}")
    return value


def _inplacevar(op: str, target: Any, value: Any) -> Any:
    return _INPLACE[op](target, value)


def _apply(func: Any, *args: Any, **kwargs: Any) -> Any:
    return func(*args, **kwargs)


SAFE_BUILTINS: MappingProxyType[str, object] = MappingProxyType(
    {name: getattr(builtins, name) for name in _ALLOWED}
    | {
        "getattr": guarded_getattr,
        # Hooks called by RestrictedPython-compiled code.
        "_getattr_": guarded_getattr,
        "_getitem_": default_guarded_getitem,
        "_getiter_": default_guarded_getiter,
        "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
        "_unpack_sequence_": guarded_unpack_sequence,
        "_write_": full_write_guard,
        "_inplacevar_": _inplacevar,
        "_apply_": _apply,
    }
)

__all__ = ["SAFE_BUILTINS", "guarded_getattr"]
