"""
JSON utilities backed by orjson
===============================

Thin str-returning wrappers around orjson used to serialize n-gram reports.
orjson emits bytes, handles dataclasses and enums natively and keeps float
formatting stable, so the same report always serializes to the same text.
"""

import dataclasses
import orjson
from typing import Any, Optional


def _default(obj: Any) -> Any:
    """Fallback for types orjson does not serialize on its own."""
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def dumps(obj: Any, indent: Optional[int] = None, sort_keys: bool = False) -> str:
    """
    Serialize obj to a JSON string.

    Args:
        obj: Object to serialize (reports expose ``to_dict``)
        indent: Any non-None value pretty prints with two spaces
        sort_keys: Sort object keys

    Returns:
        JSON string
    """
    option = orjson.OPT_NON_STR_KEYS
    if indent is not None:
        option |= orjson.OPT_INDENT_2
    if sort_keys:
        option |= orjson.OPT_SORT_KEYS
    if hasattr(obj, "to_dict"):
        obj = obj.to_dict()
    return orjson.dumps(obj, default=_default, option=option).decode("utf-8")


def dump(obj: Any, fp, indent: Optional[int] = None) -> None:
    """Serialize obj and write it to a text file-like object."""
    fp.write(dumps(obj, indent=indent))
    fp.write("\n")

