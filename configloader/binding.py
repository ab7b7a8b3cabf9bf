"""Binding of parsed config trees onto caller-defined types.

Keys in the tree are matched to field names (or aliases) without regard to
case, then pydantic validates and coerces the result.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, PydanticUserError, TypeAdapter, ValidationError

from .errors import BindError

T = TypeVar("T")

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


def _field_table(tp: Any) -> Optional[Dict[str, Tuple[str, Any]]]:
    """Map lower-cased field name/alias -> (key pydantic expects, field type)."""
    if inspect.isclass(tp) and issubclass(tp, BaseModel):
        table = {}
        for name, field in tp.model_fields.items():
            key = field.alias or name
            table[name.lower()] = (key, field.annotation)
            table[key.lower()] = (key, field.annotation)
        return table
    if inspect.isclass(tp) and dataclasses.is_dataclass(tp):
        hints = get_type_hints(tp)
        return {f.name.lower(): (f.name, hints.get(f.name, Any)) for f in dataclasses.fields(tp)}
    return None


def match_keys(value: Any, annotation: Any) -> Any:
    """Rename keys of ``value`` to the field names ``annotation`` declares."""
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin in (Union, types.UnionType):
        for arg in args:
            if arg is not type(None) and (_field_table(arg) is not None or get_origin(arg) is not None):
                return match_keys(value, arg)
        return value

    if isinstance(value, list):
        if origin in _SEQUENCE_ORIGINS and args:
            return [match_keys(item, args[0]) for item in value]
        return value

    if not isinstance(value, dict):
        return value

    if origin in (dict, Mapping) and len(args) == 2:
        return {k: match_keys(v, args[1]) for k, v in value.items()}

    table = _field_table(annotation)
    if table is None:
        return value

    matched = {}
    for k, v in value.items():
        entry = table.get(str(k).lower())
        if entry is None:
            matched[k] = v
            continue
        key, field_type = entry
        matched[key] = match_keys(v, field_type)
    return matched


def bind(tree: Mapping[str, Any], target: Type[T]) -> T:
    """Bind ``tree`` onto ``target`` (pydantic model, dataclass, or any pydantic-supported type).

    Raises:
        BindError: If the target type is unsupported or validation fails. ``fields``
            lists the dotted locations pydantic reported.
    """
    try:
        adapter = TypeAdapter(target)
    except PydanticUserError as e:
        raise BindError(f"Cannot bind config onto {target!r}: {e}") from e

    try:
        return adapter.validate_python(match_keys(dict(tree), target))
    except ValidationError as e:
        fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        raise BindError(f"Config does not match {getattr(target, '__name__', target)}: {e}", fields=fields) from e
