"""Pure runtime helpers used by the evaluator and renderer.

None of these close over engine state; they use only their arguments.

Thread-Safety:
All functions are stateless and safe for concurrent use.

"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from zebar.environment.exceptions import EvalError, ErrorCode, UndefinedError
from zebar.template.bindings import BindingsContext
from zebar.template.markup import Placeholder, Spans

_MISSING = object()


def lookup(bindings: BindingsContext, name: str, *, strict: bool = True) -> Any:
    """Resolve a name against the bindings.

    Order: opaque (as a :class:`Placeholder`), variables, string
    substitutions.

    Raises:
        UndefinedError: Unknown name in strict mode. Lenient mode returns
            None instead.
    """
    if name in bindings.opaque:
        return Placeholder(name)
    value = bindings.variables.get(name, _MISSING)
    if value is not _MISSING:
        return value
    value = bindings.strings.get(name, _MISSING)
    if value is not _MISSING:
        return value
    if strict:
        raise UndefinedError(name, available_names=bindings.names())
    return None


def is_number(value: Any) -> bool:
    """int or float, but not bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """Truthiness used by conditions and logical operators.

    Python truthiness, except that placeholders are always true.
    """
    if isinstance(value, (Placeholder, Spans)):
        return True
    return bool(value)


def strict_equals(left: Any, right: Any) -> bool:
    """``===`` semantics: equal value and same kind.

    A bool never equals a number, a number never equals a string.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if is_number(left) and is_number(right):
        return left == right
    if type(left) is not type(right) and not (
        isinstance(left, Mapping) and isinstance(right, Mapping)
    ):
        return False
    return left == right


def stringify(value: Any) -> str:
    """Textual form of an interpolated value.

    - None -> ``""``
    - bools -> ``"true"`` / ``"false"``
    - integral floats drop the ``.0`` (``2.0`` -> ``"2"``)
    - lists and tuples -> comma-joined stringified items
    - mappings -> JSON
    - placeholders -> their ``{{ name }}`` marker
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (Placeholder, Spans)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(dict(value), default=str, ensure_ascii=False)
    return str(value)


def has_placeholder(value: Any) -> bool:
    """True if ``value`` is, or (for lists and mappings) contains, a placeholder."""
    if isinstance(value, (Placeholder, Spans)):
        return True
    if isinstance(value, (list, tuple)):
        return any(has_placeholder(item) for item in value)
    if isinstance(value, Mapping):
        return any(has_placeholder(item) for item in value.values())
    return False


def stringify_spans(value: Any) -> str | Placeholder | Spans:
    """:func:`stringify`, except that placeholders stay typed.

    Lists holding placeholders are comma-joined into :class:`Spans`.

    Raises:
        EvalError: A mapping holds a placeholder. JSON has no typed slot
            for it, and a stringified marker would never be spliced.
    """
    if isinstance(value, (Placeholder, Spans)):
        return value
    if not has_placeholder(value):
        return stringify(value)
    if isinstance(value, Mapping):
        raise EvalError(
            "Cannot render an object holding an opaque binding",
            code=ErrorCode.TYPE_MISMATCH,
        )
    pieces: list[str | Placeholder | Spans] = []
    for i, item in enumerate(value):
        if i:
            pieces.append(",")
        pieces.append(stringify_spans(item))
    return Spans.concat(*pieces)


def safe_getattr(obj: Any, name: str) -> Any:
    """Member access for ``obj.name``.

    Resolution order:
    - Mappings: key first, then attribute (so a ``"items"`` key is data,
      not the ``dict.items`` method).
    - Objects: attribute, then subscript.
    - ``length`` of a string, list or tuple is its size.

    Missing members are None. Underscore-prefixed names are refused so
    templates cannot reach into object internals.

    Raises:
        EvalError: Member of None, private name, or member of an opaque
            binding.
    """
    if obj is None:
        raise EvalError(
            f"Cannot read property '{name}' of null",
            code=ErrorCode.TYPE_MISMATCH,
        )
    if name.startswith("_"):
        raise EvalError(f"Access to private member '{name}' is not allowed")
    if isinstance(obj, (Placeholder, Spans)):
        raise EvalError(
            f"Cannot read property '{name}' of an opaque binding",
            code=ErrorCode.TYPE_MISMATCH,
        )
    if isinstance(obj, Mapping):
        value = obj.get(name, _MISSING)
        if value is not _MISSING:
            return value
        return getattr(obj, name, None)
    if name == "length" and isinstance(obj, (str, list, tuple)):
        return len(obj)
    value = getattr(obj, name, _MISSING)
    if value is not _MISSING:
        return value
    try:
        return obj[name]
    except (KeyError, IndexError, TypeError):
        return None


def safe_getitem(obj: Any, key: Any) -> Any:
    """Subscript access for ``obj[key]``; missing keys and indexes are None."""
    if obj is None:
        raise EvalError(
            f"Cannot read index {stringify(key)!r} of null",
            code=ErrorCode.TYPE_MISMATCH,
        )
    if isinstance(key, str):
        return safe_getattr(obj, key)
    if isinstance(obj, (Placeholder, Spans)):
        raise EvalError("Cannot index an opaque binding", code=ErrorCode.TYPE_MISMATCH)
    if isinstance(key, float) and key.is_integer():
        key = int(key)
    if isinstance(key, int) and key < 0 and isinstance(obj, (str, list, tuple)):
        return None
    try:
        return obj[key]
    except (KeyError, IndexError):
        return None
    except TypeError as e:
        raise EvalError(
            f"Cannot index {type(obj).__name__} with {type(key).__name__}",
            code=ErrorCode.TYPE_MISMATCH,
        ) from e


def type_name(value: Any) -> str:
    """Template-facing type name used in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (Placeholder, Spans)):
        return "opaque"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__
