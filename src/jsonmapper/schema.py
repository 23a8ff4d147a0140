# jsonmapper/schema.py

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from jsonmapper.errors import CompileError
from jsonmapper.types import (
    NESTED_KEY,
    CopySpec,
    FieldSpec,
    FunctionSpec,
    LookupSpec,
    NestedSpec,
)


def _present(spec: Mapping[str, Any], key: str) -> bool:
    # "", 0 and False count as absent; {} and [] are present
    value = spec.get(key)
    if value is None:
        return False
    if isinstance(value, (str, int, float)):
        return bool(value)
    return True


def parse_field_spec(key: str, spec: Any, check_source: Optional[Callable[[str], None]] = None) -> FieldSpec:
    """
    Structural validation of one field spec.

    Turns the loosely-typed dict form into exactly one of CopySpec,
    LookupSpec, FunctionSpec or NestedSpec. Schemas are not consulted here;
    `check_source`, when given, is called with the source name before the
    lookup/function combination is checked.
    """

    if not isinstance(spec, Mapping):
        raise CompileError(f"invalid field spec for '{key}': expected an object, got {type(spec).__name__}")

    has_source = _present(spec, "source")
    has_lookup = _present(spec, "lookup")
    has_function = _present(spec, "function")

    # -------------------------
    # Recursive strategies
    # -------------------------
    if _present(spec, NESTED_KEY):
        if has_source or has_lookup or has_function:
            raise CompileError(
                f"incompatible strategies for '{key}': $nested cannot be combined with source, lookup or function"
            )
        return NestedSpec(nested=spec[NESTED_KEY])

    # -------------------------
    # Value strategies
    # -------------------------
    source = spec["source"] if has_source else None
    if source is not None and not isinstance(source, str):
        raise CompileError(f"source for '{key}' must be a string")
    if source is not None and check_source is not None:
        check_source(source)

    if has_lookup:
        if source is None:
            raise CompileError(f"lookup requires source for '{key}'")
        if has_function:
            raise CompileError(f"lookup incompatible with function for '{key}'")
        table = spec["lookup"]
        if not isinstance(table, (str, Mapping)):
            raise CompileError(f"lookup for '{key}' must be a table name or an object")
        return LookupSpec(source=source, table=table)

    if has_function:
        name = spec["function"]
        if not isinstance(name, str):
            # chained functions are not supported
            raise CompileError(f"function for '{key}' must be a single function name")
        return FunctionSpec(function=name, source=source)

    if source is not None:
        return CopySpec(source=source)

    raise CompileError(f"no recognized strategy for field '{key}'")


def schema_type(fragment: Mapping[str, Any]) -> Optional[str]:
    return fragment.get("type")


def schema_property(fragment: Optional[Mapping[str, Any]], name: str) -> Optional[Mapping[str, Any]]:
    """Child fragment `name` of an object fragment, or None."""
    if not isinstance(fragment, Mapping):
        return None
    props = fragment.get("properties")
    if not isinstance(props, Mapping):
        return None
    child = props.get(name)
    return child if isinstance(child, Mapping) else None


def schema_items(fragment: Mapping[str, Any]) -> Mapping[str, Any]:
    items = fragment.get("items")
    return items if isinstance(items, Mapping) else {}
