"""Built-in named transforms and a resolver for named lookup tables."""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Mapping

from jsonmapper.compiler import lookup_builder
from jsonmapper.errors import ApplyError


def _strip(v: Any) -> Any:
    return v.strip() if isinstance(v, str) else v


def _lower(v: Any) -> Any:
    return v.lower() if isinstance(v, str) else v


def _upper(v: Any) -> Any:
    return v.upper() if isinstance(v, str) else v


def _slug(v: Any) -> Any:
    if not isinstance(v, str):
        return v
    s = v.strip().lower()
    return re.sub(r"[^a-z0-9]+", "-", s).strip("-")


def _json(v: Any) -> Any:
    return json.loads(v) if isinstance(v, str) else v


def _increment(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ApplyError(f"increment expects a number, got {v!r}")
    return v + 1


def _concat(obj: Any) -> Any:
    # "key:value" pairs of a whole input object, joined with "|"
    if not isinstance(obj, Mapping):
        return obj
    return "|".join(f"{k}:{v}" for k, v in obj.items())


BUILTIN_FUNCTIONS: Dict[str, Callable[[Any], Any]] = {
    "strip": _strip,
    "lower": _lower,
    "upper": _upper,
    "slug": _slug,
    "json": _json,
    "increment": _increment,
    "concat": _concat,
}


def resolve_function(name: str) -> Callable[[Any], Any]:
    try:
        return BUILTIN_FUNCTIONS[name]
    except KeyError:
        raise KeyError(f"unknown function '{name}'") from None


def table_resolver(tables: Mapping[str, Mapping[Any, Any]]) -> Callable[[str], Callable[[Any], Any]]:
    """
    Build a lookup resolver over named inline tables, e.g. the contents of a
    lookups.yaml file:

        colors: {r: red, g: green}
        sizes:  {S: small, L: large}
    """

    def resolve(name: str) -> Callable[[Any], Any]:
        table = tables.get(name)
        if not isinstance(table, Mapping):
            raise KeyError(f"unknown lookup table '{name}'")
        return lookup_builder(name, table, table_name=name)

    return resolve
