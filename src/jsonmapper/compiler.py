"""
Definition compiler: mapping definition + schemas -> CompiledMapping tree.

Every field spec is parsed into its tagged form, checked against the output
schema (target) and the input schema (source), and bound to a resolved
callable. The result is immutable and never re-resolves names at apply time.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from jsonmapper.errors import ApplyError, CompileError
from jsonmapper.schema import parse_field_spec, schema_items, schema_property, schema_type
from jsonmapper.types import (
    CONSTANT_KEY,
    CompiledMapping,
    CopySpec,
    FunctionSpec,
    LookupSpec,
    NestedSpec,
    Strategy,
    StrategyNode,
    Transform,
)

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Transform]


# -----------------------------------------------------------------------------
# Lookup tables
# -----------------------------------------------------------------------------


def lookup_builder(key: str, table: Mapping[Any, Any], *, table_name: Optional[str] = None) -> Transform:
    """
    Wrap a lookup table in a closure that rejects unknown values. Errors
    name the target field, or the table when `table_name` is given.
    """
    table = MappingProxyType(deepcopy(dict(table)))
    where = f"in table '{table_name}'" if table_name is not None else f"for target '{key}'"

    def lookup(value: Any) -> Any:
        try:
            if value in table:
                return table[value]
        except TypeError:
            raise ApplyError(f"unknown lookup value {value!r} {where}") from None
        # tables read from JSON only have string keys
        if isinstance(value, (int, float)) and not isinstance(value, bool) and str(value) in table:
            return table[str(value)]
        raise ApplyError(f"unknown lookup value {value!r} {where}")

    return lookup


def _resolve(resolver: Resolver, kind: str, name: str, key: str) -> Transform:
    try:
        fn = resolver(name)
    except Exception as e:
        raise CompileError(f"unable to resolve {kind} '{name}' for target '{key}': {e}") from e
    if not callable(fn):
        raise CompileError(f"{kind} resolver returned a non-callable for '{name}' (target '{key}')")
    return fn


# -----------------------------------------------------------------------------
# Field level
# -----------------------------------------------------------------------------


def compile_strategy(
    key: str,
    field_spec: Any,
    input_schema: Mapping[str, Any],
    output_schema: Mapping[str, Any],
    *,
    function_resolver: Resolver,
    lookup_resolver: Resolver,
) -> StrategyNode:
    target_field = schema_property(output_schema, key)
    if target_field is None:
        raise CompileError(f"unable to resolve target field '{key}'")

    def check_source(source_name: str) -> None:
        if schema_property(input_schema, source_name) is None:
            raise CompileError(f"unable to resolve source field '{source_name}' for target '{key}'")

    spec = parse_field_spec(key, field_spec, check_source)
    resolvers = dict(function_resolver=function_resolver, lookup_resolver=lookup_resolver)

    # nested strategies return early
    if isinstance(spec, NestedSpec):
        target_type = schema_type(target_field)
        if target_type == "array":
            entries: Sequence[Any] = spec.nested if isinstance(spec.nested, (list, tuple)) else [spec.nested]
            items = schema_items(target_field)
            return StrategyNode(
                strategy=Strategy.NESTED_ARRAY,
                target_name=key,
                target_field=target_field,
                nested=tuple(compile_definition(n, input_schema, items, **resolvers) for n in entries),
            )
        if target_type == "object":
            if isinstance(spec.nested, (list, tuple)):
                raise CompileError(f"array not allowed for object target '{key}'")
            return StrategyNode(
                strategy=Strategy.NESTED_OBJECT,
                target_name=key,
                target_field=target_field,
                nested=compile_definition(spec.nested, input_schema, target_field, **resolvers),
            )
        raise CompileError(f"unexpected target type '{target_type}' for nested strategy on '{key}'")

    source_name: Optional[str] = getattr(spec, "source", None)
    source_field = schema_property(input_schema, source_name) if source_name is not None else None

    fn: Optional[Transform] = None
    if isinstance(spec, CopySpec):
        strategy = Strategy.COPY
    elif isinstance(spec, LookupSpec):
        strategy = Strategy.LOOKUP
        if isinstance(spec.table, str):
            fn = _resolve(lookup_resolver, "lookup", spec.table, key)
        else:
            fn = lookup_builder(key, spec.table)
    elif isinstance(spec, FunctionSpec):
        strategy = Strategy.FUNCTION_VAL if source_name is not None else Strategy.FUNCTION_FULL
        fn = _resolve(function_resolver, "function", spec.function, key)
    else:  # pragma: no cover
        raise CompileError(f"no recognized strategy for field '{key}'")

    return StrategyNode(
        strategy=strategy,
        target_name=key,
        target_field=target_field,
        source_name=source_name,
        source_field=source_field,
        function=fn,
    )


# -----------------------------------------------------------------------------
# Definition level
# -----------------------------------------------------------------------------


def compile_definition(
    definition: Any,
    input_schema: Mapping[str, Any],
    output_schema: Mapping[str, Any],
    *,
    function_resolver: Resolver,
    lookup_resolver: Resolver,
) -> CompiledMapping:
    if not isinstance(definition, Mapping):
        raise CompileError(f"invalid definition: expected an object, got {type(definition).__name__}")

    constant = definition.get(CONSTANT_KEY)
    if constant is None:
        constant = {}
    if not isinstance(constant, Mapping):
        raise CompileError("$constant must be an object")

    strategies = []
    for key, field_spec in definition.items():
        if key == CONSTANT_KEY:
            continue
        if key in constant:
            raise CompileError(f"duplicate field '{key}' in strategy and $constant")
        strategies.append(
            compile_strategy(
                key,
                field_spec,
                input_schema,
                output_schema,
                function_resolver=function_resolver,
                lookup_resolver=lookup_resolver,
            )
        )

    logger.debug(
        "compiled level: %d strateg%s, %d constant(s)",
        len(strategies),
        "y" if len(strategies) == 1 else "ies",
        len(constant),
    )
    return CompiledMapping(
        strategies=tuple(strategies),
        constant=MappingProxyType(deepcopy(dict(constant))),
    )
