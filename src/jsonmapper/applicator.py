"""
Mapping applicator: CompiledMapping + input value -> output value. Pure; the
input and the compiled tree are only read.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Mapping

from jsonmapper.errors import ApplyError
from jsonmapper.types import ORIGIN_FIELD, CompiledMapping, Strategy, StrategyNode


def trim_input(x: Any) -> Any:
    return x.strip() if isinstance(x, str) else x


def is_suppressed(value: Any) -> bool:
    """None and "" are dropped; 0, False and empty containers are kept."""
    return value is None or (isinstance(value, str) and value == "")


def _read_source(data: Any, node: StrategyNode) -> Any:
    if not isinstance(data, Mapping):
        raise ApplyError(
            f"cannot read source '{node.source_name}' for target '{node.target_name}' "
            f"from {type(data).__name__}"
        )
    return trim_input(data.get(node.source_name))


# -----------------------------------------------------------------------------
# Strategy handlers
# -----------------------------------------------------------------------------


def _apply_copy(data: Any, node: StrategyNode, origin: str) -> Any:
    return _read_source(data, node)


def _apply_value_function(data: Any, node: StrategyNode, origin: str) -> Any:
    return node.function(_read_source(data, node))


def _apply_full_function(data: Any, node: StrategyNode, origin: str) -> Any:
    return node.function(data)


def _apply_nested_object(data: Any, node: StrategyNode, origin: str) -> Any:
    output = apply_mapping(data, node.nested, origin=origin)
    return output or None


def _apply_nested_array(data: Any, node: StrategyNode, origin: str) -> Any:
    elements = []
    for child in node.nested:
        element = apply_mapping(data, child, origin=origin)
        if not element:
            continue
        element[ORIGIN_FIELD] = origin
        elements.append(element)
    return elements


_HANDLERS = {
    Strategy.COPY.value: _apply_copy,
    Strategy.LOOKUP.value: _apply_value_function,
    Strategy.FUNCTION_VAL.value: _apply_value_function,
    Strategy.FUNCTION_FULL.value: _apply_full_function,
    Strategy.NESTED_OBJECT.value: _apply_nested_object,
    Strategy.NESTED_ARRAY.value: _apply_nested_array,
}


def apply_strategy(data: Any, node: StrategyNode, *, origin: str) -> Any:
    # nodes are plain data and may be built by hand
    tag = node.strategy.value if isinstance(node.strategy, Strategy) else node.strategy
    handler = _HANDLERS.get(tag) if isinstance(tag, str) else None
    if handler is None:
        raise ApplyError(f"unknown strategy '{tag}'")
    return handler(data, node, origin)


def apply_mapping(data: Any, compiled: CompiledMapping, *, origin: str) -> Dict[str, Any]:
    output: Dict[str, Any] = {}
    for node in compiled.strategies:
        result = apply_strategy(data, node, origin=origin)
        if not is_suppressed(result):
            output[node.target_name] = result

    # an empty level stays empty, constants included
    if output:
        for name, value in compiled.constant.items():
            output[name] = deepcopy(value)
    return output
