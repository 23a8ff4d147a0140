from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple, Union

CONSTANT_KEY = "$constant"
NESTED_KEY = "$nested"
ORIGIN_FIELD = "dataOrigin"

Transform = Callable[[Any], Any]


class Strategy(str, Enum):
    COPY = "copy"
    LOOKUP = "lookup"
    FUNCTION_VAL = "functionVal"
    FUNCTION_FULL = "functionFull"
    NESTED_OBJECT = "nestedObject"
    NESTED_ARRAY = "nestedArray"


# ---------------------------------------------------------------------------
# Field specs (parsed, not yet resolved against schemas)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CopySpec:
    source: str


@dataclass(frozen=True)
class LookupSpec:
    source: str
    table: Union[str, Mapping[Any, Any]]    # table name or inline table


@dataclass(frozen=True)
class FunctionSpec:
    function: str
    source: Optional[str] = None            # None -> whole input object


@dataclass(frozen=True)
class NestedSpec:
    nested: Any                             # one definition or a list of them


FieldSpec = Union[CopySpec, LookupSpec, FunctionSpec, NestedSpec]


# ---------------------------------------------------------------------------
# Compiled tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StrategyNode:
    """
    Executable form of one field spec.

    `nested` is a CompiledMapping for nestedObject nodes and a tuple of
    CompiledMapping for nestedArray nodes; None otherwise.
    """

    strategy: str
    target_name: str
    target_field: Mapping[str, Any]
    source_name: Optional[str] = None
    source_field: Optional[Mapping[str, Any]] = None
    function: Optional[Transform] = None
    nested: Any = None


@dataclass(frozen=True)
class CompiledMapping:
    strategies: Tuple[StrategyNode, ...] = ()
    constant: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def summary(self) -> dict:
        """Plain-data view of the tree, for debugging/logging."""
        out = {"strategies": [], "constant": dict(self.constant)}
        for node in self.strategies:
            item = {"strategy": _tag(node.strategy), "target": node.target_name}
            if node.source_name is not None:
                item["source"] = node.source_name
            if isinstance(node.nested, CompiledMapping):
                item["nested"] = node.nested.summary()
            elif isinstance(node.nested, tuple):
                item["nested"] = [m.summary() for m in node.nested]
            out["strategies"].append(item)
        return out


def _tag(strategy: Any) -> str:
    return strategy.value if isinstance(strategy, Strategy) else str(strategy)
