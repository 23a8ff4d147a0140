from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field


def not_implemented(name: str) -> Callable[[Any], Any]:
    raise NotImplementedError("not implemented")


class MapperConfig(BaseModel):
    # Construction-time options for a Mapper
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, populate_by_name=True)

    origin: str = Field(default="mapper")
    # reserved; values are not checked against their schemas
    validate_data: bool = Field(default=False, alias="validate")
    function_resolver: Callable[[str], Callable[[Any], Any]] = Field(default=not_implemented)
    lookup_resolver: Callable[[str], Callable[[Any], Any]] = Field(default=not_implemented)
