from .errors import ApplyError, CompileError, MappingError, NotCompiledError
from .config import MapperConfig
from .mapper import Mapper
from .types import CompiledMapping, Strategy, StrategyNode

__all__ = [
    "Mapper",
    "MapperConfig",
    "CompiledMapping",
    "Strategy",
    "StrategyNode",
    "MappingError",
    "CompileError",
    "ApplyError",
    "NotCompiledError",
]
