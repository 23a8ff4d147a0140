from __future__ import annotations


class MappingError(ValueError):
    """Base class for every error raised by the mapping engine."""


class CompileError(MappingError):
    """A mapping definition could not be compiled against its schemas."""


class ApplyError(MappingError):
    """A compiled mapping could not be applied to an input value."""


class NotCompiledError(ApplyError):
    """apply_to() was called before compile()."""
