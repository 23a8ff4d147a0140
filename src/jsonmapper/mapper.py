from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from jsonmapper.applicator import apply_mapping, trim_input
from jsonmapper.compiler import compile_definition, lookup_builder
from jsonmapper.config import MapperConfig
from jsonmapper.errors import CompileError, NotCompiledError
from jsonmapper.types import CompiledMapping

logger = logging.getLogger(__name__)


class Mapper:
    """
    Compiles a mapping definition against an input and an output schema, then
    applies the compiled tree to input values.

    compile() replaces the compiled mapping wholesale; apply_to() only reads
    it, so one compiled mapper may serve any number of inputs. Calling
    compile() while another thread is in apply_to() is the caller's problem.
    """

    lookup_builder = staticmethod(lookup_builder)
    trim_input = staticmethod(trim_input)

    def __init__(self, config: Optional[MapperConfig] = None, **options: Any) -> None:
        if config is not None and options:
            raise TypeError("pass either a MapperConfig or keyword options, not both")
        self.config = config if config is not None else MapperConfig(**options)
        self.definition: Optional[Mapping[str, Any]] = None
        self.input_schema: Optional[Mapping[str, Any]] = None
        self.output_schema: Optional[Mapping[str, Any]] = None
        self.mapping: Optional[CompiledMapping] = None

    @property
    def origin(self) -> str:
        return self.config.origin

    @property
    def validate(self) -> bool:
        return self.config.validate_data

    @property
    def function_resolver(self):
        return self.config.function_resolver

    @property
    def lookup_resolver(self):
        return self.config.lookup_resolver

    # ------------------------------------------------------------------
    # Compile
    # ------------------------------------------------------------------
    def compile(
        self,
        definition: Mapping[str, Any],
        input_schema: Mapping[str, Any],
        output_schema: Mapping[str, Any],
    ) -> None:
        if not isinstance(definition, Mapping):
            raise CompileError("invalid definition")
        if not isinstance(input_schema, Mapping):
            raise CompileError("invalid input schema")
        if not isinstance(output_schema, Mapping):
            raise CompileError("invalid output schema")

        mapping = compile_definition(
            definition,
            input_schema,
            output_schema,
            function_resolver=self.function_resolver,
            lookup_resolver=self.lookup_resolver,
        )

        self.definition = definition
        self.input_schema = input_schema
        self.output_schema = output_schema
        self.mapping = mapping
        logger.info("compiled mapping with %d top-level field(s)", len(mapping.strategies))

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------
    def apply_to(self, data: Any) -> Dict[str, Any]:
        mapping = self.mapping
        if mapping is None:
            raise NotCompiledError("compile() required")

        # TODO: check data and output against the schemas once validate is honoured
        output = apply_mapping(data, mapping, origin=self.origin)
        logger.debug("applied mapping: %d output field(s)", len(output))
        return output
