"""End-to-end example: a flat record mapped into a nested document."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from jsonmapper.functions import resolve_function
from jsonmapper.mapper import Mapper

INPUT: Dict[str, Any] = {
    "index": 0,
    "name": " Foo ",
    "value": 3,
    "comment": "this is an object",
}

INPUT_SCHEMA: Dict[str, Any] = {
    "title": "input JSON schema",
    "properties": {
        "index": {"type": "number"},
        "name": {"type": "string"},
        "value": {"type": "number"},
        "comment": {"type": "string"},
    },
}

OUTPUT_SCHEMA: Dict[str, Any] = {
    "title": "output JSON schema",
    "properties": {
        "name": {"type": "string"},
        "idx": {"type": "number"},
        "contents": {
            "type": "object",
            "properties": {
                "description": {"type": "string"},
                "values": {
                    "type": "array",
                    "items": {
                        "properties": {
                            "category": {"type": "string"},
                            "value": {"type": "string"},
                        }
                    },
                },
            },
        },
    },
}

DEFINITION: Dict[str, Any] = {
    "name": {"source": "name"},
    "idx": {"source": "index", "function": "increment"},
    "contents": {
        "$nested": {
            "description": {"source": "comment"},
            "values": {
                "$nested": [
                    {"$constant": {"category": "original"}, "value": {"source": "value"}},
                    {"$constant": {"category": "concatenated"}, "value": {"function": "concat"}},
                ]
            },
        }
    },
}


def run_example(origin: str = "example") -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Compile the example definition and apply it; returns (input, output)."""
    mapper = Mapper(origin=origin, function_resolver=resolve_function)
    mapper.compile(DEFINITION, INPUT_SCHEMA, OUTPUT_SCHEMA)
    return INPUT, mapper.apply_to(INPUT)
