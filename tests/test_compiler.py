import pytest

from jsonmapper.compiler import compile_definition, compile_strategy, lookup_builder
from jsonmapper.errors import ApplyError, CompileError
from jsonmapper.types import CompiledMapping, Strategy


def _unresolvable(name):
    raise NotImplementedError("not implemented")


def _identity_resolver(name):
    return lambda v: (name, v)


def _compile(name, spec, input_schema, output_schema, functions=_unresolvable, lookups=_unresolvable):
    return compile_strategy(
        name,
        spec,
        input_schema,
        output_schema,
        function_resolver=functions,
        lookup_resolver=lookups,
    )


def _schema(**props):
    return {"properties": props}


STRING = {"type": "string"}
INPUT = _schema(someProperty=STRING)
OUTPUT = _schema(output=STRING)


# ==========================================================
# LOOKUP TABLES
# ==========================================================

def test_lookup_builder_maps_known_values():
    lookup = lookup_builder("foo", {"bar": "baz"})
    assert lookup("bar") == "baz"


def test_lookup_builder_rejects_unknown_values():
    lookup = lookup_builder("foo", {"bar": "baz"})
    with pytest.raises(ApplyError, match="unknown lookup value 'baz' for target 'foo'"):
        lookup("baz")


def test_lookup_builder_matches_numbers_against_string_keys():
    lookup = lookup_builder("size", {"1": "small", "2": "large"})
    assert lookup(2) == "large"


def test_lookup_builder_rejects_unhashable_values():
    lookup = lookup_builder("foo", {"bar": "baz"})
    with pytest.raises(ApplyError, match="unknown lookup value"):
        lookup(["bar"])


def test_lookup_builder_copies_table():
    table = {"bar": "baz"}
    lookup = lookup_builder("foo", table)
    table["bar"] = "changed"
    assert lookup("bar") == "baz"


# ==========================================================
# FIELD LEVEL
# ==========================================================

def test_target_must_exist_in_output_schema():
    with pytest.raises(CompileError, match="unable to resolve target field 'output'"):
        _compile("output", {"source": "someProperty"}, {}, _schema(randomName=STRING))


def test_source_must_exist_in_input_schema():
    with pytest.raises(CompileError, match="unable to resolve source field 'someProperty'"):
        _compile("output", {"source": "someProperty"}, _schema(randomName=STRING), OUTPUT)


def test_unrecognized_strategy_fails():
    with pytest.raises(CompileError, match="no recognized strategy for field 'output'"):
        _compile("output", {"foobar": "someProperty"}, {}, OUTPUT)


def test_field_spec_must_be_an_object():
    with pytest.raises(CompileError, match="invalid field spec for 'output'"):
        _compile("output", "someProperty", INPUT, OUTPUT)


def test_copy_strategy():
    node = _compile("output", {"source": "someProperty"}, INPUT, OUTPUT)
    assert node.strategy == Strategy.COPY
    assert node.target_name == "output"
    assert node.target_field == STRING
    assert node.source_name == "someProperty"
    assert node.source_field == STRING
    assert node.function is None


def test_lookup_requires_source():
    with pytest.raises(CompileError, match="lookup requires source for 'output'"):
        _compile("output", {"lookup": {}}, {}, OUTPUT)


def test_lookup_incompatible_with_function():
    spec = {"source": "someProperty", "lookup": {}, "function": "foo"}
    with pytest.raises(CompileError, match="lookup incompatible with function"):
        _compile("output", spec, INPUT, OUTPUT)


def test_inline_lookup_strategy():
    node = _compile("output", {"source": "someProperty", "lookup": {"a": 1}}, INPUT, OUTPUT)
    assert node.strategy == Strategy.LOOKUP
    assert node.target_name == "output"
    assert node.function("a") == 1


def test_named_lookup_goes_through_lookup_resolver():
    seen = []

    def lookups(name):
        seen.append(name)
        return str.upper

    node = _compile("output", {"source": "someProperty", "lookup": "colors"}, INPUT, OUTPUT, lookups=lookups)
    assert node.strategy == Strategy.LOOKUP
    assert node.function is str.upper
    assert seen == ["colors"]


def test_function_val_strategy():
    node = _compile(
        "output", {"source": "someProperty", "function": "foo"}, INPUT, OUTPUT, functions=_identity_resolver
    )
    assert node.strategy == Strategy.FUNCTION_VAL
    assert node.source_name == "someProperty"
    assert node.function("x") == ("foo", "x")


def test_function_full_strategy():
    node = _compile("output", {"function": "foo"}, {}, OUTPUT, functions=_identity_resolver)
    assert node.strategy == Strategy.FUNCTION_FULL
    assert node.source_name is None
    assert node.source_field is None


def test_unresolvable_function_fails_compile():
    with pytest.raises(CompileError, match="unable to resolve function 'foo' for target 'output'"):
        _compile("output", {"function": "foo"}, {}, OUTPUT)


def test_non_callable_resolver_result_fails_compile():
    with pytest.raises(CompileError, match="non-callable"):
        _compile("output", {"function": "foo"}, {}, OUTPUT, functions=lambda name: "not a function")


def test_chained_functions_are_rejected():
    with pytest.raises(CompileError, match="single function name"):
        _compile("output", {"function": ["a", "b"]}, {}, OUTPUT, functions=_identity_resolver)


def test_nested_disallows_peer_strategies():
    spec = {"$nested": {}, "source": "someProperty"}
    with pytest.raises(CompileError, match="incompatible strategies"):
        _compile("output", spec, {}, OUTPUT)


def test_nested_requires_array_or_object_target():
    with pytest.raises(CompileError, match="unexpected target type 'string'"):
        _compile("output", {"$nested": {}}, {}, OUTPUT)


def test_nested_object_rejects_array_definition():
    output_schema = _schema(output={"type": "object", "properties": {"myProperty": STRING}})
    with pytest.raises(CompileError, match="array not allowed for object target 'output'"):
        _compile("output", {"$nested": []}, {}, output_schema)


def test_nested_object_strategy():
    output_schema = _schema(output={"type": "object", "properties": {"myProperty": STRING}})
    spec = {"$nested": {"myProperty": {"source": "someProperty"}}}
    node = _compile("output", spec, INPUT, output_schema)
    assert node.strategy == Strategy.NESTED_OBJECT
    assert isinstance(node.nested, CompiledMapping)
    assert len(node.nested.strategies) == 1
    assert node.nested.strategies[0].strategy == Strategy.COPY
    assert node.nested.strategies[0].target_name == "myProperty"


def test_nested_errors_name_the_inner_field():
    output_schema = _schema(output={"type": "object", "properties": {"myProperty": STRING}})
    spec = {"$nested": {"other": {"source": "someProperty"}}}
    with pytest.raises(CompileError, match="unable to resolve target field 'other'"):
        _compile("output", spec, INPUT, output_schema)


@pytest.mark.parametrize(
    "nested",
    [
        {"myProperty": {"source": "someProperty"}},
        [{"myProperty": {"source": "someProperty"}}],
    ],
)
def test_nested_array_strategy(nested):
    output_schema = _schema(output={"type": "array", "items": {"properties": {"myProperty": STRING}}})
    node = _compile("output", {"$nested": nested}, INPUT, output_schema)
    assert node.strategy == Strategy.NESTED_ARRAY
    assert isinstance(node.nested, tuple)
    assert len(node.nested) == 1
    assert node.nested[0].strategies[0].strategy == Strategy.COPY


def test_nested_array_keeps_entry_order():
    output_schema = _schema(output={"type": "array", "items": {"properties": {"a": STRING, "b": STRING}}})
    nested = [{"b": {"source": "someProperty"}}, {"a": {"source": "someProperty"}}]
    node = _compile("output", {"$nested": nested}, INPUT, output_schema)
    assert [m.strategies[0].target_name for m in node.nested] == ["b", "a"]


# ==========================================================
# DEFINITION LEVEL
# ==========================================================

def _compile_definition(definition, input_schema=INPUT, output_schema=OUTPUT):
    return compile_definition(
        definition,
        input_schema,
        output_schema,
        function_resolver=_unresolvable,
        lookup_resolver=_unresolvable,
    )


def test_definition_captures_constant():
    compiled = _compile_definition({"$constant": {"foo": "bar"}, "output": {"source": "someProperty"}})
    assert dict(compiled.constant) == {"foo": "bar"}
    assert len(compiled.strategies) == 1
    assert compiled.strategies[0].strategy == Strategy.COPY


def test_definition_constant_defaults_to_empty():
    compiled = _compile_definition({"output": {"source": "someProperty"}})
    assert dict(compiled.constant) == {}


def test_definition_rejects_field_in_strategy_and_constant():
    definition = {"$constant": {"output": "bar"}, "output": {"source": "someProperty"}}
    with pytest.raises(CompileError, match=r"duplicate field 'output' in strategy and \$constant"):
        _compile_definition(definition)


def test_definition_rejects_falsy_duplicate_constant():
    definition = {"$constant": {"output": 0}, "output": {"source": "someProperty"}}
    with pytest.raises(CompileError, match="duplicate field 'output'"):
        _compile_definition(definition)


def test_definition_constant_must_be_object():
    with pytest.raises(CompileError, match=r"\$constant must be an object"):
        _compile_definition({"$constant": ["x"]})


def test_definition_preserves_declaration_order():
    output_schema = _schema(b=STRING, a=STRING, c=STRING)
    definition = {
        "c": {"source": "someProperty"},
        "a": {"source": "someProperty"},
        "b": {"source": "someProperty"},
    }
    compiled = _compile_definition(definition, output_schema=output_schema)
    assert [n.target_name for n in compiled.strategies] == ["c", "a", "b"]


def test_compiled_constant_is_detached_from_definition():
    constant = {"tags": ["x"]}
    compiled = _compile_definition({"$constant": constant, "output": {"source": "someProperty"}})
    constant["tags"].append("y")
    assert compiled.constant["tags"] == ["x"]
    with pytest.raises(TypeError):
        compiled.constant["other"] = 1


def test_summary_describes_tree():
    output_schema = _schema(
        output=STRING,
        items={"type": "array", "items": {"properties": {"output": STRING}}},
    )
    definition = {
        "output": {"source": "someProperty"},
        "items": {"$nested": [{"$constant": {"k": 1}, "output": {"source": "someProperty"}}]},
    }
    summary = _compile_definition(definition, output_schema=output_schema).summary()
    assert summary["strategies"][0] == {"strategy": "copy", "target": "output", "source": "someProperty"}
    assert summary["strategies"][1]["strategy"] == "nestedArray"
    assert summary["strategies"][1]["nested"][0]["constant"] == {"k": 1}


# ==========================================================
# CHECK ORDER AND KEY PRESENCE
# ==========================================================

def test_missing_source_reported_before_lookup_function_clash():
    spec = {"source": "missing", "lookup": {}, "function": "f"}
    with pytest.raises(CompileError, match="unable to resolve source field 'missing'"):
        _compile("output", spec, INPUT, OUTPUT)


def test_empty_source_counts_as_absent():
    with pytest.raises(CompileError, match="no recognized strategy for field 'output'"):
        _compile("output", {"source": ""}, INPUT, OUTPUT)


@pytest.mark.parametrize("blank", ["", 0, False])
def test_blank_function_falls_back_to_copy(blank):
    node = _compile("output", {"source": "someProperty", "function": blank}, INPUT, OUTPUT)
    assert node.strategy == Strategy.COPY
    assert node.function is None


def test_lookup_builder_names_table():
    lookup = lookup_builder("color", {"r": "red"}, table_name="colors")
    with pytest.raises(ApplyError, match="unknown lookup value 'b' in table 'colors'"):
        lookup("b")
