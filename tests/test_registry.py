import json
from typing import Annotated, Any, List, Literal, Optional

import pytest
from pydantic import BaseModel, Field

from report_agent.agent_core import SchemaError, ToolDefinition, ToolRegistry, UnknownToolError, ValidationFailure


def test_registry_tool_decorator() -> None:
    registry = ToolRegistry()

    @registry.tool
    def my_tool(x: Annotated[int, Field(description="An integer")]) -> int:
        """My tool description."""
        return x * 2

    assert "my_tool" in registry
    tool_def = registry.tools["my_tool"]
    assert tool_def.description == "My tool description."
    assert tool_def.func(2) == 4
    assert tool_def.terminal is False


def test_terminal_flag_via_decorator_options() -> None:
    registry = ToolRegistry()

    @registry.tool(terminal=True)
    def publish(title: Annotated[str, Field(description="Title")]) -> dict:
        """Publish."""
        return {}

    assert registry.is_terminal("publish")
    assert not registry.is_terminal("missing")


def test_generated_schema_is_sanitized() -> None:
    registry = ToolRegistry()

    def lookup(
        year: Annotated[str, Field(description="Year to query")],
        dimension: Annotated[Literal["grade", "sex"], Field(description="Dimension")],
        limit: Annotated[Optional[int], Field(description="Max rows")] = None,
    ) -> dict:
        """Look something up."""
        return {}

    registry.register(lookup)
    schema = registry.get("lookup").parameters

    assert schema is not None
    assert schema["type"] == "object"
    assert schema["additionalProperties"] is False
    assert schema["required"] == ["year", "dimension"]
    assert "title" not in schema
    assert schema["properties"]["dimension"]["enum"] == ["grade", "sex"]
    assert schema["properties"]["limit"]["type"] == "integer"
    assert schema["properties"]["limit"]["description"] == "Max rows"


def test_property_named_title_survives_sanitizing() -> None:
    registry = ToolRegistry()

    def report(title: Annotated[str, Field(description="Report title")]) -> dict:
        """Write a report."""
        return {}

    registry.register(report)
    schema = registry.get("report").parameters
    assert schema is not None
    assert "title" in schema["properties"]
    assert schema["required"] == ["title"]


def test_nested_models_are_inlined() -> None:
    class Row(BaseModel):
        label: str
        value: float

    registry = ToolRegistry()

    def table(rows: Annotated[List[Row], Field(description="Rows")]) -> dict:
        """Render a table."""
        return {}

    registry.register(table)
    schema = registry.get("table").parameters
    assert schema is not None
    assert "$defs" not in json.dumps(schema)
    items = schema["properties"]["rows"]["items"]
    assert items["properties"]["value"]["type"] == "number"
    assert items["additionalProperties"] is False


def test_register_with_explicit_schema() -> None:
    registry = ToolRegistry()
    schema = {"type": "object", "properties": {"q": {"type": "string"}}, "required": ["q"]}

    tool = registry.register("search", "Search things.", lambda q: {"q": q}, schema)

    assert tool.args_model is None
    assert registry.describe() == [{"name": "search", "description": "Search things.", "input_schema": schema}]


def test_register_tool_definition_object() -> None:
    registry = ToolRegistry()
    definition = ToolDefinition(name="noop", description="Does nothing.", func=lambda: {})

    registry.register(definition, terminal=True)

    assert registry.is_terminal("noop")
    assert registry.describe()[0]["input_schema"] == {"type": "object", "properties": {}}


def test_duplicate_names_are_rejected() -> None:
    registry = ToolRegistry()

    def tool_a(x: Annotated[int, Field(description="x")]) -> int:
        """A."""
        return x

    registry.register(tool_a)
    with pytest.raises(SchemaError, match="already registered"):
        registry.register("tool_a", func=tool_a)


def test_registration_after_freeze_is_rejected() -> None:
    registry = ToolRegistry()
    registry.freeze()

    def late(x: Annotated[int, Field(description="x")]) -> int:
        """Late tool."""
        return x

    with pytest.raises(SchemaError, match="frozen"):
        registry.register(late)
    assert registry.names == []


def test_missing_docstring_is_rejected() -> None:
    registry = ToolRegistry()

    def undocumented(x: Annotated[int, Field(description="x")]) -> int:
        return x

    with pytest.raises(SchemaError, match="missing docstring"):
        registry.register(undocumented)


def test_missing_parameter_description_is_rejected() -> None:
    registry = ToolRegistry()

    def bare(x: int) -> int:
        """Bare parameter."""
        return x

    with pytest.raises(SchemaError, match="missing a description"):
        registry.register(bare)


def test_required_field_must_be_declared() -> None:
    registry = ToolRegistry()
    schema = {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a", "b"]}

    with pytest.raises(SchemaError, match="required field"):
        registry.register("broken", "Broken schema.", lambda a: {}, schema)


def test_non_object_schema_is_rejected() -> None:
    registry = ToolRegistry()

    with pytest.raises(SchemaError, match="type 'object'"):
        registry.register("scalar", "Scalar schema.", lambda: {}, {"type": "string"})


def test_recursive_schema_is_rejected() -> None:
    registry = ToolRegistry()
    schema = {
        "type": "object",
        "$defs": {"Node": {"type": "object", "properties": {"child": {"$ref": "#/$defs/Node"}}}},
        "properties": {"root": {"$ref": "#/$defs/Node"}},
    }

    with pytest.raises(SchemaError, match="Recursive structure detected"):
        registry.register("tree", "Walk a tree.", lambda root: {}, schema)


def test_describe_is_ordered_and_detached(toy_registry: ToolRegistry) -> None:
    described = toy_registry.describe()
    assert [d["name"] for d in described] == ["echo", "finish"]

    described[0]["input_schema"]["properties"].clear()
    assert toy_registry.describe()[0]["input_schema"]["properties"] != {}


def test_get_unknown_tool_raises(toy_registry: ToolRegistry) -> None:
    with pytest.raises(UnknownToolError, match="unknown tool: nope"):
        toy_registry.get("nope")


def test_registered_definition_is_detached_from_caller_schema() -> None:
    parameters = {
        "type": "object",
        "properties": {"text": {"type": "string", "description": "Text to echo"}},
        "required": ["text"],
        "additionalProperties": False,
    }
    registry = ToolRegistry()
    registry.register(ToolDefinition(name="echo", description="Echo.", func=lambda text: {}, parameters=parameters))

    parameters["properties"]["text"]["description"] = "changed"
    parameters["required"].append("other")

    schema = registry.describe()[0]["input_schema"]
    assert schema["properties"]["text"]["description"] == "Text to echo"
    assert schema["required"] == ["text"]


def test_malformed_explicit_schema_is_rejected_at_registration() -> None:
    registry = ToolRegistry()
    schema = {"type": "object", "properties": {"a": {"type": 5}}}

    with pytest.raises(SchemaError, match="invalid input schema"):
        registry.register("broken", "Broken.", lambda a: {}, schema)
    assert "broken" not in registry


def test_validate_unknown_tool(toy_registry: ToolRegistry) -> None:
    failure = toy_registry.validate("nope", {})
    assert isinstance(failure, ValidationFailure)
    assert failure.kind == "unknown_tool"
    assert failure.message == "unknown tool: nope"


@pytest.mark.parametrize("raw", [{"text": "hi"}, '{"text": "hi"}'])
def test_validate_accepts_dict_and_json_string(toy_registry: ToolRegistry, raw: Any) -> None:
    assert toy_registry.validate("echo", raw) == {"text": "hi"}


def test_validate_reports_malformed_json(toy_registry: ToolRegistry) -> None:
    failure = toy_registry.validate("echo", "{not json")
    assert isinstance(failure, ValidationFailure)
    assert failure.kind == "schema_validation"
    assert "Failed to parse arguments" in failure.message


def test_validate_reports_missing_and_unexpected_fields(toy_registry: ToolRegistry) -> None:
    failure = toy_registry.validate("echo", {"other": 1})
    assert isinstance(failure, ValidationFailure)
    assert failure.fields == ["other", "text"]
    assert failure.message.startswith("Argument validation failed")


def test_validate_against_explicit_schema() -> None:
    registry = ToolRegistry()
    schema = {
        "type": "object",
        "properties": {"year": {"type": "string"}, "dimension": {"type": "string", "enum": ["grade", "sex"]}},
        "required": ["year", "dimension"],
        "additionalProperties": False,
    }
    registry.register("breakdown", "Breakdown.", lambda year, dimension: {}, schema)

    assert registry.validate("breakdown", {"year": "2019", "dimension": "sex"}) == {"year": "2019", "dimension": "sex"}

    failure = registry.validate("breakdown", {"year": 2019, "dimension": "age"})
    assert isinstance(failure, ValidationFailure)
    assert failure.fields == ["dimension", "year"]


def test_validate_never_raises_for_odd_input(toy_registry: ToolRegistry) -> None:
    for raw in (42, "[1, 2]", object()):
        assert isinstance(toy_registry.validate("echo", raw), ValidationFailure)


def test_validate_enforces_constraints_of_explicit_schema() -> None:
    registry = ToolRegistry()
    schema = {
        "type": "object",
        "properties": {
            "n": {"type": "integer", "minimum": 1},
            "name": {"type": "string", "minLength": 3},
            "v": {"anyOf": [{"type": "string"}, {"type": "integer"}]},
        },
        "required": ["n", "name", "v"],
        "additionalProperties": False,
    }
    registry.register("t", "Constrained.", lambda n, name, v: {}, schema)

    assert registry.validate("t", {"n": 2, "name": "abc", "v": 7}) == {"n": 2, "name": "abc", "v": 7}

    failure = registry.validate("t", {"n": 0, "name": "", "v": [1, 2]})
    assert isinstance(failure, ValidationFailure)
    assert failure.fields == ["n", "name", "v"]


def test_validate_reports_deeply_nested_json_as_failure(toy_registry: ToolRegistry) -> None:
    raw = "[" * 100000 + "]" * 100000

    failure = toy_registry.validate("echo", raw)
    assert isinstance(failure, ValidationFailure)
    assert failure.kind == "schema_validation"
    assert "Failed to parse arguments" in failure.message
