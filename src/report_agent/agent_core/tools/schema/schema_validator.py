from typing import Any, Dict, Iterable, List, Set, Tuple

import jsonschema
from jsonschema import Draft202012Validator

from ...exceptions import SchemaError
from ...logger import get_logger

logger = get_logger(__name__)

_METADATA_KEYS = ("$defs", "$schema", "$id", "title", "definitions")


class SchemaValidator:
    """
    Helper class for checking, sanitizing and applying JSON schemas of tool inputs.
    """

    @staticmethod
    def assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
        """
        Checks if the schema contains recursive references by traversing the graph.

        Args:
            schema: The JSON schema to check.

        Raises:
            SchemaError: If a recursive reference is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> None:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        msg = (
                            f"Recursive structure detected: {ref}. "
                            "Recursive structures are not allowed in tool inputs."
                        )
                        logger.error(msg)
                        raise SchemaError(msg)

                    # e.g. #/$defs/MyModel
                    if ref.startswith("#"):
                        parts = ref.split("/")
                        if len(parts) >= 3:
                            def_name = parts[-1]
                            if def_name in defs:
                                check(defs[def_name], path | {ref})
                    return

                for v in node.values():
                    check(v, path)
            elif isinstance(node, list):
                for item in node:
                    check(item, path)

        check(schema, set())

    @staticmethod
    def assert_required_declared(schema: Dict[str, Any], tool_name: str) -> None:
        """
        Checks that every object node lists only declared properties as required.

        Args:
            schema: The JSON schema to check.
            tool_name: Name of the tool for error reporting.

        Raises:
            SchemaError: If a required field has no entry in ``properties``.
        """

        def check(node: Any, where: str) -> None:
            if isinstance(node, dict):
                required = node.get("required") or []
                properties = node.get("properties") or {}
                missing = [name for name in required if name not in properties]
                if missing:
                    msg = (
                        f"Tool '{tool_name}' declares required field(s) {missing} "
                        f"that are absent from the properties of {where}."
                    )
                    logger.error(msg)
                    raise SchemaError(msg)
                for key, value in properties.items():
                    check(value, f"{where}.{key}")
                if "items" in node:
                    check(node["items"], f"{where}[]")
            elif isinstance(node, list):
                for item in node:
                    check(item, where)

        if not isinstance(schema, dict):
            raise SchemaError(f"Tool '{tool_name}' input schema must be a JSON object schema.")
        if schema.get("type", "object") != "object":
            raise SchemaError(f"Tool '{tool_name}' input schema must have type 'object'.")
        check(schema, "input")

    @staticmethod
    def sanitize_schema(schema: Any) -> Any:
        """
        Cleans up the schema for better compatibility with LLM providers.
        Removes $defs, $schema, $id, title.
        Simplifies Optional fields (anyOf with null).
        Enforces additionalProperties: false for objects.

        Args:
            schema: The JSON schema to sanitize.

        Returns:
            The sanitized schema.
        """
        if not isinstance(schema, dict):
            return schema

        new_schema = schema.copy()

        for key in _METADATA_KEYS:
            new_schema.pop(key, None)

        if "anyOf" in new_schema:
            any_of = new_schema["anyOf"]
            non_null = [x for x in any_of if x.get("type") != "null"]

            if len(non_null) == 1 and isinstance(non_null[0], dict):
                # The parent description wins over the one of the wrapped type
                merged = non_null[0].copy()
                for key in ("description", "default"):
                    if key in new_schema:
                        merged[key] = new_schema[key]
                return SchemaValidator.sanitize_schema(merged)

        if new_schema.get("type") == "object":
            if "additionalProperties" not in new_schema:
                new_schema["additionalProperties"] = False

        for key, value in new_schema.items():
            if key == "properties" and isinstance(value, dict):
                # Property names are data, not schema keywords
                new_schema[key] = {name: SchemaValidator.sanitize_schema(sub) for name, sub in value.items()}
            elif isinstance(value, dict):
                new_schema[key] = SchemaValidator.sanitize_schema(value)
            elif isinstance(value, list):
                new_schema[key] = [
                    SchemaValidator.sanitize_schema(item) if isinstance(item, dict) else item for item in value
                ]

        return new_schema

    @staticmethod
    def assert_valid_schema(schema: Dict[str, Any], tool_name: str) -> None:
        """
        Checks the schema itself against the JSON Schema 2020-12 metaschema.

        Raises:
            SchemaError: If the schema is malformed, e.g. ``{"type": 5}``.
        """
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.exceptions.SchemaError as exc:
            msg = f"Tool '{tool_name}' has an invalid input schema: {exc.message}"
            logger.error(msg)
            raise SchemaError(msg) from exc

    @staticmethod
    def validate_arguments(schema: Dict[str, Any], arguments: Any) -> List[Tuple[str, str]]:
        """
        Validates arguments against a (sanitized) JSON schema with ``jsonschema``.

        Args:
            schema: The input schema of the tool.
            arguments: The normalized arguments.

        Returns:
            A list of ``(field_path, message)`` tuples, empty when the arguments are valid.
        """
        problems: List[Tuple[str, str]] = []
        seen: Set[Tuple[str, str]] = set()

        def add(path: str, message: str) -> None:
            if (path, message) not in seen:
                seen.add((path, message))
                problems.append((path, message))

        for error in Draft202012Validator(schema).iter_errors(arguments):
            path = _format_path(error.absolute_path)
            if error.validator == "required" and isinstance(error.instance, dict):
                for name in error.validator_value:
                    if name not in error.instance:
                        add(_join(path, name), "field required")
            elif (
                error.validator == "additionalProperties"
                and error.validator_value is False
                and isinstance(error.instance, dict)
            ):
                declared = error.schema.get("properties") or {}
                for name in error.instance:
                    if name not in declared:
                        add(_join(path, name), "unexpected field")
            else:
                add(path or "input", error.message)

        return problems


def _format_path(parts: Iterable[Any]) -> str:
    path = ""
    for part in parts:
        if isinstance(part, int):
            path = f"{path or 'input'}[{part}]"
        else:
            path = _join(path, str(part))
    return path


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name
