"""Tool registry: declarations sent to the model and validation of incoming arguments."""

import copy
import inspect
import json
from typing import Callable, Dict, Any, List, Optional, Union, cast

import jsonref  # type: ignore
from pydantic import ConfigDict, ValidationError, create_model

from ..models import ToolDefinition, ValidationFailure
from ..schema import SchemaValidator, ToolParameterFactory
from ...exceptions import SchemaError, UnknownToolError
from ...logger import get_logger

logger = get_logger(__name__)


class ToolRegistry:
    """
    A central registry to manage and access all tools the model may call.

    This class holds the declarations sent with every model request and maps tool
    names to their Python handlers. It is configured once before a run and frozen
    when the run starts.
    """

    def __init__(self) -> None:
        """Initialize the ToolRegistry."""
        self.tools: Dict[str, ToolDefinition] = {}
        self._frozen = False

    def register(
        self,
        name_or_tool: Union[str, ToolDefinition, Callable],
        description: Optional[str] = None,
        func: Optional[Callable] = None,
        parameters: Optional[Dict[str, Any]] = None,
        *,
        terminal: bool = False,
    ) -> ToolDefinition:
        """
        Register a new tool.

        A tool can be registered from a `ToolDefinition`, from a callable (the schema is
        generated from its annotated parameters), or from a name, description, handler
        and explicit JSON schema.

        Args:
            name_or_tool: Either a `ToolDefinition` object, the name of the tool (str), or a Callable.
            description: What the tool does. Required with an explicit schema.
            func: The handler implementing the tool. Required if `name_or_tool` is a string.
            parameters: JSON schema of the tool input. If None, it is inferred from `func`.
            terminal: Marks the tool whose success produces the run's artifact.

        Returns:
            The stored tool definition.

        Raises:
            SchemaError: If the tool already exists, the registry is frozen, or the schema is invalid.
        """
        if self._frozen:
            raise SchemaError("Tool registry is frozen; tools must be registered before the run starts.")

        if isinstance(name_or_tool, ToolDefinition):
            tool = name_or_tool.model_copy(
                update={
                    "terminal": name_or_tool.terminal or terminal,
                    "parameters": copy.deepcopy(name_or_tool.parameters),
                }
            )
        elif callable(name_or_tool):
            tool = self._generate_tool_definition(name_or_tool, description=description, terminal=terminal)
        else:
            if func is None:
                raise SchemaError("If passing name as string, func is required.")

            if parameters is None:
                tool = self._generate_tool_definition(
                    func, name=name_or_tool, description=description, terminal=terminal
                )
            else:
                if description is None:
                    raise SchemaError("If passing name and parameters, description is required.")
                tool = ToolDefinition(
                    name=name_or_tool,
                    description=description,
                    func=func,
                    parameters=copy.deepcopy(parameters),
                    terminal=terminal,
                )

        if tool.name in self.tools:
            msg = f"Tool '{tool.name}' is already registered."
            logger.error(msg)
            raise SchemaError(msg)

        if tool.parameters is not None:
            SchemaValidator.assert_valid_schema(tool.parameters, tool.name)
            SchemaValidator.assert_no_recursive_refs(tool.parameters)
            SchemaValidator.assert_required_declared(tool.parameters, tool.name)

        self.tools[tool.name] = tool
        logger.info(f"Successfully registered tool: '{tool.name}'" + (" (terminal)" if tool.terminal else ""))
        return tool

    def tool(self, func: Optional[Callable] = None, *, terminal: bool = False) -> Any:
        """A decorator to turn a function into a tool.

        Usable bare (``@registry.tool``) or with options (``@registry.tool(terminal=True)``).
        """

        def decorator(f: Callable) -> Callable:
            self.register(f, terminal=terminal)
            return f

        if func is not None:
            return decorator(func)
        return decorator

    def freeze(self) -> None:
        """Reject any further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> ToolDefinition:
        """Look up a tool by name.

        Raises:
            UnknownToolError: If no tool with that name is registered.
        """
        try:
            return self.tools[name]
        except KeyError:
            raise UnknownToolError(f"unknown tool: {name}") from None

    def __contains__(self, name: object) -> bool:
        return name in self.tools

    @property
    def names(self) -> List[str]:
        return list(self.tools)

    def is_terminal(self, name: str) -> bool:
        tool = self.tools.get(name)
        return bool(tool and tool.terminal)

    def describe(self) -> List[Dict[str, Any]]:
        """Return all tool declarations in registration order.

        The result is a deep copy: callers may adapt it to their provider format freely.
        """
        return [copy.deepcopy(tool.declaration()) for tool in self.tools.values()]

    def validate(self, name: str, raw_input: Any) -> Union[Dict[str, Any], ValidationFailure]:
        """Validate tool-call arguments. Never raises.

        Args:
            name: The requested tool.
            raw_input: Arguments as emitted by the model (dict, JSON string or None).

        Returns:
            The normalized keyword arguments for the handler, or a `ValidationFailure`.
        """
        tool = self.tools.get(name)
        if tool is None:
            return ValidationFailure(tool_name=name, message=f"unknown tool: {name}", kind="unknown_tool")

        try:
            arguments = self._normalize_arguments(raw_input)
        except (ValueError, RecursionError) as exc:
            return ValidationFailure(tool_name=name, message=f"Failed to parse arguments for tool '{name}': {exc}")

        if tool.args_model is not None:
            try:
                validated = tool.args_model.model_validate(arguments)
            except ValidationError as exc:
                fields = sorted({".".join(str(p) for p in err["loc"]) or "input" for err in exc.errors()})
                details = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in exc.errors()
                )
                return ValidationFailure(
                    tool_name=name, message=f"Argument validation failed: {details}", fields=fields
                )
            return {field_name: getattr(validated, field_name) for field_name in type(validated).model_fields}

        if tool.parameters is not None:
            problems = SchemaValidator.validate_arguments(tool.parameters, arguments)
            if problems:
                details = "; ".join(f"{path}: {message}" for path, message in problems)
                return ValidationFailure(
                    tool_name=name,
                    message=f"Argument validation failed: {details}",
                    fields=sorted({path for path, _ in problems}),
                )

        return arguments

    @staticmethod
    def _normalize_arguments(raw_input: Any) -> Dict[str, Any]:
        """Normalize raw tool arguments into a dictionary.

        Raises:
            ValueError: If the arguments cannot be decoded into a JSON object.
        """
        if raw_input is None or raw_input == "":
            return {}

        if isinstance(raw_input, dict):
            return dict(raw_input)

        if isinstance(raw_input, str):
            parsed = json.loads(raw_input)  # JSONDecodeError is a ValueError
            if parsed is None:
                return {}
            if not isinstance(parsed, dict):
                raise ValueError("Function arguments must decode to a JSON object.")
            return parsed

        try:
            return dict(raw_input)
        except TypeError as exc:
            raise ValueError(str(exc)) from exc

    def _generate_tool_definition(
        self,
        func: Callable,
        name: Optional[str] = None,
        description: Optional[str] = None,
        terminal: bool = False,
    ) -> ToolDefinition:
        """Generate a ToolDefinition from a callable.

        Raises:
            SchemaError: If the function is missing a docstring or parameter descriptions.
        """

        tool_name = name or func.__name__
        if description is None:
            description = self._get_docstring_from_func(func, tool_name)

        signature = inspect.signature(func, eval_str=True)
        fields = self._build_fields(signature, tool_name)

        # create_model expects **field_definitions: Any
        dynamic_params_model = create_model(
            f"{tool_name}Params",
            __config__=ConfigDict(extra="forbid"),
            **cast(Dict[str, Any], fields),
        )
        raw_schema = dynamic_params_model.model_json_schema()
        SchemaValidator.assert_no_recursive_refs(raw_schema)

        # proxies=False returns plain dicts instead of JsonRef objects
        parameters_schema = jsonref.replace_refs(raw_schema, proxies=False)
        parameters_schema = SchemaValidator.sanitize_schema(parameters_schema)

        return ToolDefinition(
            name=tool_name,
            description=description,
            func=func,
            parameters=parameters_schema,
            args_model=dynamic_params_model,
            terminal=terminal,
        )

    @staticmethod
    def _get_docstring_from_func(func: Callable, tool_name: str) -> str:
        doc = inspect.getdoc(func)
        if not doc:
            msg = f"Tool '{tool_name}' missing docstring. The model needs a description of what the tool does."
            logger.error(msg)
            raise SchemaError(msg)
        return doc

    @staticmethod
    def _build_fields(signature: inspect.Signature, tool_name: str) -> Dict[str, Any]:

        fields: Dict[str, Any] = {}
        for param_name, param in signature.parameters.items():
            if param_name == "self":
                continue
            ft = ToolParameterFactory.build_field_tuple(param_name=param_name, param=param, tool_name=tool_name)
            fields[param_name] = (ft.annotation, ft.field)
        return fields
