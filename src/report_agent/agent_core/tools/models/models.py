from typing import Optional, Any, Callable, Dict, Type

from pydantic import BaseModel


class ToolDefinition(BaseModel):
    """
    Represents the definition of a tool that can be offered to the model.

    Attributes:
        name: The unique name of the tool.
        description: A brief description of what the tool does.
        func: The callable implementing the tool's logic (sync or async).
        parameters: JSON schema of the tool's input object.
        args_model: Optional Pydantic model used for validating and coercing arguments.
        terminal: Whether a successful call produces the run's artifact and ends the run.
    """

    name: str
    description: str
    func: Callable
    parameters: Optional[Dict[str, Any]] = None
    args_model: Optional[Type[BaseModel]] = None
    terminal: bool = False

    def declaration(self) -> Dict[str, Any]:
        """Provider-agnostic declaration sent with each model request."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters or {"type": "object", "properties": {}},
        }
