"""Route validated tool calls to their handlers and normalize every outcome into a ToolResult."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..models import ToolCall, ToolResult, ValidationFailure
from ..registry import ToolRegistry
from ...exceptions import ProviderError, RenderError, SearchError, TransportError
from ...logger import get_logger

logger = get_logger(__name__)


class ToolDispatcher:
    """Executes one tool call at a time against a ToolRegistry.

    Validation failures, unknown tools and handler failures become error results that
    are reported back to the model. Only transport and rendering failures are fatal
    and propagate to the caller.
    """

    # Failures that end the run instead of being reported to the model.
    FATAL_ERRORS = (TransportError, RenderError)

    def __init__(self, registry: ToolRegistry, *, tool_timeout: Optional[float] = None) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Tool registry used to validate calls and resolve handlers.
            tool_timeout: Optional deadline in seconds for coroutine handlers.
        """
        self._registry = registry
        self._tool_timeout = tool_timeout

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, call: ToolCall) -> ToolResult:
        """Handle a single tool call.

        Args:
            call: The tool call emitted by the model.

        Returns:
            The result of the call, successful or not.

        Raises:
            TransportError: If a handler loses its connection to the model endpoint.
            RenderError: If the terminal handler cannot persist the artifact.
        """
        logger.debug(f"Handling tool call: {call.name} (ID: {call.id})")

        validated = self._registry.validate(call.name, call.input)
        if isinstance(validated, ValidationFailure):
            return self._validation_result(call, validated)

        tool_def = self._registry.get(call.name)

        try:
            logger.info(f"Executing tool '{call.name}'...")
            function_result = await self._execute_tool(tool_def.func, validated)
        except self.FATAL_ERRORS:
            logger.error(f"Fatal error in tool '{call.name}'.", exc_info=True)
            raise
        except ProviderError as exc:
            logger.warning(f"Provider could not resolve '{call.name}': {exc}")
            return ToolResult.failure(call, "provider", str(exc), exc.guidance)
        except SearchError as exc:
            logger.warning(f"Web search failed in '{call.name}': {exc}")
            return ToolResult.failure(call, "search", str(exc))
        except asyncio.TimeoutError as exc:
            if self._tool_timeout is None or not inspect.iscoroutinefunction(tool_def.func):
                # Raised by the handler itself, not by the deadline
                return self._execution_failure(call, exc)
            msg = f"Tool execution timed out after {self._tool_timeout} seconds."
            logger.warning(f"Timeout in '{call.name}': {msg}")
            return ToolResult.failure(call, "timeout", msg)
        except Exception as exc:
            return self._execution_failure(call, exc)

        logger.info(f"Tool '{call.name}' executed successfully.")
        return ToolResult.success(call, self._normalize_payload(function_result), terminal=tool_def.terminal)

    @staticmethod
    def _execution_failure(call: ToolCall, exc: Exception) -> ToolResult:
        logger.warning(f"Recoverable error in '{call.name}': {exc} ({type(exc).__name__})", exc_info=True)
        return ToolResult.failure(call, "execution", f"Error executing '{call.name}': {exc}")

    @staticmethod
    def _validation_result(call: ToolCall, failure: ValidationFailure) -> ToolResult:
        if failure.kind == "unknown_tool":
            logger.warning(f"Tool '{call.name}' not found in registry.")
            return ToolResult.failure(call, "unknown_tool", failure.message)

        logger.warning(f"Validation error for '{call.name}': {failure.message}")
        return ToolResult.failure(call, failure.kind, failure.message, {"fields": list(failure.fields)})

    async def _execute_tool(self, tool_function: Any, function_args: Dict[str, Any]) -> Any:
        """Run a handler inline, awaiting it when it is a coroutine function."""
        if inspect.iscoroutinefunction(tool_function):
            if self._tool_timeout is None:
                return await tool_function(**function_args)
            return await asyncio.wait_for(tool_function(**function_args), timeout=self._tool_timeout)

        return tool_function(**function_args)

    @staticmethod
    def _normalize_payload(result: Any) -> Dict[str, Any]:
        if isinstance(result, BaseModel):
            return result.model_dump(mode="json")
        if isinstance(result, dict):
            return result
        if isinstance(result, (list, tuple)):
            return {"items": list(result)}
        return {"result": result}
