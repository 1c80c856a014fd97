"""
Tool metadata, schemas, and runtime validation.
"""

from __future__ import annotations

import asyncio
import contextvars
import difflib
import functools
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from ..exceptions import ToolExecutionError, ToolValidationError

JsonSchema = Dict[str, Any]
ParameterValue = Union[str, int, float, bool, dict, list]
ParamMetadata = Dict[str, Any]


def _python_type_to_json(param_type: type) -> str:
    """Map a Python type to a JSON schema type string."""
    type_map = {
        str: "string",
        int: "integer",
        float: "number",
        bool: "boolean",
        list: "array",
        dict: "object",
    }
    return type_map.get(param_type, "string")


@dataclass
class ToolParameter:
    """
    Schema definition for a single tool parameter.

    Attributes:
        name: Parameter name (should match the function parameter name).
        param_type: Python type (str, int, float, bool, list, dict).
        description: Human-readable description explaining what the parameter does.
        required: Whether this parameter must be provided (default: True).
        enum: Optional list of allowed string values for enumerated parameters.

    Example:
        >>> param = ToolParameter(
        ...     name="amount",
        ...     param_type=float,
        ...     description="Order amount in USD",
        ... )
    """

    name: str
    param_type: type
    description: str
    required: bool = True
    enum: Optional[List[str]] = None

    def to_schema(self) -> JsonSchema:
        """Convert parameter definition to JSON Schema format."""
        schema: JsonSchema = {
            "type": _python_type_to_json(self.param_type),
            "description": self.description,
        }
        if self.enum:
            schema["enum"] = self.enum
        return schema


class Tool:
    """
    A named capability the model can call.

    A Tool wraps a sync or async Python callable together with the
    description and parameter schema advertised to the model. Parameters are
    either declared as ``ToolParameter`` objects (validated before each call)
    or given as a raw JSON schema via ``json_schema`` for caller-supplied
    tools whose arguments are passed through unchecked.

    Attributes:
        name: Unique identifier for the tool within a run.
        description: Human-readable description of what the tool does (used by the model).
        parameters: List of ToolParameter objects defining expected inputs.
        function: The underlying callable. Receives arguments as keyword arguments,
            or as a single dict when ``json_schema`` is used.
        injected_kwargs: Additional kwargs passed to the function (not visible to the model).
        is_async: Whether the underlying function is async (detected automatically).

    Example:
        >>> async def calculate_tax(amount: float) -> dict:
        ...     return {"tax": round(amount * 0.08, 2)}
        >>>
        >>> tax_tool = Tool(
        ...     name="calculate-tax",
        ...     description="Calculates sales tax",
        ...     parameters=[ToolParameter("amount", float, "Order amount")],
        ...     function=calculate_tax,
        ... )
    """

    def __init__(
        self,
        name: str,
        description: str,
        parameters: Optional[List[ToolParameter]] = None,
        function: Optional[Callable[..., Any]] = None,
        *,
        json_schema: Optional[JsonSchema] = None,
        injected_kwargs: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a new Tool.

        Raises:
            ToolValidationError: If the tool definition is invalid.
        """
        self.name = name
        self.description = description
        self.parameters = parameters or []
        self.function = function
        self.json_schema = json_schema
        self.injected_kwargs = injected_kwargs or {}
        self.is_async = inspect.iscoroutinefunction(function)

        # Validate tool definition at registration time
        self._validate_tool_definition()

    def _validate_tool_definition(self) -> None:
        """
        Validate tool definition at registration time to catch errors early.

        Raises:
            ToolValidationError: If the tool definition is invalid
        """
        if not self.name or not self.name.strip():
            raise ToolValidationError(
                tool_name="<unnamed>",
                param_name="name",
                issue="Tool name cannot be empty",
                suggestion="Provide a descriptive name for the tool",
            )

        if not self.description or not self.description.strip():
            raise ToolValidationError(
                tool_name=self.name,
                param_name="description",
                issue="Tool description cannot be empty",
                suggestion="Provide a clear description explaining what the tool does",
            )

        if self.function is None or not callable(self.function):
            raise ToolValidationError(
                tool_name=self.name,
                param_name="function",
                issue="Tool function must be callable",
                suggestion="Pass a sync or async function",
            )

        if self.json_schema is not None and self.parameters:
            raise ToolValidationError(
                tool_name=self.name,
                param_name="json_schema",
                issue="Both 'parameters' and 'json_schema' were given",
                suggestion="Declare parameters one way only",
            )

        param_names = [p.name for p in self.parameters]
        duplicates = [name for name in param_names if param_names.count(name) > 1]
        if duplicates:
            raise ToolValidationError(
                tool_name=self.name,
                param_name=", ".join(sorted(set(duplicates))),
                issue="Duplicate parameter name(s)",
                suggestion="Each parameter must have a unique name",
            )

        supported_types = {str, int, float, bool, list, dict}
        for param in self.parameters:
            if param.param_type not in supported_types:
                type_list = ", ".join(t.__name__ for t in supported_types)
                raise ToolValidationError(
                    tool_name=self.name,
                    param_name=param.name,
                    issue=f"Unsupported parameter type: {param.param_type}",
                    suggestion=f"Use one of: {type_list}",
                )

        if self.json_schema is not None:
            return

        try:
            sig = inspect.signature(self.function)
        except (ValueError, TypeError):
            # Can't inspect signature (built-in function, etc.)
            return

        func_params = sig.parameters
        accepts_var_kwargs = any(
            p.kind is inspect.Parameter.VAR_KEYWORD for p in func_params.values()
        )
        injected_names = set(self.injected_kwargs.keys())

        for param in self.parameters:
            if accepts_var_kwargs:
                break
            if param.name not in func_params and param.name not in injected_names:
                func_param_names = [p for p in func_params.keys() if p not in injected_names]
                suggestion = f"Available function parameters: {', '.join(func_param_names)}"
                if not func_param_names:
                    suggestion = "Function has no parameters"
                raise ToolValidationError(
                    tool_name=self.name,
                    param_name=param.name,
                    issue=f"Parameter '{param.name}' not found in function signature",
                    suggestion=suggestion,
                )

        for param in self.parameters:
            if param.required and param.name in func_params:
                func_param = func_params[param.name]
                if func_param.default != inspect.Parameter.empty:
                    raise ToolValidationError(
                        tool_name=self.name,
                        param_name=param.name,
                        issue=(
                            f"Parameter marked as required but has default value "
                            f"in function: {func_param.default!r}"
                        ),
                        suggestion="Either mark as optional (required=False) or remove default from function",
                    )

    def schema(self) -> JsonSchema:
        """Return a JSON-schema style dict describing this tool."""
        if self.json_schema is not None:
            parameters = dict(self.json_schema)
            parameters.setdefault("type", "object")
            parameters.setdefault("properties", {})
        else:
            parameters = {
                "type": "object",
                "properties": {param.name: param.to_schema() for param in self.parameters},
                "required": [param.name for param in self.parameters if param.required],
            }
        return {"name": self.name, "description": self.description, "parameters": parameters}

    def _validate_single(self, param: ToolParameter, value: ParameterValue) -> Optional[str]:
        """Validate a single parameter, returning an error message if invalid."""
        if value is None:
            return f"Parameter '{param.name}' is None"

        if param.param_type is float:
            if not isinstance(value, (float, int)) or isinstance(value, bool):
                return f"Parameter '{param.name}' must be a number"
            return None

        if param.param_type is int and isinstance(value, bool):
            return f"Parameter '{param.name}' must be of type int, got bool"

        if not isinstance(value, param.param_type):
            return f"Parameter '{param.name}' must be of type {param.param_type.__name__}, got {type(value).__name__}"
        if param.enum and value not in param.enum:
            return f"Parameter '{param.name}' must be one of {param.enum}, got {value!r}"
        return None

    def validate(self, params: Dict[str, Any]) -> None:
        """
        Validate a parameter dictionary against this tool's schema.

        Tools declared with a raw ``json_schema`` are not validated here.

        Raises:
            ToolValidationError: With a close-match suggestion for typos.
        """
        if self.json_schema is not None:
            return

        expected_params = {p.name for p in self.parameters}
        extra_params = set(params.keys()) - expected_params

        if extra_params:
            suggestions = []
            for extra in sorted(extra_params):
                matches = difflib.get_close_matches(extra, expected_params, n=1, cutoff=0.6)
                if matches:
                    suggestions.append(f"'{extra}' -> Did you mean '{matches[0]}'?")
                else:
                    suggestions.append(f"'{extra}' is not a valid parameter")

            expected_list = ", ".join(f"'{p}'" for p in sorted(expected_params))
            raise ToolValidationError(
                tool_name=self.name,
                param_name=", ".join(sorted(extra_params)),
                issue="Unexpected parameter(s)",
                suggestion=f"{'; '.join(suggestions)}\nExpected parameters: {expected_list}",
            )

        for param in self.parameters:
            if param.required and param.name not in params:
                expected_list = ", ".join(f"'{p.name}'" for p in self.parameters if p.required)
                raise ToolValidationError(
                    tool_name=self.name,
                    param_name=param.name,
                    issue="Missing required parameter",
                    suggestion=f"Required parameters: {expected_list}",
                )

            if param.name not in params:
                continue

            error = self._validate_single(param, params[param.name])
            if error:
                raise ToolValidationError(
                    tool_name=self.name,
                    param_name=param.name,
                    issue=error,
                    suggestion=f"Expected type: {param.param_type.__name__}",
                )

    async def ainvoke(self, params: Dict[str, Any]) -> Any:
        """
        Validate parameters then execute the underlying callable.

        Async functions are awaited; sync functions run in the default executor
        so they do not block the event loop. The raw return value is passed back
        unchanged; stringification is the caller's concern.

        Raises:
            ToolValidationError: If ``params`` do not match the declared parameters.
            ToolExecutionError: If the function raises.
        """
        params = dict(params or {})
        self.validate(params)

        if self.json_schema is not None:
            call = functools.partial(self.function, params, **self.injected_kwargs)
        else:
            call_args: Dict[str, Any] = dict(params)
            call_args.update(self.injected_kwargs)
            call = functools.partial(self.function, **call_args)

        try:
            if self.is_async:
                return await call()
            loop = asyncio.get_running_loop()
            context = contextvars.copy_context()
            result = await loop.run_in_executor(None, context.run, call)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as exc:
            raise ToolExecutionError(tool_name=self.name, error=exc, params=params) from exc

    def __repr__(self) -> str:
        return f"Tool(name={self.name!r})"
