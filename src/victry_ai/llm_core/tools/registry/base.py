"""Tool descriptor construction and the tool registry."""

import copy
import functools
import inspect
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, Union, cast

import jsonref  # type: ignore
from pydantic import BaseModel, create_model

from ..models import ToolDefinition, ToolDescriptor, ToolHandler
from ..schema import SchemaValidator, ToolParameterFactory
from ...exceptions import ToolNotFoundError, ToolRegistrationError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)


def create_tool(name: str, description: str, input_schema: Mapping[str, Any]) -> ToolDescriptor:
    """Create a tool descriptor for Claude.

    Args:
        name: The name of the tool. Must not be empty.
        description: Description of what the tool does.
        input_schema: JSON schema for the tool's input.

    Returns:
        The immutable tool descriptor.

    Raises:
        ToolValidationError: If ``name`` is empty.
    """
    if not name:
        raise ToolValidationError("Tool name must not be empty.")
    return ToolDescriptor(name=name, description=description, input_schema=input_schema)


def convert_to_provider_tool(tool: ToolDescriptor) -> Dict[str, Any]:
    """Convert a tool descriptor to the Anthropic SDK tool format.

    Only field names change. The schema is handed out as a copy so the descriptor stays intact.
    """
    return {
        "name": tool.name,
        "description": tool.description,
        "input_schema": copy.deepcopy(tool.input_schema),
    }


class ToolRegistry:
    """
    A registry of tools together with the local handlers that execute them.

    The registry hands out the descriptors sent to Claude (``descriptors`` /
    ``provider_tools``) and the name -> handler mapping used by the executor
    (``handlers``). Handlers always receive the call arguments as a single dict.
    """

    def __init__(self) -> None:
        """Initialize an empty ToolRegistry."""
        self.tools: Dict[str, ToolDefinition] = {}

    def register(
        self,
        name_or_tool: Union[str, ToolDescriptor, ToolDefinition, Callable],
        description: Optional[str] = None,
        func: Optional[ToolHandler] = None,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Register a new tool.

        Accepted forms:
        1. A `ToolDefinition`.
        2. A `ToolDescriptor` plus ``func``, a handler taking the arguments dict.
        3. A name, ``description``, ``func`` (arguments-dict handler) and ``parameters`` (JSON schema).
        4. A function, or a name plus a function, whose keyword parameters are annotated as
           ``Annotated[T, Field(description=...)]``. The input schema is generated from the
           signature and the description defaults to the docstring.

        Args:
            name_or_tool: A `ToolDefinition`, a `ToolDescriptor`, the name of the tool, or a Callable.
            description: What the tool does. Required with an explicit ``parameters`` schema.
            func: The handler implementing the tool.
            parameters: JSON schema of the tool's input. If None, it is inferred from ``func``.

        Raises:
            ToolRegistrationError: If arguments are missing or the tool already exists.
        """
        if isinstance(name_or_tool, ToolDefinition):
            tool = name_or_tool
        elif isinstance(name_or_tool, ToolDescriptor):
            if func is None:
                raise ToolRegistrationError("If passing a ToolDescriptor, func is required.")
            tool = ToolDefinition(descriptor=name_or_tool, func=func)
        elif callable(name_or_tool):
            tool = self._generate_tool_definition(name_or_tool, description=description)
        else:
            if func is None:
                raise ToolRegistrationError("If passing name as string, func is required.")

            if parameters is None:
                tool = self._generate_tool_definition(func, name=name_or_tool, description=description)
            else:
                if description is None:
                    raise ToolRegistrationError("If passing name and parameters, description is required.")
                tool = ToolDefinition(descriptor=create_tool(name_or_tool, description, parameters), func=func)

        if tool.name in self.tools:
            msg = f"Tool '{tool.name}' is already registered."
            logger.error(msg)
            raise ToolRegistrationError(msg)

        self.tools[tool.name] = tool
        logger.info("Successfully registered tool: '%s'", tool.name)

    def unregister(self, tool_name: str) -> None:
        """Unregister a tool from the registry.

        Raises:
            ToolNotFoundError: If the tool does not exist in the registry.
        """
        if tool_name not in self.tools:
            raise ToolNotFoundError(f"Tool '{tool_name}' not found in the registry.")
        del self.tools[tool_name]
        logger.info("Successfully unregistered tool: '%s'", tool_name)

    def tool(self, func: Callable) -> Callable:
        """A decorator to turn a function into a tool.

        Args:
            func: The function to decorate.

        Returns:
            The original function, after registering it as a tool.
        """
        self.register(func)
        return func

    @property
    def descriptors(self) -> List[ToolDescriptor]:
        """Descriptors of all registered tools, in registration order."""
        return [tool.descriptor for tool in self.tools.values()]

    @property
    def provider_tools(self) -> List[Dict[str, Any]]:
        """All registered tools in the Anthropic SDK format."""
        return [convert_to_provider_tool(tool.descriptor) for tool in self.tools.values()]

    @property
    def handlers(self) -> Dict[str, ToolHandler]:
        """Returns a dictionary mapping tool names to their handlers."""
        return {name: tool.func for name, tool in self.tools.items()}

    def select_handlers(self, names: List[str]) -> Dict[str, ToolHandler]:
        """Returns the handlers for the given names. Unknown names are skipped."""
        handlers = self.handlers
        selected = {name: handlers[name] for name in names if name in handlers}
        missing = [name for name in names if name not in handlers]
        if missing:
            logger.debug("No registered handler for requested tool(s): %s", ", ".join(missing))
        return selected

    def _generate_tool_definition(
        self, func: Callable, name: Optional[str] = None, description: Optional[str] = None
    ) -> ToolDefinition:
        """Generate a ToolDefinition from a keyword-argument function.

        Raises:
            ToolValidationError: If the function is missing a docstring or parameter descriptions.
        """
        tool_name = name or func.__name__
        if description is None:
            description = self._get_docstring_from_func(func, tool_name)

        fields = self._build_fields(inspect.signature(func), tool_name)

        # create_model expects **field_definitions: Any
        args_model = create_model(f"{tool_name}Params", **cast(Dict[str, Any], fields))
        raw_schema = args_model.model_json_schema()
        SchemaValidator.assert_no_recursive_refs(raw_schema)

        # proxies=False ensures we get a plain dict back, not JsonRef objects
        input_schema = SchemaValidator.sanitize_schema(jsonref.replace_refs(raw_schema, proxies=False))

        return ToolDefinition(
            descriptor=create_tool(tool_name, description, input_schema),
            func=_keyword_handler(func, args_model),
            args_model=args_model,
        )

    @staticmethod
    def _get_docstring_from_func(func: Callable, tool_name: str) -> str:
        doc = inspect.getdoc(func)
        if not doc:
            msg = f"Tool '{tool_name}' missing docstring. Claude needs a description of what the tool does."
            logger.error(msg)
            raise ToolValidationError(msg)
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


def _keyword_handler(func: Callable, args_model: Type[BaseModel]) -> ToolHandler:
    """Adapt a keyword-argument function to the arguments-dict handler convention.

    Arguments are validated and coerced through ``args_model`` first; validation errors
    propagate to the executor like any other handler failure.
    """

    def bind(arguments: Mapping[str, Any]) -> Dict[str, Any]:
        validated = args_model(**(arguments or {}))
        return {field_name: getattr(validated, field_name) for field_name in type(validated).model_fields}

    if inspect.iscoroutinefunction(func):

        async def async_handler(arguments: Mapping[str, Any]) -> Any:
            return await func(**bind(arguments))

        return functools.wraps(func)(async_handler)

    def handler(arguments: Mapping[str, Any]) -> Any:
        return func(**bind(arguments))

    return functools.wraps(func)(handler)
