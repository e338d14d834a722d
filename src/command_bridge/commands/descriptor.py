"""Command descriptors and reflection-based descriptor construction."""

from __future__ import annotations

import inspect
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from command_bridge.encoding import encode_result
from command_bridge.errors import ExecutionError
from command_bridge.marshal import check_annotation, marshal_arguments

CommandHandler = Callable[..., Any]
DESCRIPTOR_ATTRIBUTE = "__command_descriptor__"

_F = TypeVar("_F", bound=CommandHandler)
_UNSUPPORTED_KINDS = {
    inspect.Parameter.VAR_POSITIONAL: "variadic positional",
    inspect.Parameter.VAR_KEYWORD: "variadic keyword",
    inspect.Parameter.KEYWORD_ONLY: "keyword-only",
}


@dataclass(slots=True, frozen=True)
class Parameter:
    """One declared positional parameter of a command."""

    name: str
    annotation: object
    position: int


@dataclass(slots=True, frozen=True)
class CommandDescriptor:
    """Immutable description of one callable command.

    ``raises`` lists the exception types that form the handler's domain-error
    branch. A descriptor with an empty ``raises`` describes a plain handler.
    """

    name: str
    handler: CommandHandler
    parameters: tuple[Parameter, ...] = ()
    is_async: bool = False
    raises: tuple[type[Exception], ...] = ()

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    @property
    def fallible(self) -> bool:
        return bool(self.raises)

    async def invoke(self, function_name: str, arguments: Sequence[object]) -> object:
        """Decode ``arguments``, run the handler and encode its output."""
        decoded = marshal_arguments(function_name, self.parameters, arguments)
        try:
            output = self.handler(*decoded)
            if self.is_async:
                output = await output
        except self.raises as error:
            raise ExecutionError(error=str(error)) from error
        return encode_result(output)


def describe(
    func: CommandHandler,
    name: str | None = None,
    raises: type[Exception] | Sequence[type[Exception]] = (),
) -> CommandDescriptor:
    """Build a descriptor from a function signature and its type hints."""
    command_name = name or func.__name__
    if not command_name:
        raise ValueError("Command name must be a non-empty string.")
    domain_errors = (raises,) if isinstance(raises, type) else tuple(raises)
    for error_type in domain_errors:
        if not (isinstance(error_type, type) and issubclass(error_type, Exception)):
            raise ValueError(
                f"Command '{command_name}' raises entries must be Exception subclasses."
            )

    hints = typing.get_type_hints(func, include_extras=True)
    parameters: list[Parameter] = []
    for position, parameter in enumerate(inspect.signature(func).parameters.values()):
        unsupported = _UNSUPPORTED_KINDS.get(parameter.kind)
        if unsupported is not None:
            raise ValueError(
                f"Command '{command_name}' cannot declare {unsupported} "
                f"parameter '{parameter.name}'."
            )
        if parameter.name not in hints:
            raise ValueError(
                f"Command '{command_name}' parameter '{parameter.name}' must have a type annotation."
            )
        annotation = hints[parameter.name]
        try:
            check_annotation(annotation)
        except ValueError as error:
            raise ValueError(
                f"Command '{command_name}' parameter '{parameter.name}': {error}"
            ) from error
        parameters.append(Parameter(name=parameter.name, annotation=annotation, position=position))

    return CommandDescriptor(
        name=command_name,
        handler=func,
        parameters=tuple(parameters),
        is_async=inspect.iscoroutinefunction(func),
        raises=domain_errors,
    )


def command(
    func: _F | None = None,
    *,
    name: str | None = None,
    raises: type[Exception] | Sequence[type[Exception]] = (),
) -> Any:
    """Mark a function as a command, attaching its descriptor.

    Usable bare (``@command``) or with options
    (``@command(name="pick", raises=ValueError)``). The function itself is
    returned unchanged apart from the attached descriptor.
    """

    def decorate(target: _F) -> _F:
        setattr(target, DESCRIPTOR_ATTRIBUTE, describe(target, name=name, raises=raises))
        return target

    if func is not None:
        return decorate(func)
    return decorate


def descriptor_of(target: CommandDescriptor | CommandHandler) -> CommandDescriptor:
    """Return the descriptor for a descriptor or a ``@command`` function."""
    if isinstance(target, CommandDescriptor):
        return target
    descriptor = getattr(target, DESCRIPTOR_ATTRIBUTE, None)
    if not isinstance(descriptor, CommandDescriptor):
        raise ValueError(f"{target!r} is not decorated with @command.")
    return descriptor
