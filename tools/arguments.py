# =============================================================================
# tools/arguments.py  -  Tool Argument Validation
# =============================================================================
#
# Each tool declares an ArgumentSpec: which fields are required, which are
# optional, and what Python types each accepts.  validate_arguments() runs
# the whole check up front and returns either
#
#     Ok(values)   - only the fields that were present, unknown keys dropped
#     Err(error)   - a MissingArgumentError / InvalidArgumentError
#
# so every handler consumes arguments the same way and nothing touches the
# network until the arguments are known to be good.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from core.errors import InvalidArgumentError, MissingArgumentError, ToolArgumentError


@dataclass(frozen=True)
class ArgumentKind:
    """Accepted types for a field, plus the wording used in error messages."""

    types: tuple
    description: str
    non_empty: bool = False


STRING = ArgumentKind((str,), "a string")
# Path identifiers; an empty one would address a different endpoint.
NON_EMPTY_STRING = ArgumentKind((str,), "a non-empty string", non_empty=True)
INTEGER = ArgumentKind((int,), "an integer")
BOOLEAN = ArgumentKind((bool,), "a boolean")
ARRAY = ArgumentKind((list,), "an array")
ANY = ArgumentKind((object,), "any value")


@dataclass(frozen=True)
class ArgumentSpec:
    required: Mapping[str, ArgumentKind] = field(default_factory=dict)
    optional: Mapping[str, ArgumentKind] = field(default_factory=dict)


@dataclass(frozen=True)
class Ok:
    values: dict


@dataclass(frozen=True)
class Err:
    error: ToolArgumentError


ValidationResult = Union[Ok, Err]


def _matches(value: Any, kind: ArgumentKind) -> bool:
    # bool is an int subclass; never let True pass as a limit.
    if isinstance(value, bool) and bool not in kind.types:
        return False
    if not isinstance(value, kind.types):
        return False
    return not (kind.non_empty and value == "")


def validate_arguments(
    tool_name: str, arguments: Any, spec: ArgumentSpec,
) -> ValidationResult:
    """Check ``arguments`` against ``spec`` without raising."""
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        return Err(InvalidArgumentError(tool_name, "arguments", "an object"))

    values: dict = {}

    for name, kind in spec.required.items():
        if name not in arguments or arguments[name] is None:
            return Err(MissingArgumentError(tool_name, name))
        if not _matches(arguments[name], kind):
            return Err(InvalidArgumentError(tool_name, name, kind.description))
        values[name] = arguments[name]

    for name, kind in spec.optional.items():
        if name not in arguments or arguments[name] is None:
            continue
        if not _matches(arguments[name], kind):
            return Err(InvalidArgumentError(tool_name, name, kind.description))
        values[name] = arguments[name]

    return Ok(values)
