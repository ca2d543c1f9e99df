# =============================================================================
# core/errors.py  -  Error Taxonomy
# =============================================================================
#
# Every failure the server can report derives from OpineError, so the tool
# layer can catch one base class and wrap it with the tool name.
#
#   OpineError
#     ├── SalesforceIdError        (id conversion)
#     │     └── InvalidLengthError
#     │           └── EmptyInputError
#     ├── ToolArgumentError        (dispatch-time validation)
#     │     ├── MissingArgumentError
#     │     └── InvalidArgumentError
#     ├── UnknownToolError
#     ├── RemoteApiError           (non-2xx from the CRM)
#     ├── RemoteConnectionError    (network / timeout)
#     ├── UnexpectedResponseError  (2xx with an unusable body)
#     ├── ConfigError              (startup only)
#     └── ToolExecutionError       (boundary wrapper)
#
# None of these are retried.
# =============================================================================


class OpineError(Exception):
    """Base class for every error raised by this server."""


# -----------------------------------------------------------------------------
# Salesforce id conversion
# -----------------------------------------------------------------------------
class SalesforceIdError(OpineError, ValueError):
    """A Salesforce id could not be normalized."""


class InvalidLengthError(SalesforceIdError):
    def __init__(self, length: int, allowed: tuple[int, ...] = (15, 18)) -> None:
        self.length = length
        self.allowed = allowed
        expected = " or ".join(str(n) for n in allowed)
        super().__init__(
            f"Invalid Salesforce ID length: {length}. Must be {expected} characters."
        )


# An empty id is also a length error (length 0), reported with its own message.
class EmptyInputError(InvalidLengthError):
    def __init__(self) -> None:
        SalesforceIdError.__init__(self, "Salesforce ID cannot be empty")
        self.length = 0
        self.allowed = (15, 18)


# -----------------------------------------------------------------------------
# Dispatch-time validation
# -----------------------------------------------------------------------------
class ToolArgumentError(OpineError):
    """Tool arguments failed validation. Raised before any network call."""


class MissingArgumentError(ToolArgumentError):
    def __init__(self, tool_name: str, field: str) -> None:
        self.tool_name = tool_name
        self.field = field
        super().__init__(f"{tool_name}: missing required argument '{field}'")


class InvalidArgumentError(ToolArgumentError):
    def __init__(self, tool_name: str, field: str, expected: str) -> None:
        self.tool_name = tool_name
        self.field = field
        self.expected = expected
        super().__init__(f"{tool_name}: argument '{field}' must be {expected}")


class UnknownToolError(OpineError):
    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


# -----------------------------------------------------------------------------
# Remote API
# -----------------------------------------------------------------------------
class RemoteApiError(OpineError):
    """The CRM answered with a non-success status. Status is kept verbatim."""

    def __init__(self, status_code: int, reason: str) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Opine API error: {status_code} {reason}")


class RemoteConnectionError(OpineError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""


class UnexpectedResponseError(OpineError):
    """A success response whose body does not have the expected shape."""


class ConfigError(OpineError):
    """Process configuration is missing or malformed."""


# -----------------------------------------------------------------------------
# Boundary wrapper
# -----------------------------------------------------------------------------
class ToolExecutionError(OpineError):
    """Any error raised while executing a tool, tagged with the tool name."""

    def __init__(self, tool_name: str, cause: Exception) -> None:
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"Error executing {tool_name}: {cause}")
