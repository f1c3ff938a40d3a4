"""Binding resolution errors.

All of these are caught inside resolve_binding and reported as
success=False with the error message, unless the binding's onError
policy is `propagate`.
"""


class BindingError(Exception):
    """Base class for a failed binding resolution."""


class MissingConfiguration(BindingError):
    """A required query field is absent from a binding."""

    def __init__(self, source: str, field: str):
        self.source = source
        self.field = field
        super().__init__(f"{source} binding requires {field}")


class UnknownSourceType(BindingError):
    """binding.source does not name a known data source."""

    def __init__(self, source: object):
        self.source = source
        super().__init__(f"Unknown data source type: {source}")


class TimeoutExceeded(BindingError):
    """The per-binding timeout elapsed before the fetch completed."""

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        super().__init__(f"Timeout after {timeout_ms:g}ms")


class Aborted(BindingError):
    """The caller's cancellation signal fired before the fetch completed."""

    def __init__(self):
        super().__init__("Aborted")


class FetchFailed(BindingError):
    """A fetcher raised. The message is the fetcher's, verbatim."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class TransformFailed(BindingError):
    """A registered transform raised while post-processing data."""

    def __init__(self, name: str, cause: BaseException):
        self.name = name
        self.cause = cause
        super().__init__(f"Transform '{name}' failed: {str(cause) or type(cause).__name__}")
