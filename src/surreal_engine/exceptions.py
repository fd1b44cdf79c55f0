"""
SurrealDB Engine Exceptions.

Custom exception hierarchy for the engine and its collaborators.
"""


class SurrealError(Exception):
    """Base exception for all SurrealDB engine errors."""

    def __init__(self, message: str, code: int | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


class ConnectionUnavailable(SurrealError):
    """Raised when an RPC is attempted without a recorded endpoint."""

    def __init__(self, message: str = "There is no connection available at this moment."):
        super().__init__(message)


class MissingNamespaceDatabase(SurrealError):
    """Raised when a method needs a namespace and database but none are selected."""

    def __init__(self, message: str = "There is no namespace and/or database selected."):
        super().__init__(message)


class EngineDisconnected(SurrealError):
    """Raised by transports that lose their connection mid-flight."""

    def __init__(self, message: str = "The engine reported the connection to SurrealDB has dropped."):
        super().__init__(message)


class HttpConnectionError(SurrealError):
    """
    Raised when the server answers an RPC with a non-200 HTTP status.

    Attributes:
        status: HTTP status code
        status_text: HTTP reason phrase
        buffer: Raw response body
    """

    def __init__(self, message: str, status: int, status_text: str, buffer: bytes):
        self.status = status
        self.status_text = status_text
        self.buffer = buffer
        super().__init__(message, code=status)


class ResponseError(SurrealError):
    """Raised when an RPC response carries an error instead of a result."""

    pass


class VersionRetrievalFailure(SurrealError):
    """Raised when the remote version cannot be fetched or parsed."""

    def __init__(self, message: str = "Failed to retrieve remote version.", cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class UnsupportedVersion(SurrealError):
    """Raised when the remote server runs a version outside the supported range."""

    def __init__(self, version: str, supported_range: str):
        self.version = version
        self.supported_range = supported_range
        super().__init__(
            f"The version {version} reported by the server is unsupported. "
            f"Expected a version that satisfies {supported_range}."
        )
