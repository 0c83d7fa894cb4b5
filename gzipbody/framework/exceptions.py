class GzipBodyError(Exception):
    """Base exception for gzip request body handling."""
    pass


class MethodNotSupportedForCompressedBody(GzipBodyError):
    """Raised when a request other than POST declares a gzipped body."""

    def __init__(self, method: str):
        super().__init__(
            f"{method} requests do not support gzipped bodies. "
            "Only POST requests are currently supported."
        )
        self.method = method


class MalformedCompressedBody(GzipBodyError):
    """Raised when a body declared as gzip cannot be decompressed."""
    pass


class ParameterDecodingDegraded(GzipBodyError):
    """Raised when form parameters cannot be decoded from the body."""

    def __init__(self, charset: str, message: str = ""):
        super().__init__(message or f"Could not decode form parameters using {charset}")
        self.charset = charset
