import io


class BufferedBodyStream(io.BytesIO):
    """
    A read-only cursor over a buffered request body.

    Every cursor keeps its own position, so several of them can be opened
    over the same bytes and drained independently.
    """

    def __init__(self, data: bytes = b""):
        super().__init__(data)
        self._size = len(data)

    @property
    def remaining(self) -> int:
        """Number of bytes not read yet."""
        if self.closed:
            return 0
        return max(self._size - self.tell(), 0)

    def is_finished(self) -> bool:
        return self.remaining <= 0

    def is_ready(self) -> bool:
        return self.remaining > 0

    def writable(self) -> bool:
        return False

    def write(self, data):
        raise io.UnsupportedOperation("BufferedBodyStream is read-only")

    def writelines(self, lines):
        raise io.UnsupportedOperation("BufferedBodyStream is read-only")

    def truncate(self, size=None):
        raise io.UnsupportedOperation("BufferedBodyStream is read-only")
