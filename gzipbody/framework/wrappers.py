import logging
import zlib
from typing import Dict, List, Optional
from django.core.exceptions import RequestDataTooBig # type: ignore
from django.http import HttpRequest, QueryDict # type: ignore
from .exceptions import MalformedCompressedBody, ParameterDecodingDegraded
from .helpers import get_charset, get_native_parameters, is_form_urlencoded, parse_params
from .settings import GzipBodySettings
from .streams import BufferedBodyStream

# gzip header and trailer around a deflate stream
GZIP_WBITS = 16 + zlib.MAX_WBITS
GZIP_MAGIC = b"\x1f\x8b"
CHUNK_SIZE = 64 * 1024


class GzippedRequestWrapper:
    """
    Wraps a request whose body is gzipped.

    The whole body is inflated once, when the wrapper is built, and kept in
    memory. The original request stream is consumed at that point and is never
    read again; the wrapper serves the decompressed bytes instead and reparses
    ``application/x-www-form-urlencoded`` parameters from them.

    The body and parameter accessors are overridden here, everything else is
    looked up on the wrapped request. Attributes assigned on the wrapper stay
    on the wrapper.
    """

    def __init__(self, request: HttpRequest, config: GzipBodySettings = None, logger: logging.Logger = None):
        """
        :param request: The request to wrap. Its body must be gzipped.
        :param config: Middleware settings, read from Django settings when omitted.
        :param logger: Logger receiving parameter decoding failures.
        :raises MalformedCompressedBody: If the body is not valid gzip data.
        :raises RequestDataTooBig: If the inflated body exceeds ``MAX_SIZE``.
        """
        self._request = request
        self.config = config or GzipBodySettings()
        self._logger = logger or logging.getLogger(__name__)
        self._bytes = self._inflate(request, self.config.MAX_SIZE)
        self._stream = BufferedBodyStream(self._bytes)

    @staticmethod
    def _inflate(request, max_size: Optional[int] = None) -> bytes:
        """
        Inflates every gzip member of the request body.

        Bytes after a member that do not start with the gzip magic number are
        ignored. An empty or truncated body inflates to ``b""``.
        """
        inflated = bytearray()
        decompressor = zlib.decompressobj(GZIP_WBITS)
        data = request.read(CHUNK_SIZE)
        while data:
            # max_length 0 means unbounded
            room = 0 if max_size is None else max_size + 1 - len(inflated)
            try:
                inflated += decompressor.decompress(data, room)
            except zlib.error as e:
                raise MalformedCompressedBody(f"Request body is not valid gzip data: {e}") from e

            if max_size is not None and len(inflated) > max_size:
                raise RequestDataTooBig(
                    f"Decompressed request body exceeded GZIP_BODY['MAX_SIZE'] ({max_size} bytes)."
                )

            if decompressor.unconsumed_tail:
                data = decompressor.unconsumed_tail
            elif decompressor.eof:
                data = decompressor.unused_data
                if len(data) < len(GZIP_MAGIC):
                    data += request.read(CHUNK_SIZE)
                if not data.startswith(GZIP_MAGIC):
                    return bytes(inflated)
                decompressor = zlib.decompressobj(GZIP_WBITS)
            else:
                data = request.read(CHUNK_SIZE)

        if not decompressor.eof:
            # Empty or truncated member
            return b""
        return bytes(inflated)

    def __getattr__(self, name):
        try:
            request = self.__dict__["_request"]
        except KeyError:
            raise AttributeError(name)
        return getattr(request, name)

    @property
    def __class__(self):
        # Lets isinstance(wrapper, HttpRequest) hold for code that checks it
        return self._request.__class__

    def __repr__(self):
        return f"<GzippedRequestWrapper: {self._request!r} ({len(self._bytes)} bytes)>"

    # --- Body ---

    @property
    def body(self) -> bytes:
        return self._bytes

    def get_input_stream(self) -> BufferedBodyStream:
        """
        Returns a new cursor over the decompressed body.

        Each call yields an independent stream starting at the first byte, so
        the body can be read any number of times.
        """
        return BufferedBodyStream(self._bytes)

    def read(self, *args, **kwargs):
        return self._stream.read(*args, **kwargs)

    def readline(self, *args, **kwargs):
        return self._stream.readline(*args, **kwargs)

    def readlines(self):
        return list(self)

    def __iter__(self):
        return iter(self.readline, b"")

    def close(self):
        self._stream.close()
        self._request.close()

    # --- Parameters ---

    @property
    def encoding(self):
        return self._request.encoding

    @encoding.setter
    def encoding(self, value):
        # The wrapped request drops its own GET and POST, drop ours too
        self._request.encoding = value
        self.__dict__.pop("_post", None)

    @property
    def charset(self) -> str:
        return get_charset(self, self.config.DEFAULT_CHARSET)

    def is_form_urlencoded(self) -> bool:
        return is_form_urlencoded(self._request.headers.get("Content-Type"))

    def get_parameter_map(self) -> Dict[str, List[Optional[str]]]:
        """
        Returns the request parameters as a dict of value lists.

        For form-urlencoded bodies the parameters parsed from the decompressed
        body are merged over the ones Django parsed, replacing them on key
        collision. Any other content type gets Django's parameters untouched.
        """
        native = get_native_parameters(self._request)
        if not self.is_form_urlencoded():
            return native
        return self._merge_body_params(native)

    @property
    def POST(self) -> QueryDict:
        if "_post" not in self.__dict__:
            self._post = self._load_post()
        return self._post

    @POST.setter
    def POST(self, value):
        self._post = value

    def _load_post(self) -> QueryDict:
        if not self.is_form_urlencoded():
            return self._request.POST

        native = {key: self._request.POST.getlist(key) for key in self._request.POST}
        params = self._merge_body_params(native)

        post = QueryDict(mutable=True, encoding=self.charset)
        for key, values in params.items():
            post.setlist(key, values)
        post._mutable = False
        return post

    def _merge_body_params(self, native: Dict[str, List[Optional[str]]]) -> Dict[str, List[Optional[str]]]:
        params = dict(native)
        try:
            parsed = parse_params(self._bytes, self.charset)
        except ParameterDecodingDegraded as e:
            self._logger.error(
                "Could not decode gzipped form parameters of %s, falling back to request parameters: %s",
                self._request.path, e, exc_info=True,
            )
            return params
        params.update(parsed)
        return params
