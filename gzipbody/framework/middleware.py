import logging
import time
from django.core.exceptions import MiddlewareNotUsed # type: ignore
from .exceptions import MethodNotSupportedForCompressedBody
from .helpers import is_gzipped, is_method_supported
from .settings import GzipBodySettings
from .wrappers import GzippedRequestWrapper


class DecompressGZipMiddleware:
    """
    Decompresses the request body if Content-Encoding contains gzip, so views
    and parsers further down the chain read plain bytes and form parameters.

    Only POST requests may carry a gzipped body; any other method declaring
    one is rejected before its body is read.
    """
    def __init__(self, get_response, logger: logging.Logger = None, config: GzipBodySettings = None):
        self.get_response = get_response
        self.logger = logger or logging.getLogger(__name__)
        self.config = (config or GzipBodySettings()).validate()
        if not self.config.ENABLED:
            raise MiddlewareNotUsed("Gzip request body decompression is disabled.")

    def __call__(self, request):
        return self.get_response(self.wrap_request(request))

    def wrap_request(self, request):
        """
        Returns the request to hand on: a GzippedRequestWrapper for gzipped
        POST bodies, the request itself otherwise.

        :raises MethodNotSupportedForCompressedBody: If a non-POST request is gzipped.
        """
        gzipped = is_gzipped(request)
        supported = is_method_supported(request)
        if gzipped and not supported:
            raise MethodNotSupportedForCompressedBody(request.method)

        if gzipped:
            self.logger.debug("Decompressing POST request to %s", request.path)
            started = time.perf_counter()
            request = GzippedRequestWrapper(request, config=self.config, logger=self.logger)
            self.logger.debug(
                "POST request to %s decompressed successfully in %.2f ms",
                request.path, (time.perf_counter() - started) * 1000,
            )
        elif supported:
            self.logger.debug("POST body to %s does not require decompression. Skipping filter", request.path)
        return request
