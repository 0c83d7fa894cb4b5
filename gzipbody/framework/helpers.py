import re
from typing import Dict, List, Optional
from urllib.parse import unquote_to_bytes
from django.http import HttpRequest # type: ignore
from .exceptions import ParameterDecodingDegraded


GZIP_ENCODING = "gzip"
FORM_URLENCODED = "application/x-www-form-urlencoded"
SUPPORTED_METHOD = "POST"

# A "%" not followed by two hex digits
BROKEN_ESCAPE = re.compile(rb"%(?![0-9A-Fa-f]{2})")


def is_gzipped(request: HttpRequest) -> bool:
    # Substring match, so "x-gzip" and "gzip, br" both count.
    content_encoding = request.headers.get("Content-Encoding")
    return content_encoding is not None and GZIP_ENCODING in content_encoding


def is_method_supported(request: HttpRequest) -> bool:
    return request.method == SUPPORTED_METHOD


def is_form_urlencoded(content_type: Optional[str]) -> bool:
    return bool(content_type) and FORM_URLENCODED in content_type


def get_charset(request: HttpRequest, default: str) -> str:
    """
    Returns the charset declared by the request or ``default`` if it declares none.
    """
    return request.encoding or default


def get_native_parameters(request: HttpRequest) -> Dict[str, List[Optional[str]]]:
    """
    Collects the parameters Django parsed itself: the query string first,
    then the POST data, which wins on key collision.
    """
    params = {key: request.GET.getlist(key) for key in request.GET}
    params.update({key: request.POST.getlist(key) for key in request.POST})
    return params


def _decode(raw: bytes, charset: str) -> str:
    if BROKEN_ESCAPE.search(raw):
        raise ParameterDecodingDegraded(charset, f"Malformed percent escape in {raw!r}")
    try:
        return unquote_to_bytes(raw.replace(b"+", b" ")).decode(charset)
    except (LookupError, UnicodeDecodeError) as e:
        raise ParameterDecodingDegraded(charset, f"Could not decode {raw!r} using {charset}: {e}") from e


def _decode_raw(raw: bytes, charset: str) -> str:
    try:
        return raw.decode(charset)
    except (LookupError, UnicodeDecodeError) as e:
        raise ParameterDecodingDegraded(charset, f"Could not decode {raw!r} using {charset}: {e}") from e


def parse_params(body: bytes, charset: str) -> Dict[str, List[Optional[str]]]:
    """
    Parses an ``application/x-www-form-urlencoded`` body.

    Pairs are separated by ``&`` and empty pairs are skipped. A key is only
    unquoted when it is followed by ``=``; a pair without ``=`` (or starting
    with it) is kept verbatim as a key. A pair with nothing after ``=`` gets
    a ``None`` value. Repeated keys keep all their values in order.

    :param body: The decompressed request body.
    :param charset: Charset used to decode the percent-escaped bytes.
    :return: A dict mapping each key to its list of values.
    :raises ParameterDecodingDegraded: If a key or value has a malformed
        percent escape or cannot be decoded.
    """
    params: Dict[str, List[Optional[str]]] = {}
    for pair in body.split(b"&"):
        if not pair:
            continue
        idx = pair.find(b"=")

        if idx > 0:
            key = _decode(pair[:idx], charset)
        else:
            key = _decode_raw(pair, charset)

        if idx > 0 and len(pair) > idx + 1:
            value = _decode(pair[idx + 1:], charset)
        else:
            value = None

        params.setdefault(key, []).append(value)
    return params
