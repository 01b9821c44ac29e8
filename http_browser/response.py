import json
from http import HTTPStatus
from typing import Dict, List, Optional

from requests import HTTPError

try:
    import chardet
except ImportError:
    import charset_normalizer as chardet

from .structures import HttpValuesMap


class Response:
    """object, which contains the response to an HTTP request."""

    def __init__(self):

        # URL the response is coming from (especially useful with redirects)
        self.url = None

        # Integer Code of responded HTTP Status, e.g. 404 or 200.
        self._status_code = None

        self.encoding = None

        # Case-insensitive map of response header name to every value received for it.
        self._headers = HttpValuesMap()

        # Redirect responses that led to this one, oldest first.
        self.history: List[Response] = []

        self.elapsed = None
        self._content = b""

        # Request that produced this response and the connection it was read from.
        # The response owns the connection until it is closed or handed to the next request.
        self.request = None
        self.connection = None

        self.reason = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __repr__(self):
        return f"<Response [{self.status_code}]>"

    def __bool__(self):
        """Returns True if :attr:`status_code` is less than 400.

        This is **not** a check to see if the response code is ``200 OK``.
        """
        return self.ok

    def __iter__(self):
        return self.iter_content(128)

    @property
    def headers(self) -> HttpValuesMap:
        return self._headers

    @headers.setter
    def headers(self, value):
        self._headers = HttpValuesMap(value)

    def header(self, name: str) -> Optional[str]:
        """First value of header ``name`` or None."""
        return self._headers.first(name)

    def header_values(self, name: str) -> Optional[List[str]]:
        """Every value of a repeated header such as ``Set-Cookie``, in received order, or None."""
        return self._headers.get_all(name)

    @property
    def status_code(self) -> int:
        return self._status_code

    @status_code.setter
    def status_code(self, status_code: int) -> None:
        self._status_code = status_code
        try:
            self.reason = HTTPStatus(status_code).phrase
        except ValueError:
            self.reason = "UNKNOWN"

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def is_redirect(self):
        return "location" in self.headers and self.status_code in (301, 302, 303, 307)

    @property
    def allows_keep_alive(self) -> bool:
        """False when the server announced it closes the connection after this response."""
        connection = self.header("connection")
        return connection is None or connection.strip().lower() != "close"

    @property
    def apparent_encoding(self):
        """The apparent encoding, provided by the charset_normalizer or chardet libraries."""
        encoding = chardet.detect(self.content)["encoding"]
        return encoding if encoding else "utf-8"

    def json(self, **kwargs):
        """parse response body to json (dict/list)"""
        return json.loads(self.text, **kwargs)

    @property
    def content(self) -> bytes:
        """Content of the response, in bytes."""
        return self._content

    @property
    def text(self) -> str:
        encoding = self.encoding

        if not self.content:
            return ""
        if encoding is None:
            encoding = self.apparent_encoding

        try:
            content = str(self.content, encoding, errors="replace")
        except (LookupError, TypeError):
            content = str(self.content, errors="replace")

        return content

    def raise_for_status(self):
        """Raises :class:`HTTPError`, if one occurred."""
        http_error_msg = ""
        if 400 <= self.status_code < 500:
            http_error_msg = (
                f"{self.status_code} Client Error: {self.reason} for url: {self.url}"
            )

        elif 500 <= self.status_code < 600:
            http_error_msg = (
                f"{self.status_code} Server Error: {self.reason} for url: {self.url}"
            )

        if http_error_msg:
            raise HTTPError(http_error_msg, response=self)

    def iter_content(self, chunk_size=1024):
        content = self.content
        for offset in range(0, len(content), chunk_size):
            yield content[offset:offset + chunk_size]

    def iter_lines(self, chunk_size=128, delimiter=None):
        pending = None

        for chunk in self.iter_content(chunk_size=chunk_size):

            chunk = chunk.decode(self.encoding or "utf8", errors="replace")
            if pending is not None:
                chunk = pending + chunk

            if delimiter:
                lines = chunk.split(delimiter)
            else:
                lines = chunk.splitlines()

            if lines and lines[-1] and chunk and lines[-1][-1] == chunk[-1]:
                pending = lines.pop()
            else:
                pending = None

            yield from lines

        if pending is not None:
            yield pending

    def detach_connection(self):
        """Hands the underlying connection over to the caller; the response no longer closes it."""
        connection, self.connection = self.connection, None
        return connection

    def close(self) -> None:
        """Releases the underlying connection. Safe to call more than once."""
        connection = self.detach_connection()
        if connection is not None:
            connection.close()


def _parse_content_type_header(header):
    tokens = header.split(";")
    content_type, params = tokens[0].strip(), tokens[1:]
    params_dict = {}
    items_to_strip = "\"' "

    for param in params:
        param = param.strip()
        if not param:
            continue
        key, value = param, True
        index_of_equals = param.find("=")
        if index_of_equals != -1:
            key = param[:index_of_equals].strip(items_to_strip)
            value = param[index_of_equals + 1:].strip(items_to_strip)
        params_dict[key.lower()] = value
    return content_type, params_dict


def get_encoding_from_headers(headers):
    content_type = headers.first("content-type")

    if not content_type:
        return None

    content_type, params = _parse_content_type_header(content_type)

    if "charset" in params:
        return params["charset"].strip("'\"")

    elif "text" in content_type:
        return "ISO-8859-1"

    elif "application/json" in content_type:
        # Assume UTF-8 based on RFC 4627: https://www.ietf.org/rfc/rfc4627.txt since the charset was unset
        return "utf-8"


def build_response(res: Dict, request=None, connection=None) -> Response:
    """Builds a Response object from the raw dict a :class:`Connection` returns"""
    response = Response()
    # Add target / url
    response.url = res.get("target") or (request.url if request is not None else None)
    # Add status code
    response.status_code = res["status"]
    # Add headers
    response_headers = HttpValuesMap()
    if res.get("headers") is not None:
        for header_key, header_value in res["headers"].items():
            if isinstance(header_value, str):
                response_headers.add(header_key, header_value)
            else:
                for value in header_value:
                    response_headers.add(header_key, value)

    response.encoding = get_encoding_from_headers(response_headers)
    response.headers = response_headers
    # Add response content (bytes)
    body = res.get("body") or b""
    response._content = body.encode("utf-8") if isinstance(body, str) else bytes(body)
    response.request = request
    response.connection = connection
    return response
