import logging
from datetime import timedelta
from typing import Dict, Optional, Union

from .connection import Connection, ConnectionProvider, RequestsConnectionProvider
from .response import Response, build_response
from .structures import HttpValuesMap
from .utils import host_url, preferred_clock, prepare_request_body, prepare_url

logger = logging.getLogger("http_browser")


class Request:
    """An outgoing HTTP request and the connection it is sent over."""

    def __init__(self,
                 method: str = "GET",
                 url: Optional[str] = None,
                 headers: Optional[Union[Dict, HttpValuesMap]] = None,
                 body: Optional[Union[str, bytes]] = None,
                 ) -> None:
        self.method = method.upper()
        self.url = url
        self.headers = HttpValuesMap(headers) if headers else HttpValuesMap()
        self.body = body

        self.connection: Optional[Connection] = None
        self.connection_provider: Optional[ConnectionProvider] = None
        self._keep_alive = False

    def __repr__(self):
        return f"<Request [{self.method} {self.url}]>"

    @classmethod
    def build(cls,
              method: str,
              url: str,
              params: Optional[Dict] = None,
              data: Optional[Union[str, bytes, dict]] = None,
              json: Optional[Union[dict, list]] = None,
              headers: Optional[Dict] = None,
              ) -> "Request":
        body, content_type = prepare_request_body(data, json)
        request = cls(method, prepare_url(url, params), headers=headers, body=body)
        if content_type is not None and "Content-Type" not in request.headers:
            request.header("Content-Type", content_type)
        return request

    @classmethod
    def get(cls, url: str, **kwargs) -> "Request":
        return cls.build("GET", url, **kwargs)

    @classmethod
    def head(cls, url: str, **kwargs) -> "Request":
        return cls.build("HEAD", url, **kwargs)

    @classmethod
    def options(cls, url: str, **kwargs) -> "Request":
        return cls.build("OPTIONS", url, **kwargs)

    @classmethod
    def post(cls, url: str, **kwargs) -> "Request":
        return cls.build("POST", url, **kwargs)

    @classmethod
    def put(cls, url: str, **kwargs) -> "Request":
        return cls.build("PUT", url, **kwargs)

    @classmethod
    def patch(cls, url: str, **kwargs) -> "Request":
        return cls.build("PATCH", url, **kwargs)

    @classmethod
    def delete(cls, url: str, **kwargs) -> "Request":
        return cls.build("DELETE", url, **kwargs)

    def header(self, name: str, value: str, overwrite: bool = False) -> "Request":
        """Adds a header value; ``overwrite`` replaces every existing value of ``name``."""
        if overwrite:
            self.headers.set(name, value)
        else:
            self.headers.add(name, value)
        return self

    def host_url(self) -> str:
        """Scheme, host and port of the target, e.g. ``https://example.com:8443``."""
        return host_url(self.url)

    @property
    def is_keep_alive(self) -> bool:
        return self._keep_alive

    def open(self, provider: ConnectionProvider) -> "Request":
        """Opens a new connection for this request."""
        self.connection_provider = provider
        self.connection = provider.open(self)
        return self

    def connection_keep_alive(self, enable: bool) -> "Request":
        """Asks the server to keep the connection open after the response."""
        self._keep_alive = enable
        return self

    def keep_alive(self, previous_response: Response, enable: bool) -> "Request":
        """Continues on the connection of ``previous_response``.

        When the server closed that connection, a new one is opened from the
        same provider instead.
        """
        previous_request = previous_response.request
        provider = previous_request.connection_provider if previous_request is not None else None

        connection = previous_response.connection
        if connection is not None and not connection.closed and previous_response.allows_keep_alive:
            self.connection = previous_response.detach_connection()
            self.connection_provider = provider
            logger.debug("Reusing connection %s for %s", hex(id(self.connection)), self.url)
        else:
            previous_response.close()
            self.open(provider or RequestsConnectionProvider())

        return self.connection_keep_alive(enable)

    def send(self) -> Response:
        """Sends the request over its connection, opening a default one if needed."""
        if self.connection is None:
            self.open(RequestsConnectionProvider())

        if "Connection" not in self.headers:
            self.headers.set("Connection", "keep-alive" if self._keep_alive else "close")

        start = preferred_clock()
        res = self.connection.send(self)
        response = build_response(res, request=self, connection=self.connection)
        response.elapsed = timedelta(seconds=preferred_clock() - start)
        return response
