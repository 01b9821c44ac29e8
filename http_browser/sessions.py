import logging
from typing import Any, Dict, List, Optional, Union

from .connection import ConnectionProvider, ProxyInfo, RequestsConnectionProvider
from .cookies import CookieStore
from .exceptions import TooManyRedirects
from .redirects import build_redirect_request, classify, resolve_location
from .request import Request
from .response import Response
from .structures import HttpValuesMap
from .utils import preferred_clock

logger = logging.getLogger("http_browser")


class Session:
    """Emulates a browser: keeps cookies between requests and follows redirects.

    Not thread-safe - use one instance per thread.
    """

    def __init__(self,
                 connection_provider: Optional[ConnectionProvider] = None,
                 keep_alive: bool = False,
                 max_redirects: Optional[int] = 20,
                 proxy: Optional[Union[ProxyInfo, str]] = None,
                 headers: Optional[Dict[str, str]] = None,
                 ) -> None:

        # Supplies the connections requests are sent over
        self.connection_provider = connection_provider or RequestsConnectionProvider()

        # Reuse one connection along a redirect chain instead of opening one per hop
        self.keep_alive = keep_alive

        # None follows redirects without limit
        self.max_redirects = max_redirects

        # Headers added to every request that does not set them itself
        self.default_headers = HttpValuesMap()
        for name, value in (headers or {}).items():
            self.add_default_header(name, value)

        # Cookies received so far, sent back with every request
        self.cookies = CookieStore()

        # Last sent request, last received response and the redirects that led to it
        self.request: Optional[Request] = None
        self.response: Optional[Response] = None
        self.history: List[Response] = []

        # Duration of the last send_request call in milliseconds
        self.elapsed_time: int = 0

        if proxy is not None:
            self.use_proxy(proxy)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def set_keep_alive(self, keep_alive: bool) -> "Session":
        self.keep_alive = keep_alive
        return self

    def set_connection_provider(self, connection_provider: ConnectionProvider) -> "Session":
        """Replaces the connection provider; a proxy set earlier stays on the old one."""
        self.connection_provider = connection_provider
        return self

    def use_proxy(self, proxy: Optional[Union[ProxyInfo, str]]) -> "Session":
        self.connection_provider.use_proxy(proxy)
        return self

    def add_default_header(self, name: str, value: str) -> "Session":
        self.default_headers.add(name, value)
        return self

    @property
    def page(self) -> Optional[str]:
        """Body text of the last response."""
        if self.response is None:
            return None
        return self.response.text

    def close(self) -> None:
        """Releases the connection held by the last response."""
        if self.response is not None:
            self.response.close()

    def _add_default_headers(self, request: Request) -> None:
        for name, values in self.default_headers.items():
            if name not in request.headers:
                request.headers[name] = list(values)

    def _open(self, request: Request, previous: Optional[Response]) -> None:
        if not self.keep_alive:
            request.open(self.connection_provider)
        elif previous is None:
            request.open(self.connection_provider).connection_keep_alive(True)
        else:
            request.keep_alive(previous, True)

    def send_request(self, request: Request) -> Response:
        """Sends ``request`` as a browser would and returns the very last response.

        Cookies of the session are added before every hop and read back from
        every response. 301, 302 and 303 are followed with a GET, 307 with the
        original method.
        """
        start = preferred_clock()

        # the connection of the previous call's response is not carried over
        self.close()
        self.response = None
        self.history = []

        try:
            while True:
                self.request = request
                previous = self.response
                self.response = None

                self._add_default_headers(request)
                self.cookies.apply(request)

                try:
                    self._open(request, previous)
                    logger.debug("%s %s", request.method, request.url)
                    response = request.send()
                except BaseException:
                    # no response took ownership of the connection
                    if request.connection is not None:
                        request.connection.close()
                    raise
                self.response = response

                self.cookies.read(response)

                kind = classify(response.status_code)
                if not kind.is_redirect:
                    break

                location = resolve_location(response)
                if self.max_redirects is not None and len(self.history) >= self.max_redirects:
                    raise TooManyRedirects(f"Max redirects ({self.max_redirects}) exceeded")
                self.history.append(response)

                logger.debug("%s redirect (%s) to %s", response.status_code, kind.value, location)
                request = build_redirect_request(request, kind, location)

                if not self.keep_alive:
                    response.close()
        finally:
            self.elapsed_time = int((preferred_clock() - start) * 1000)

        response.history = list(self.history)
        return response

    def execute_request(self,
                        method: str,
                        url: str,
                        params: Optional[Dict] = None,
                        data: Optional[Union[str, bytes, dict]] = None,
                        headers: Optional[Dict] = None,
                        json: Optional[Union[dict, list]] = None,
                        ) -> Response:
        request = Request.build(method, url, params=params, data=data, json=json, headers=headers)
        return self.send_request(request)

    def get(self, url: str, **kwargs: Any) -> Response:
        """Sends a GET request"""
        return self.execute_request(method="GET", url=url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> Response:
        """Sends a OPTIONS request"""
        return self.execute_request(method="OPTIONS", url=url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> Response:
        """Sends a HEAD request"""
        return self.execute_request(method="HEAD", url=url, **kwargs)

    def post(self, url: str, data: Optional[Union[str, dict]] = None, json: Optional[dict] = None, **kwargs: Any) -> Response:
        """Sends a POST request"""
        return self.execute_request(method="POST", url=url, data=data, json=json, **kwargs)

    def put(self, url: str, data: Optional[Union[str, dict]] = None, json: Optional[dict] = None, **kwargs: Any) -> Response:
        """Sends a PUT request"""
        return self.execute_request(method="PUT", url=url, data=data, json=json, **kwargs)

    def patch(self, url: str, data: Optional[Union[str, dict]] = None, json: Optional[dict] = None, **kwargs: Any) -> Response:
        """Sends a PATCH request"""
        return self.execute_request(method="PATCH", url=url, data=data, json=json, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Response:
        """Sends a DELETE request"""
        return self.execute_request(method="DELETE", url=url, **kwargs)
