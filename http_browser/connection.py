import logging
import urllib.parse
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import requests

from .exceptions import TransportFailure

logger = logging.getLogger("http_browser")


@dataclass
class ProxyInfo:
    """Proxy a connection provider routes its connections through.

    Example:
        ProxyInfo("http", "10.0.0.1", 3128, "user", "pass")
        ProxyInfo.from_url("socks5://10.0.0.1:1080")
    """

    proxy_type: str
    host: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_url(cls, url: str) -> "ProxyInfo":
        parts = urllib.parse.urlsplit(url)
        if not parts.scheme or not parts.hostname or parts.port is None:
            raise ValueError(f"proxy url needs scheme, host and port: {url!r}")
        return cls(
            proxy_type=parts.scheme,
            host=parts.hostname,
            port=parts.port,
            username=urllib.parse.unquote(parts.username) if parts.username else None,
            password=urllib.parse.unquote(parts.password) if parts.password else None,
        )

    def url(self) -> str:
        credentials = ""
        if self.username is not None:
            credentials = urllib.parse.quote(self.username, safe="")
            if self.password is not None:
                credentials += ":" + urllib.parse.quote(self.password, safe="")
            credentials += "@"
        return f"{self.proxy_type}://{credentials}{self.host}:{self.port}"


class Connection(ABC):
    """One transport connection; sends requests and yields raw response dicts.

    ``send`` returns ``{"target": url, "status": int, "headers": {name: [values]}, "body": bytes}``.
    """

    @abstractmethod
    def send(self, request) -> Dict:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        ...


class ConnectionProvider(ABC):
    """Opens connections for requests."""

    @abstractmethod
    def open(self, request) -> Connection:
        ...

    @abstractmethod
    def use_proxy(self, proxy_info: Optional[ProxyInfo]) -> None:
        ...


class RequestsConnection(Connection):
    """Connection backed by a dedicated :class:`requests.Session`.

    The session's adapter holds the socket, so the connection stays reusable
    between requests until :meth:`close` tears the session down. Redirects and
    cookies are left to the browser session; requests only moves bytes.
    """

    def __init__(self, session: requests.Session, timeout: int, verify: bool,
                 proxies: Optional[Dict[str, str]] = None) -> None:
        self._session = session
        self.timeout = timeout
        self.verify = verify
        self.proxies = proxies or {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, request) -> Dict:
        if self._closed:
            raise TransportFailure(f"connection closed, cannot send {request.method} {request.url}")

        prepared = requests.Request(
            method=request.method,
            url=request.url,
            headers=dict(request.headers.flatten()),
            data=request.body,
        ).prepare()

        try:
            response = self._session.send(
                prepared,
                allow_redirects=False,
                timeout=self.timeout,
                verify=self.verify,
                proxies=self.proxies,
            )
        except requests.RequestException as e:
            raise TransportFailure(f"{request.method} {request.url} failed: {e}") from e
        finally:
            # requests.Session.send extracts cookies into its own jar; the browser keeps its own store
            self._session.cookies.clear()

        return {
            "target": response.url or request.url,
            "status": response.status_code,
            "headers": _collect_headers(response),
            "body": response.content,
        }

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._session.close()
            logger.debug("Closed connection %s", hex(id(self)))


def _collect_headers(response: requests.Response) -> Dict[str, List[str]]:
    # requests folds repeated headers into one comma-joined value, which breaks Set-Cookie
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return {name: raw_headers.getlist(name) for name in raw_headers.keys()}
    return {name: [value] for name, value in response.headers.items()}


class RequestsConnectionProvider(ConnectionProvider):
    """Default provider; every :meth:`open` starts a new requests session."""

    def __init__(self, timeout: int = 30, verify: bool = True) -> None:
        self.timeout = timeout
        self.verify = verify
        self.proxy_info: Optional[ProxyInfo] = None

    def use_proxy(self, proxy_info: Optional[Union[ProxyInfo, str]]) -> None:
        if isinstance(proxy_info, str):
            proxy_info = ProxyInfo.from_url(proxy_info)
        self.proxy_info = proxy_info

    def _proxies(self) -> Dict[str, str]:
        if self.proxy_info is None:
            return {}
        proxy_url = self.proxy_info.url()
        return {"http": proxy_url, "https": proxy_url}

    def open(self, request) -> RequestsConnection:
        session = requests.Session()
        connection = RequestsConnection(session, self.timeout, self.verify, self._proxies())
        logger.debug("Opened connection %s for %s", hex(id(connection)), request.url)
        return connection
