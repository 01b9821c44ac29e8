import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from requests.cookies import RequestsCookieJar, cookiejar_from_dict

from .exceptions import MalformedCookie

logger = logging.getLogger("http_browser")


@dataclass
class Cookie:
    """A single cookie as received in a ``Set-Cookie`` response header."""

    name: str
    value: str
    max_age: Optional[int] = None
    path: Optional[str] = None
    domain: Optional[str] = None
    expires: Optional[str] = None
    secure: bool = False
    http_only: bool = False

    @classmethod
    def parse(cls, set_cookie: str) -> "Cookie":
        """Parses one ``Set-Cookie`` header value.

        Attribute names are matched case-insensitively and unknown attributes
        are ignored. Raises :class:`MalformedCookie` when the leading
        ``name=value`` pair is missing or ``Max-Age`` is not an integer.
        """
        if set_cookie is None:
            raise MalformedCookie("empty Set-Cookie value")

        tokens = set_cookie.split(";")
        pair = tokens[0]
        index_of_equals = pair.find("=")
        if index_of_equals == -1:
            raise MalformedCookie(f"missing '=' in cookie: {set_cookie!r}")

        name = pair[:index_of_equals].strip()
        if not name:
            raise MalformedCookie(f"missing cookie name: {set_cookie!r}")
        cookie = cls(name=name, value=pair[index_of_equals + 1:].strip())

        for attribute in tokens[1:]:
            attribute = attribute.strip()
            if not attribute:
                continue
            key, _, value = attribute.partition("=")
            key = key.strip().lower()
            value = value.strip()

            if key == "max-age":
                try:
                    cookie.max_age = int(value)
                except ValueError:
                    raise MalformedCookie(f"invalid Max-Age {value!r} in cookie {name!r}") from None
            elif key == "path":
                cookie.path = value
            elif key == "domain":
                cookie.domain = value
            elif key == "expires":
                cookie.expires = value
            elif key == "secure":
                cookie.secure = True
            elif key == "httponly":
                cookie.http_only = True

        return cookie

    @property
    def expired(self) -> bool:
        """True when the server asked for the cookie to be dropped (``Max-Age=0``)."""
        return self.max_age is not None and self.max_age == 0

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


class CookieStore:
    """Cookies of one session, keyed by name.

    The store is flat: a cookie received later replaces an earlier one with
    the same name whatever its path or domain, and keeps the position the
    name was first seen at.
    """

    def __init__(self) -> None:
        self._cookies: Dict[str, Cookie] = {}

    def __len__(self) -> int:
        return len(self._cookies)

    def __iter__(self) -> Iterator[Cookie]:
        return iter(list(self._cookies.values()))

    def __contains__(self, name: str) -> bool:
        return name in self._cookies

    def __repr__(self) -> str:
        return f"<CookieStore {list(self._cookies)}>"

    def get(self, name: str) -> Optional[Cookie]:
        return self._cookies.get(name)

    def put(self, cookie: Cookie) -> None:
        self._cookies[cookie.name] = cookie

    def clear(self) -> None:
        self._cookies.clear()

    def read(self, response) -> None:
        """Stores every cookie from the ``Set-Cookie`` headers of ``response``."""
        set_cookies = response.header_values("set-cookie")
        if not set_cookies:
            return

        for set_cookie in set_cookies:
            try:
                cookie = Cookie.parse(set_cookie)
            except MalformedCookie as e:
                logger.warning("Skipping malformed cookie from %s: %s", response.url, e)
                continue
            self.put(cookie)

    def render(self) -> Optional[str]:
        """Builds the ``Cookie`` request header value, or None when nothing is to be sent."""
        pairs = [str(cookie) for cookie in self._cookies.values() if not cookie.expired]
        if not pairs:
            return None
        return "; ".join(pairs)

    def apply(self, request) -> None:
        """Overwrites the ``Cookie`` header of ``request`` with the stored cookies."""
        cookie_header = self.render()
        if cookie_header is not None:
            request.header("Cookie", cookie_header, overwrite=True)

    def to_jar(self) -> RequestsCookieJar:
        """Copies the sendable cookies into a requests cookie jar."""
        return cookiejar_from_dict(
            {cookie.name: cookie.value for cookie in self._cookies.values() if not cookie.expired}
        )
