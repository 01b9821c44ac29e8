class HttpBrowserException(IOError):
    """General error raised by the browser session"""


class MissingLocationHeader(HttpBrowserException):
    """A redirect status was received without a Location header"""

    def __init__(self, status_code: int, url: str = None):
        self.status_code = status_code
        self.url = url
        super().__init__(f"{status_code} redirect from {url} has no Location header")


class MalformedCookie(HttpBrowserException, ValueError):
    """A Set-Cookie value could not be parsed"""


class TooManyRedirects(HttpBrowserException):
    """The redirect chain exceeded the session limit"""


class TransportFailure(HttpBrowserException):
    """The connection layer failed to deliver a request"""
