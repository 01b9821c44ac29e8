#   _     _   _                 _
#  | |__ | |_| |_ _ __    ___  | |__  _ __ _____      _____  ___ _ __
#  | '_ \| __| __| '_ \  |___| | '_ \| '__/ _ \ \ /\ / / __|/ _ \ '__|
#  | | | | |_| |_| |_) |       | |_) | | | (_) \ V  V /\__ \  __/ |
#  |_| |_|\__|\__| .__/        |_.__/|_|  \___/ \_/\_/ |___/\___|_|
#                |_|

# A session that behaves like a browser across several requests: it keeps the
# cookies the server sets, sends them back, and follows redirects.
# The syntax stays close to requests, as most people use it and are familiar with it.

from .__version__ import __version__
from .connection import Connection, ConnectionProvider, ProxyInfo, RequestsConnectionProvider
from .cookies import Cookie, CookieStore
from .exceptions import (
    HttpBrowserException,
    MalformedCookie,
    MissingLocationHeader,
    TooManyRedirects,
    TransportFailure,
)
from .request import Request
from .response import Response
from .sessions import Session
