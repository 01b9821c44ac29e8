from enum import Enum

from .exceptions import MissingLocationHeader
from .request import Request
from .response import Response


class RedirectKind(Enum):
    PERMANENT = "permanent"
    FOUND = "found"
    TEMPORARY = "temporary"
    TERMINAL = "terminal"

    @property
    def is_redirect(self) -> bool:
        return self is not RedirectKind.TERMINAL

    @property
    def forces_get(self) -> bool:
        """301, 302 and 303 continue as GET; 307 keeps the original method."""
        return self in (RedirectKind.PERMANENT, RedirectKind.FOUND)


REDIRECT_KINDS = {
    301: RedirectKind.PERMANENT,
    302: RedirectKind.FOUND,
    303: RedirectKind.FOUND,
    307: RedirectKind.TEMPORARY,
}


def classify(status_code: int) -> RedirectKind:
    return REDIRECT_KINDS.get(status_code, RedirectKind.TERMINAL)


def resolve_location(response: Response) -> str:
    """Returns the absolute target of a redirect response.

    Servers often send a path instead of the absolute URL RFC 2616 asks for
    (RFC 7231 allows it). A path starting with ``/`` is resolved against the
    host of the request that produced ``response``; ``//host/path`` takes that
    request's scheme. Anything else is used as it is.
    """
    location = response.header("location")
    if not location:
        raise MissingLocationHeader(response.status_code, response.url)

    if location.startswith("/"):
        origin = response.request.host_url()
        if location.startswith("//"):
            return origin.split("//", 1)[0] + location
        return origin + location

    return location


def build_redirect_request(request: Request, kind: RedirectKind, location: str) -> Request:
    """Builds the request for the next hop; ``request`` is the one that was redirected."""
    if kind.forces_get:
        return Request.get(location)

    redirected = Request(request.method, location, body=request.body)
    content_type = request.headers.first("Content-Type")
    if content_type is not None:
        redirected.header("Content-Type", content_type)
    return redirected
