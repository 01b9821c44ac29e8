import pytest

from http_browser import Request, Session
from http_browser.exceptions import MissingLocationHeader, TooManyRedirects, TransportFailure


def test_redirect_is_followed_with_fresh_get(fake_provider) -> None:
    provider = fake_provider.from_routes({
        "http://example.com/a": (302, {"Location": ["/b"]}, b""),
        "http://example.com/b": (200, {"Content-Type": ["text/html; charset=utf-8"]}, b"<p>b</p>"),
    })
    session = Session(connection_provider=provider)

    response = session.send_request(Request.post("http://example.com/a", data={"x": "1"}))

    assert response.status_code == 200
    assert session.response is response
    assert session.request.method == "GET"
    assert session.request.url == "http://example.com/b"
    assert session.page == "<p>b</p>"
    assert session.elapsed_time >= 0
    assert [r.status_code for r in response.history] == [302]
    assert len(provider.connections) == 2
    assert provider.connections[0].closed
    assert not provider.connections[1].closed


@pytest.mark.parametrize("status", [301, 302, 303])
def test_see_other_style_redirects_switch_to_get(status: int, fake_provider) -> None:
    provider = fake_provider.from_routes({
        "https://example.com:8443/form": (status, {"Location": ["/next"]}, b""),
        "https://example.com:8443/next": (200, {}, b""),
    })
    session = Session(connection_provider=provider)

    session.send_request(Request.put("https://example.com:8443/form", data="payload"))

    last = provider.requests[-1]
    assert last.method == "GET"
    assert last.url == "https://example.com:8443/next"
    assert last.body is None


def test_temporary_redirect_keeps_method(fake_provider) -> None:
    provider = fake_provider.from_routes({
        "http://example.com/doc": (307, {"Location": ["http://mirror.example.com/doc"]}, b""),
        "http://mirror.example.com/doc": (201, {}, b""),
    })
    session = Session(connection_provider=provider)

    response = session.send_request(Request.put("http://example.com/doc", data="body"))

    assert response.status_code == 201
    assert [(r.method, r.url) for r in provider.requests] == [
        ("PUT", "http://example.com/doc"),
        ("PUT", "http://mirror.example.com/doc"),
    ]
    assert provider.requests[-1].body == "body"


def test_missing_location_fails_without_looping(fake_provider) -> None:
    provider = fake_provider(lambda request: (301, {}, b""))
    session = Session(connection_provider=provider)

    with pytest.raises(MissingLocationHeader):
        session.send_request(Request.get("http://example.com/"))

    assert len(provider.requests) == 1
    assert session.response.status_code == 301


def test_redirect_loop_is_bounded(fake_provider) -> None:
    provider = fake_provider(lambda request: (302, {"Location": ["/again"]}, b""))
    session = Session(connection_provider=provider, max_redirects=3)

    with pytest.raises(TooManyRedirects):
        session.send_request(Request.get("http://example.com/"))

    assert len(provider.requests) == 4


def test_transport_failure_propagates(fake_provider) -> None:
    def handler(request):
        raise TransportFailure("connection refused")

    session = Session(connection_provider=fake_provider(handler))

    with pytest.raises(TransportFailure):
        session.send_request(Request.get("http://example.com/"))
    assert session.elapsed_time >= 0


@pytest.mark.parametrize("keep_alive", [False, True])
def test_failed_hop_releases_its_connection(keep_alive: bool, fake_provider) -> None:
    def handler(request):
        if request.url == "http://example.com/a":
            return 302, {"Location": ["/b"]}, b""
        raise TransportFailure("connection reset")

    provider = fake_provider(handler)
    session = Session(connection_provider=provider, keep_alive=keep_alive)

    with pytest.raises(TransportFailure):
        session.get("http://example.com/a")

    assert provider.connections
    assert all(connection.closed for connection in provider.connections)


def test_failed_first_send_releases_its_connection(fake_provider) -> None:
    def handler(request):
        raise TransportFailure("connection refused")

    provider = fake_provider(handler)
    session = Session(connection_provider=provider)

    with pytest.raises(TransportFailure):
        session.get("http://example.com/")

    assert [connection.closed for connection in provider.connections] == [True]


def test_cookies_are_sent_on_next_call(fake_provider) -> None:
    provider = fake_provider.from_routes({
        "http://example.com/login": (200, {"Set-Cookie": ["a=1", "b=2"]}, b""),
        "http://example.com/home": (200, {}, b""),
    })
    session = Session(connection_provider=provider)

    session.send_request(Request.get("http://example.com/login"))
    session.send_request(Request.get("http://example.com/home", headers={"Cookie": "stale=1"}))

    assert provider.requests[0].headers.get_all("Cookie") is None
    assert provider.requests[1].headers.get_all("Cookie") == ["a=1; b=2"]


def test_cookies_set_on_redirect_reach_the_next_hop(fake_provider) -> None:
    provider = fake_provider.from_routes({
        "http://example.com/login": (303, {"Location": ["/home"], "Set-Cookie": ["sid=42; Path=/"]}, b""),
        "http://example.com/home": (200, {"Set-Cookie": ["sid=x; Max-Age=0"]}, b""),
        "http://example.com/after": (200, {}, b""),
    })
    session = Session(connection_provider=provider)

    session.post("http://example.com/login", data={"user": "jane"})
    session.get("http://example.com/after")

    assert provider.requests[1].headers.first("Cookie") == "sid=42"
    assert "Cookie" not in provider.requests[2].headers
    assert session.cookies.get("sid").max_age == 0


def test_default_headers_do_not_override_caller_headers(fake_provider) -> None:
    provider = fake_provider(lambda request: (200, {}, b""))
    session = Session(connection_provider=provider, headers={"User-Agent": "browser/1.0"})
    session.add_default_header("Accept", "text/html").add_default_header("Accept", "*/*")

    session.send_request(Request.get("http://example.com/", headers={"user-agent": "custom"}))

    sent = provider.requests[0]
    assert sent.headers.get_all("User-Agent") == ["custom"]
    assert sent.headers.get_all("Accept") == ["text/html", "*/*"]


def test_keep_alive_reuses_one_connection_along_the_chain(fake_provider) -> None:
    provider = fake_provider.from_routes({
        "http://example.com/1": (301, {"Location": ["/2"]}, b""),
        "http://example.com/2": (307, {"Location": ["/3"]}, b""),
        "http://example.com/3": (200, {}, b"done"),
    })
    session = Session(connection_provider=provider, keep_alive=True)

    response = session.get("http://example.com/1")

    assert len(provider.connections) == 1
    assert len(provider.connections[0].sent) == 3
    assert all(r.headers.first("Connection") == "keep-alive" for r in provider.requests)
    assert response.connection is provider.connections[0]
    assert not provider.connections[0].closed

    session.close()
    assert provider.connections[0].closed


def test_new_call_opens_new_connection_and_releases_previous(fake_provider) -> None:
    provider = fake_provider(lambda request: (200, {}, b""))
    session = Session(connection_provider=provider).set_keep_alive(True)

    session.get("http://example.com/1")
    session.get("http://example.com/2")

    assert len(provider.connections) == 2
    assert provider.connections[0].closed
    assert not provider.connections[1].closed


def test_close_without_response_is_a_noop(fake_provider) -> None:
    with Session(connection_provider=fake_provider(lambda request: (200, {}, b""))) as session:
        assert session.page is None
        session.close()


def test_proxy_is_handed_to_provider(fake_provider) -> None:
    provider = fake_provider(lambda request: (200, {}, b""))

    session = Session(connection_provider=provider, proxy="http://10.0.0.1:3128")

    assert session.connection_provider.proxy_info == "http://10.0.0.1:3128"


def test_connection_provider_can_be_swapped(fake_provider) -> None:
    first = fake_provider(lambda request: (200, {}, b""))
    second = fake_provider(lambda request: (204, {}, b""))
    session = Session(connection_provider=first)

    response = session.set_connection_provider(second).get("http://example.com/")

    assert response.status_code == 204
    assert first.requests == []
