import httpx
import pytest

from studio_console.network import HttpxNetwork


def _network(handler, base_url: str = "https://example.test") -> HttpxNetwork:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxNetwork(base_url, client=client)


@pytest.mark.asyncio
async def test_get_reports_progress_then_done():
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=b"x" * 10)

    net = _network(handler)
    events = []

    net.get("/export/0.1/html", events.append)
    await net.wait_idle()
    await net.close()

    assert requested == ["https://example.test/export/0.1/html"]
    assert events[-1].kind == "done"
    assert events[-1].data == b"x" * 10
    assert events[-1].url == "/export/0.1/html"
    assert all(event.kind == "progress" for event in events[:-1])
    assert events[-2].percent == 100


@pytest.mark.asyncio
async def test_http_error_status_is_an_error_event():
    net = _network(lambda request: httpx.Response(404, content=b"missing"))
    events = []

    net.get("/cart/abc/cart.tic", events.append)
    await net.wait_idle()
    await net.close()

    assert [event.kind for event in events] == ["error"]
    assert "404" in events[0].error


@pytest.mark.asyncio
async def test_transport_failure_is_an_error_event():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    net = _network(handler)
    events = []

    net.get("/api?fn=version", events.append)
    await net.wait_idle()
    await net.close()

    assert [event.kind for event in events] == ["error"]
    assert "refused" in events[0].error


@pytest.mark.asyncio
async def test_relative_url_without_base_url_fails_immediately():
    net = _network(lambda request: httpx.Response(200), base_url="")
    events = []

    net.get("/api?fn=version", events.append)
    await net.close()

    assert events[0].kind == "error"
    assert events[0].error == "network is not configured"


def test_get_outside_an_event_loop_fails_immediately():
    net = _network(lambda request: httpx.Response(200))
    events = []

    net.get("/api?fn=version", events.append)

    assert events[0].kind == "error"
    assert events[0].error == "no running event loop"


def test_url_for():
    net = _network(lambda request: httpx.Response(200), base_url="https://example.test/")

    assert net.url_for("/cart/1/cart.tic") == "https://example.test/cart/1/cart.tic"
    assert net.url_for("https://other.test/x") == "https://other.test/x"
