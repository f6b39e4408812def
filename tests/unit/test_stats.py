"""Unit tests for the port statistics exporter in xike_switch.stats."""

from __future__ import annotations

from typing import Iterable

import pytest
from flask.testing import FlaskClient

from xike_switch.client.errors import SwitchTimeoutError
from xike_switch.client.http import RawHTTPClient, RawResponse
from xike_switch.model.config import Port, Switch, SwitchAuth
from xike_switch.model.stats import PortStats
from xike_switch.stats import (
    StatsCache,
    collect_metrics,
    create_app,
    fetch_switch_stats,
    format_metric_line,
)

_AUTH = SwitchAuth(type="xike", user="admin", password="pw", response="abcd")

_STATS_HTML = """<html><body><table>
<tr><th>Port</th><th>State</th><th>Link</th><th>TxG</th><th>TxB</th><th>RxG</th><th>RxB</th></tr>
<tr><td>Port 1</td><td>Enable</td><td>Link Up</td><td>10</td><td>1</td><td>20</td><td>2</td></tr>
<tr><td>Port 2</td><td>Enable</td><td>Link Down</td><td>0</td><td>0</td><td>0</td><td>0</td></tr>
</table></body></html>"""


def _switch(key: str = "sw1", ports: Iterable[str] = ("uplink",), auth: SwitchAuth | None = _AUTH) -> Switch:
    return Switch(
        key=key,
        name=key,
        address=f"{key}.example",
        auth=auth,
        ports=tuple(Port(name=p, template="t") for p in ports),
    )


class FakeClient:
    """Records GETs and replies per host."""

    def __init__(self, replies: dict[str, RawResponse | Exception]) -> None:
        self.replies = replies
        self.requests: list[tuple[str, str, tuple[tuple[str, str], ...]]] = []

    def get(self, hostname: str, path: str, headers: Iterable[tuple[str, str]] = (),
            port: int = 80) -> RawResponse:
        self.requests.append((hostname, path, tuple(headers)))
        reply = self.replies[hostname]
        if isinstance(reply, Exception):
            raise reply
        return reply


# ---------------------------------------------------------------------------
# format_metric_line
# ---------------------------------------------------------------------------

class TestFormatMetricLine:
    def test_line_layout(self) -> None:
        stats = PortStats(state="Enable", link_up=True, tx_good=10, tx_bad=1, rx_good=20, rx_bad=2)
        line = format_metric_line(_switch(), "uplink", stats)
        assert line == (
            'switch_port,switch=sw1,host=sw1.example,port=uplink '
            'state="Enable",link_up=1i,tx_good=10i,tx_bad=1i,rx_good=20i,rx_bad=2i'
        )

    def test_tags_escaped(self) -> None:
        stats = PortStats(state="Enable", link_up=False, tx_good=0, tx_bad=0, rx_good=0, rx_bad=0)
        line = format_metric_line(_switch(), "desk 1,a=b", stats)
        assert "port=desk\\ 1\\,a\\=b " in line
        assert "link_up=0i" in line

    def test_state_quotes_escaped(self) -> None:
        stats = PortStats(state='say "hi"', link_up=False, tx_good=0, tx_bad=0, rx_good=0, rx_bad=0)
        assert 'state="say \\"hi\\""' in format_metric_line(_switch(), "p", stats)


# ---------------------------------------------------------------------------
# fetch_switch_stats
# ---------------------------------------------------------------------------

class TestFetchSwitchStats:
    def test_lines_use_configured_port_names_then_fallback(self) -> None:
        client = FakeClient({"sw1.example": RawResponse(200, "OK", body=_STATS_HTML)})
        lines = fetch_switch_stats(_switch(), client)  # type: ignore[arg-type]
        assert len(lines) == 2
        assert ",port=uplink " in lines[0]
        assert ",port=port2 " in lines[1]
        assert "link_up=0i" in lines[1]

    def test_request_carries_cookie(self) -> None:
        client = FakeClient({"sw1.example": RawResponse(200, "OK", body=_STATS_HTML)})
        fetch_switch_stats(_switch(), client)  # type: ignore[arg-type]
        host, path, headers = client.requests[0]
        assert host == "sw1.example"
        assert path == "/port.cgi?page=stats"
        assert dict(headers)["Cookie"] == "admin=abcd"
        assert dict(headers)["Connection"] == "close"

    def test_login_redirect_is_auth_error(self) -> None:
        body = '<script>top.location.href="/login.cgi";</script>'
        client = FakeClient({"sw1.example": RawResponse(200, "OK", body=body)})
        assert fetch_switch_stats(_switch(), client) == [  # type: ignore[arg-type]
            "# ERROR sw1 (sw1.example): auth rejected"
        ]

    def test_no_rows(self) -> None:
        client = FakeClient({"sw1.example": RawResponse(200, "OK", body="<html></html>")})
        lines = fetch_switch_stats(_switch(), client)  # type: ignore[arg-type]
        assert lines == ["# ERROR sw1 (sw1.example): no port rows in response"]

    def test_transport_error_becomes_comment(self) -> None:
        client = FakeClient({"sw1.example": SwitchTimeoutError("sw1.example", 80, 2)})
        lines = fetch_switch_stats(_switch(), client)  # type: ignore[arg-type]
        assert len(lines) == 1
        assert lines[0].startswith("# ERROR sw1 (sw1.example): ")
        assert "timed out" in lines[0]

    def test_missing_auth_becomes_comment_without_request(self) -> None:
        client = FakeClient({})
        lines = fetch_switch_stats(_switch(auth=None), client)  # type: ignore[arg-type]
        assert lines[0].startswith("# ERROR sw1")
        assert client.requests == []


def test_collect_metrics_keeps_config_order_and_isolates_failures() -> None:
    client = FakeClient({
        "a.example": SwitchTimeoutError("a.example", 80, 1),
        "b.example": RawResponse(200, "OK", body=_STATS_HTML),
    })
    text = collect_metrics([_switch("a"), _switch("b")], client)  # type: ignore[arg-type]
    lines = text.rstrip("\n").split("\n")
    assert lines[0].startswith("# ERROR a (a.example)")
    assert lines[1].startswith("switch_port,switch=b,")
    assert len(lines) == 3
    assert text.endswith("\n")


def test_collect_metrics_survives_malformed_address() -> None:
    bad = Switch(key="bad", name="bad", address="sw..lan", auth=_AUTH)
    text = collect_metrics([bad], RawHTTPClient(timeout_s=1))
    assert text.startswith("# ERROR bad (sw..lan): ")
    assert text.count("\n") == 1


# ---------------------------------------------------------------------------
# StatsCache
# ---------------------------------------------------------------------------

class TestStatsCache:
    def _cache(self, ttl: float) -> tuple[StatsCache, list[float], list[int]]:
        now = [100.0]
        calls: list[int] = []

        def loader() -> str:
            calls.append(1)
            return f"v{len(calls)}"

        return StatsCache(loader, ttl_s=ttl, clock=lambda: now[0]), now, calls

    def test_reuses_within_ttl(self) -> None:
        cache, now, calls = self._cache(10)
        assert cache.get() == "v1"
        now[0] += 9.9
        assert cache.get() == "v1"
        assert len(calls) == 1

    def test_reloads_after_ttl(self) -> None:
        cache, now, calls = self._cache(10)
        cache.get()
        now[0] += 10
        assert cache.get() == "v2"

    def test_zero_ttl_always_reloads(self) -> None:
        cache, _, calls = self._cache(0)
        cache.get()
        cache.get()
        assert len(calls) == 2

    def test_invalidate(self) -> None:
        cache, _, _ = self._cache(60)
        cache.get()
        cache.invalidate()
        assert cache.get() == "v2"


# ---------------------------------------------------------------------------
# create_app
# ---------------------------------------------------------------------------

@pytest.fixture
def app_client() -> FlaskClient:
    cache = StatsCache(lambda: "switch_port,switch=a x=1i\n", ttl_s=60)
    return create_app(cache).test_client()


def test_metrics_route(app_client: FlaskClient) -> None:
    resp = app_client.get("/metrics")
    assert resp.status_code == 200
    assert resp.mimetype == "text/plain"
    assert resp.data == b"switch_port,switch=a x=1i\n"


def test_health_route(app_client: FlaskClient) -> None:
    resp = app_client.get("/health")
    assert resp.status_code == 200
    assert resp.data == b"ok\n"


def test_unknown_route_is_404(app_client: FlaskClient) -> None:
    resp = app_client.get("/other")
    assert resp.status_code == 404
    assert resp.data == b"not found\n"
