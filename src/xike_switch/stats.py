"""Port statistics exporter.

Scrapes ``port.cgi?page=stats`` from every configured switch and republishes
the counters as metric lines::

    switch_port,switch=sw1,host=192.0.2.10,port=p1 state="Enable",link_up=1i,...

Per-switch failures never fail the whole scrape: they turn into
``# ERROR ...`` comment lines so the remaining switches are still reported.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from flask import Flask, Response

from xike_switch.client.errors import SwitchError
from xike_switch.client.http import RawHTTPClient
from xike_switch.client.session import derive_credential
from xike_switch.model.config import Switch
from xike_switch.model.stats import PortStats
from xike_switch.parser.stats import parse_port_stats
from xike_switch.vendor.xike.endpoints import LOGIN, PORT_STATS

logger = logging.getLogger(__name__)

MEASUREMENT: str = "switch_port"


def format_metric_line(switch: Switch, port_name: str, stats: PortStats) -> str:
    """Render one port's counters as a metric line."""
    tags = ",".join(
        f"{k}={_escape_tag(v)}"
        for k, v in (("switch", switch.key), ("host", switch.address), ("port", port_name))
    )
    state = stats.state.replace("\\", "\\\\").replace('"', '\\"')
    fields = (
        f'state="{state}",link_up={int(stats.link_up)}i,'
        f"tx_good={stats.tx_good}i,tx_bad={stats.tx_bad}i,"
        f"rx_good={stats.rx_good}i,rx_bad={stats.rx_bad}i"
    )
    return f"{MEASUREMENT},{tags} {fields}"


def fetch_switch_stats(switch: Switch, client: RawHTTPClient) -> list[str]:
    """Scrape one switch and return its metric lines (or one error line)."""
    label = f"{switch.key} ({switch.address})"
    try:
        cookie = derive_credential(switch)
        resp = client.get(
            switch.address,
            PORT_STATS,
            headers=(
                ("Host", switch.address),
                ("Cookie", cookie),
                ("Connection", "close"),
            ),
        )
    except SwitchError as exc:
        logger.error("%s: fetch failed: %s", label, exc)
        return [f"# ERROR {label}: {exc}"]

    if LOGIN in resp.body:
        logger.error("%s: auth rejected, got login redirect", label)
        return [f"# ERROR {label}: auth rejected"]

    try:
        rows = parse_port_stats(resp.body)
    except SwitchError as exc:
        logger.error("%s: %s", label, exc)
        return [f"# ERROR {label}: {exc}"]
    if not rows:
        logger.error("%s: no port rows found in HTML", label)
        return [f"# ERROR {label}: no port rows in response"]

    lines = []
    for index, stats in enumerate(rows):
        if index < len(switch.ports):
            port_name = switch.ports[index].name
        else:
            port_name = f"port{index + 1}"
        lines.append(format_metric_line(switch, port_name, stats))
    return lines


def collect_metrics(switches: Sequence[Switch], client: RawHTTPClient) -> str:
    """Scrape all *switches* concurrently; output keeps configuration order."""
    if not switches:
        return "\n"
    with ThreadPoolExecutor(max_workers=len(switches)) as pool:
        results = list(pool.map(lambda sw: fetch_switch_stats(sw, client), switches))
    lines = [line for chunk in results for line in chunk]
    return "\n".join(lines) + "\n"


class StatsCache:
    """Time-based cache around an expensive loader.

    Args:
        loader: Zero-argument callable producing the value.
        ttl_s: Seconds a loaded value stays fresh; ``0`` disables caching.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        loader: Callable[[], str],
        ttl_s: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self.ttl_s = ttl_s
        self._clock = clock
        self._lock = threading.Lock()
        self._value: str | None = None
        self._loaded_at: float = 0.0

    def get(self) -> str:
        """Return the cached value, reloading it if it has expired."""
        with self._lock:
            now = self._clock()
            if self._value is None or now - self._loaded_at >= self.ttl_s:
                logger.debug("Cache expired; reloading")
                self._value = self._loader()
                self._loaded_at = now
            return self._value

    def invalidate(self) -> None:
        with self._lock:
            self._value = None


def create_app(cache: StatsCache) -> Flask:
    """Build the Flask app exposing ``/metrics`` and ``/health``."""
    app = Flask(__name__)

    @app.route("/metrics")
    def metrics() -> Response:
        return Response(cache.get(), mimetype="text/plain")

    @app.route("/health")
    def health() -> Response:
        return Response("ok\n", mimetype="text/plain")

    @app.errorhandler(404)
    def not_found(_exc: Exception) -> tuple[Response, int]:
        return Response("not found\n", mimetype="text/plain"), 404

    return app


def _escape_tag(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")
