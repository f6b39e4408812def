"""Minimal raw-socket HTTP/1.1 client for Xike CGI endpoints.

The switch firmware only speaks a narrow dialect of HTTP: every request is
answered with ``Connection: close`` semantics and some pages are sensitive to
header order.  This client therefore writes hand-assembled requests over a
bare TCP socket and reads the response until the peer closes the connection.

Reading to end-of-stream (instead of honouring ``Content-Length``) is only
correct because this firmware always closes the connection after a response.
It is not a general-purpose HTTP client: there are no redirects, no chunked
transfer decoding, no keep-alive, no TLS and no retries.
"""

from __future__ import annotations

import importlib.metadata
import logging
import re
import socket
import time
from dataclasses import dataclass, field
from typing import Iterable

from xike_switch.client.errors import (
    SwitchConnectionError,
    SwitchProtocolError,
    SwitchTimeoutError,
)

logger = logging.getLogger(__name__)

try:
    _VERSION: str = importlib.metadata.version("xike-switch")
except importlib.metadata.PackageNotFoundError:
    _VERSION = "0.0.0"

USER_AGENT: str = f"xike-switch/{_VERSION}"

DEFAULT_PORT: int = 80

_CRLF: str = "\r\n"
_HEADER_END: bytes = b"\r\n\r\n"
_RECV_SIZE: int = 4096

# Status line as sent by the firmware, e.g. "HTTP/1.1 200 OK".
_STATUS_RE: re.Pattern[str] = re.compile(r"^HTTP/1\.\d (\d{3}) (.*)$")


@dataclass(frozen=True)
class RawResponse:
    """A fully-buffered HTTP response.

    Attributes:
        status: Numeric status code.
        status_text: Reason phrase from the status line.
        headers: Response headers with lower-cased names.
        body: Decoded response body.
    """

    status: int
    status_text: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def ok(self) -> bool:
        """True for a 2xx status code."""
        return 200 <= self.status < 300


def build_request(
    method: str,
    path: str,
    headers: Iterable[tuple[str, str]],
    body: str = "",
) -> bytes:
    """Serialize a request with CRLF line endings, headers in given order."""
    lines = [f"{method} {path} HTTP/1.1"]
    lines.extend(f"{name}: {value}" for name, value in headers)
    return (_CRLF.join(lines) + _CRLF + _CRLF + body).encode("utf-8")


def parse_response(raw: bytes) -> RawResponse:
    """Split a buffered response into status line, headers and body.

    Raises:
        SwitchProtocolError: If there is no header/body separator or the
            status line does not look like ``HTTP/1.x NNN text``.
    """
    head, sep, body = raw.partition(_HEADER_END)
    if not sep:
        raise SwitchProtocolError(
            f"No header terminator in {len(raw)}-byte response: {raw[:200]!r}"
        )
    status_line, *header_lines = head.decode("iso-8859-1").split(_CRLF)
    m = _STATUS_RE.match(status_line)
    if not m:
        raise SwitchProtocolError(f"Invalid HTTP status line: {status_line!r}")

    headers: dict[str, str] = {}
    for line in header_lines:
        name, colon, value = line.partition(":")
        if colon and name:
            headers[name.strip().lower()] = value.strip()

    return RawResponse(
        status=int(m.group(1)),
        status_text=m.group(2),
        headers=headers,
        body=body.decode("utf-8", errors="replace"),
    )


class RawHTTPClient:
    """One-shot HTTP/1.1 client: one TCP connection per :meth:`request`.

    Args:
        timeout_s: Default overall deadline per request in seconds, covering
            connect, write and read together.
    """

    def __init__(self, timeout_s: float = 10.0) -> None:
        self.timeout_s: float = timeout_s

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def request(
        self,
        hostname: str,
        port: int,
        method: str,
        path: str,
        headers: Iterable[tuple[str, str]] = (),
        body: str = "",
        timeout: float | None = None,
    ) -> RawResponse:
        """Send one request and return the complete response.

        Args:
            hostname: Switch IP address or host name.
            port: TCP port (normally 80).
            method: HTTP method, e.g. ``"POST"``.
            path: Request target including any query string.
            headers: ``(name, value)`` pairs, written in this order.
            body: Request body (sent as UTF-8).
            timeout: Overrides :attr:`timeout_s` for this call.

        Returns:
            The parsed :class:`RawResponse`.

        Raises:
            SwitchTimeoutError: If the deadline expires.
            SwitchConnectionError: On any other socket-level failure.
            SwitchProtocolError: If the response is malformed.
        """
        timeout_s = self.timeout_s if timeout is None else timeout
        deadline = time.monotonic() + timeout_s
        payload = build_request(method, path, headers, body)

        logger.debug("%s %s:%d%s (%d bytes)", method, hostname, port, path, len(payload))
        try:
            with _connect(hostname, port, deadline) as sock:
                sock.sendall(payload)
                raw = _read_until_close(sock, deadline)
        except (socket.timeout, TimeoutError) as exc:
            raise SwitchTimeoutError(hostname, port, timeout_s) from exc
        except OSError as exc:
            raise SwitchConnectionError(hostname, port, exc) from exc
        except ValueError as exc:
            # IDNA encoding of a malformed host name, e.g. "sw..lan".
            raise SwitchConnectionError(hostname, port, exc) from exc

        resp = parse_response(raw)
        logger.debug("%s:%d%s -> %d %s", hostname, port, path, resp.status, resp.status_text)
        return resp

    def get(
        self,
        hostname: str,
        path: str,
        headers: Iterable[tuple[str, str]] = (),
        port: int = DEFAULT_PORT,
    ) -> RawResponse:
        """Send a GET with an empty body."""
        return self.request(hostname, port, "GET", path, headers)


# ----------------------------------------------------------------------
# Internals
# ----------------------------------------------------------------------

def _set_remaining(sock: socket.socket, deadline: float) -> None:
    """Arm *sock* with whatever is left of the overall deadline."""
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise socket.timeout("deadline exceeded")
    sock.settimeout(remaining)


def _connect(hostname: str, port: int, deadline: float) -> socket.socket:
    """Connect to the first reachable address of *hostname*.

    All connect attempts share *deadline*; a timeout on one address ends the
    call.  Name resolution itself is not bounded by the deadline.
    """
    last_exc: OSError | None = None
    for family, sock_type, proto, _, sockaddr in socket.getaddrinfo(
        hostname, port, type=socket.SOCK_STREAM
    ):
        sock = socket.socket(family, sock_type, proto)
        try:
            _set_remaining(sock, deadline)
            sock.connect(sockaddr)
        except TimeoutError:
            sock.close()
            raise
        except OSError as exc:
            sock.close()
            last_exc = exc
            continue
        return sock
    raise last_exc or OSError(f"No address found for {hostname}")


def _read_until_close(sock: socket.socket, deadline: float) -> bytes:
    chunks: list[bytes] = []
    while True:
        _set_remaining(sock, deadline)
        chunk = sock.recv(_RECV_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)
