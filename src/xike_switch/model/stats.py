"""Typed model for per-port traffic statistics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PortStats:
    """Counters for one port as shown on ``port.cgi?page=stats``.

    Attributes:
        state: Administrative state text (e.g. ``"Enable"``).
        link_up: ``True`` if the link column reads ``Link Up``.
        tx_good: Frames transmitted without error.
        tx_bad: Frames transmitted with error.
        rx_good: Frames received without error.
        rx_bad: Frames received with error.
    """

    state: str
    link_up: bool
    tx_good: int
    tx_bad: int
    rx_good: int
    rx_bad: int
