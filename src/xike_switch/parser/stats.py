"""Parser for the Xike port statistics page (port.cgi?page=stats)."""

from __future__ import annotations

from xike_switch.client.errors import SwitchParseError
from xike_switch.model.stats import PortStats
from xike_switch.parser.html import cell_texts, parse_html
from xike_switch.vendor.xike.mappings import LINK_UP_TEXT

# Port | State | Link Status | TxGood | TxBad | RxGood | RxBad
_STATS_COLUMNS: int = 7


def parse_port_stats(html: str) -> list[PortStats]:
    """Parse the statistics table and return one entry per port.

    Every ``<tr>`` with exactly seven ``<td>`` cells is a port row, in port
    order; header and layout rows are skipped.

    Args:
        html: Raw HTML from ``port.cgi?page=stats``.

    Returns:
        List of :class:`~xike_switch.model.stats.PortStats`, possibly empty.

    Raises:
        SwitchParseError: If a counter cell is not an integer.
    """
    soup = parse_html(html)
    stats: list[PortStats] = []
    for row in soup.select("table tr"):
        cells = cell_texts(row)
        if len(cells) != _STATS_COLUMNS:
            continue
        _, state, link, tx_good, tx_bad, rx_good, rx_bad = cells
        stats.append(
            PortStats(
                state=state,
                link_up=link == LINK_UP_TEXT,
                tx_good=_counter(tx_good, len(stats)),
                tx_bad=_counter(tx_bad, len(stats)),
                rx_good=_counter(rx_good, len(stats)),
                rx_bad=_counter(rx_bad, len(stats)),
            )
        )
    return stats


def _counter(text: str, port_index: int) -> int:
    try:
        return int(text.replace(",", ""))
    except ValueError as exc:
        raise SwitchParseError(
            f"Non-numeric counter {text!r} in statistics row {port_index + 1}"
        ) from exc
