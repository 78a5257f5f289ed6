from __future__ import annotations

import logging

from hostwatch.schemas.snapshot import NetworkInterface
from hostwatch.services.parsing import ParseResult
from hostwatch.utils.units import parse_float


logger = logging.getLogger(__name__)

IFACE_COLUMN = "iface"
RX_COLUMN = "rxkb/s"
TX_COLUMN = "txkb/s"
LOOPBACK = "lo"


def is_average_row(line: str) -> bool:
    tokens = line.split()
    return bool(tokens) and "average" in tokens[0].lower()


def select_average_rows(raw: str) -> str:
    """Keep only the summary ('Average:') rows of a `sar -n DEV` report, minus loopback."""
    kept: list[str] = []
    for line in raw.splitlines():
        if not is_average_row(line):
            continue
        tokens = line.split()
        if len(tokens) > 1 and tokens[1] == LOOPBACK:
            continue
        kept.append(line)
    return "\n".join(kept)


def _find_column(headers: list[str], name: str) -> int:
    for idx, header in enumerate(headers):
        if name in header.lower():
            return idx
    return -1


def parse_sar_network(raw: str) -> ParseResult[NetworkInterface]:
    """Parse per-interface rates from a `sar -n DEV` report.

    Columns are located from the header row, so their order may vary between
    sysstat versions. The transmit column is optional.
    """
    lines = [line for line in raw.splitlines() if line.strip()]

    header_idx = -1
    for idx, line in enumerate(lines):
        lowered = line.lower()
        if IFACE_COLUMN in lowered and RX_COLUMN in lowered:
            header_idx = idx
            break
    if header_idx == -1:
        return ParseResult.failure("No header row with IFACE and rxkB/s columns")

    headers = lines[header_idx].split()
    iface_idx = _find_column(headers, IFACE_COLUMN)
    rx_idx = _find_column(headers, RX_COLUMN)
    tx_idx = _find_column(headers, TX_COLUMN)
    if iface_idx == -1 or rx_idx == -1:
        return ParseResult.failure("Header row is missing the IFACE or rxkB/s column")

    interfaces: list[NetworkInterface] = []
    warnings: list[str] = []
    for line in lines[header_idx + 1:]:
        cols = line.split()
        # A repeated header (e.g. a second report block) is not data
        if IFACE_COLUMN in line.lower() and RX_COLUMN in line.lower():
            continue
        if len(cols) <= max(iface_idx, rx_idx):
            warning = f"Skipping short sar row: {line!r}"
            warnings.append(warning)
            logger.debug(warning)
            continue
        iface = cols[iface_idx]
        if iface == LOOPBACK:
            continue
        interfaces.append(
            NetworkInterface(
                iface=iface,
                rx_kBs=parse_float(cols[rx_idx]),
                tx_kBs=parse_float(cols[tx_idx]) if 0 <= tx_idx < len(cols) else 0.0,
            )
        )

    return ParseResult(records=interfaces, warnings=warnings)
