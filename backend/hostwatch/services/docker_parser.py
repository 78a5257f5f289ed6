from __future__ import annotations

import logging
import re

from hostwatch.schemas.snapshot import DockerContainer
from hostwatch.services.parsing import ParseResult


logger = logging.getLogger(__name__)

SHORT_ID_LENGTH = 12
NO_PORTS = "-"
UNNAMED = "<unnamed>"
UNKNOWN = "unknown"

TAB_SPLIT = re.compile(r"\t+")


def parse_ports(value: str | None) -> list[str]:
    if not value or value.strip() == NO_PORTS:
        return []
    return [port.strip() for port in value.split(",") if port.strip()]


def _looks_like_ports(token: str, token_count: int) -> bool:
    if ":" in token or "/" in token or token == NO_PORTS:
        return True
    return token.isdigit() and token_count > 5


def parse_container_line(line: str) -> DockerContainer | None:
    """Parse one data row of the tab-delimited `docker ps` table.

    Rows that lost their tabs are split on whitespace instead: id, name and
    image come first, and a trailing port-like token is taken as the ports.
    """
    line = line.strip()
    if not line:
        return None

    parts = [part.strip() for part in TAB_SPLIT.split(line) if part.strip()]
    if len(parts) >= 4:
        container_id, name, image, status = parts[:4]
        ports = parts[4] if len(parts) > 4 else None
        return DockerContainer(
            id=container_id[:SHORT_ID_LENGTH],
            name=name or UNNAMED,
            image=image or UNKNOWN,
            status=status or UNKNOWN,
            ports=parse_ports(ports),
        )

    words = line.split()
    if len(words) < 4:
        return None

    ports = None
    if len(words) >= 5 and _looks_like_ports(words[-1], len(words)):
        ports = words[-1]
        status = " ".join(words[3:-1])
    else:
        status = " ".join(words[3:])

    return DockerContainer(
        id=words[0][:SHORT_ID_LENGTH],
        name=words[1] or UNNAMED,
        image=words[2] or UNKNOWN,
        status=status or UNKNOWN,
        ports=parse_ports(ports),
    )


def parse_docker_ps(raw: str) -> ParseResult[DockerContainer]:
    """Parse `docker ps --format "table ..."` output; the first line is the header."""
    if not raw or not raw.strip():
        return ParseResult()

    containers: list[DockerContainer] = []
    warnings: list[str] = []
    for line in raw.strip().splitlines()[1:]:
        if not line.strip():
            continue
        container = parse_container_line(line)
        if container is None:
            warning = f"Skipping unparsable docker ps row: {line!r}"
            warnings.append(warning)
            logger.debug(warning)
            continue
        containers.append(container)

    return ParseResult(records=containers, warnings=warnings)
