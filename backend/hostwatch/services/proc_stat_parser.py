from __future__ import annotations

import logging
from dataclasses import dataclass

from hostwatch.services.parsing import ParseResult


logger = logging.getLogger(__name__)

# user nice system idle iowait irq softirq steal guest guest_nice
IDLE_FIELD = 3

AGGREGATE_ID = -1


@dataclass(frozen=True)
class CpuCounters:
    """One `cpu`/`cpuN` line from /proc/stat."""

    core_id: int  # AGGREGATE_ID for the `cpu` line
    total: int
    idle: int

    @property
    def is_aggregate(self) -> bool:
        return self.core_id == AGGREGATE_ID


def parse_cpu_line(line: str) -> CpuCounters | None:
    parts = line.split()
    if not parts or not parts[0].startswith("cpu"):
        return None

    label = parts[0]
    if label == "cpu":
        core_id = AGGREGATE_ID
    else:
        suffix = label[3:]
        if not suffix.isdigit():
            return None
        core_id = int(suffix)

    try:
        values = [int(v) for v in parts[1:]]
    except ValueError:
        return None
    if len(values) <= IDLE_FIELD:
        return None

    return CpuCounters(core_id=core_id, total=sum(values), idle=values[IDLE_FIELD])


def parse_proc_stat(raw: str) -> ParseResult[CpuCounters]:
    """Parse the cpu lines of /proc/stat; other lines are ignored."""
    records: list[CpuCounters] = []
    warnings: list[str] = []

    for line_num, raw_line in enumerate(raw.splitlines(), start=1):
        line = raw_line.strip()
        if not line.startswith("cpu"):
            continue
        counters = parse_cpu_line(line)
        if counters is None:
            warning = f"Skipping malformed cpu line {line_num}: {line!r}"
            warnings.append(warning)
            logger.debug(warning)
            continue
        records.append(counters)

    if not any(r.is_aggregate for r in records):
        return ParseResult(records=records, warnings=warnings, error="No aggregate 'cpu' line found")

    return ParseResult(records=records, warnings=warnings)
