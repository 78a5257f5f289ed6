from __future__ import annotations

import logging

from hostwatch.schemas.snapshot import GpuSample
from hostwatch.services.parsing import ParseResult
from hostwatch.utils.units import parse_float


logger = logging.getLogger(__name__)

# power.draw, power.limit, utilization.gpu, memory.used, memory.total
GPU_FIELDS = 5


def parse_nvidia_smi_csv(raw: str) -> ParseResult[GpuSample]:
    """Parse `nvidia-smi --format=csv,nounits,noheader` rows; '[N/A]' values read as 0."""
    gpus: list[GpuSample] = []
    warnings: list[str] = []

    for line in raw.splitlines():
        if not line.strip():
            continue
        parts = [part.strip() for part in line.split(",")]
        if len(parts) < GPU_FIELDS:
            warning = f"Skipping nvidia-smi row with {len(parts)} fields: {line!r}"
            warnings.append(warning)
            logger.debug(warning)
            continue
        power_draw, power_limit, utilization, memory_used, memory_total = (parse_float(p) for p in parts[:GPU_FIELDS])
        gpus.append(
            GpuSample(
                power_draw=power_draw,
                power_limit=power_limit,
                utilization=utilization,
                memory_used=memory_used,
                memory_total=memory_total,
            )
        )

    return ParseResult(records=gpus, warnings=warnings)
