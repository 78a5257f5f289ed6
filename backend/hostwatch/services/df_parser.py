from __future__ import annotations

import logging

from hostwatch.schemas.snapshot import BlockDevice
from hostwatch.services.parsing import ParseResult
from hostwatch.utils.units import bytes_to_mb, human_to_bytes, parse_percent


logger = logging.getLogger(__name__)

DF_COLUMNS = 6  # Filesystem, Size, Used, Avail, Use%, Mounted on


def parse_df_output(raw: str, device_prefix: str) -> ParseResult[BlockDevice]:
    """Parse `df -h` output into the block devices whose path starts with ``device_prefix``."""
    devices: list[BlockDevice] = []
    warnings: list[str] = []

    for raw_line in raw.splitlines():
        parts = raw_line.split()
        if not parts:
            continue

        if len(parts) < DF_COLUMNS:
            warning = f"Skipping df line with too few columns: {raw_line!r}"
            warnings.append(warning)
            logger.debug(warning)
            continue

        filesystem, size_str, used_str, avail_str, capacity_str = parts[:5]
        # Mount points may contain spaces
        mount_point = " ".join(parts[5:])

        if not filesystem.startswith(device_prefix):
            continue

        total_bytes = human_to_bytes(size_str)
        if total_bytes <= 0:
            warning = f"Skipping device with invalid size: {filesystem}"
            warnings.append(warning)
            logger.debug(warning)
            continue

        devices.append(
            BlockDevice(
                path=filesystem,
                mount_point=mount_point,
                total=bytes_to_mb(total_bytes),
                used=bytes_to_mb(human_to_bytes(used_str)),
                free=bytes_to_mb(human_to_bytes(avail_str)),
                percentage=parse_percent(capacity_str),
                human_size=size_str,
                human_used=used_str,
                human_free=avail_str,
            )
        )

    return ParseResult(records=devices, warnings=warnings)
