from __future__ import annotations

import asyncio
import logging
import os
from typing import Callable

import psutil

from hostwatch.config import Settings
from hostwatch.schemas.snapshot import BlockDevice, DiskSample, RootUsage
from hostwatch.services.command_runner import CommandRunner, CommandRunnerError
from hostwatch.services.df_parser import parse_df_output
from hostwatch.services.sources import SourceResult, Strategy, run_tiers
from hostwatch.utils.units import bytes_to_mb, usage_percent


logger = logging.getLogger(__name__)

# Returned when disk sampling fails outright
DEFAULT_ROOT_TOTAL_MB = 10240
DEFAULT_ROOT_USED_MB = 5120
DEFAULT_ROOT_FREE_MB = 5120
DEFAULT_ROOT_PERCENTAGE = 50

MEMORY_APPROXIMATION = "root usage approximated from system memory, not a disk metric"


def default_disk_sample() -> DiskSample:
    return DiskSample(
        root=RootUsage(
            total=DEFAULT_ROOT_TOTAL_MB,
            used=DEFAULT_ROOT_USED_MB,
            free=DEFAULT_ROOT_FREE_MB,
            percentage=DEFAULT_ROOT_PERCENTAGE,
        ),
        nvme_devices=[],
        total_nvme_count=0,
    )


def root_from_bytes(total_bytes: float, free_bytes: float) -> RootUsage:
    used_bytes = total_bytes - free_bytes
    return RootUsage(
        total=bytes_to_mb(total_bytes),
        used=bytes_to_mb(used_bytes),
        free=bytes_to_mb(free_bytes),
        percentage=usage_percent(used_bytes, total_bytes),
    )


def root_from_device(device: BlockDevice) -> RootUsage:
    return RootUsage(
        total=device.total,
        used=device.used,
        free=device.free,
        percentage=device.percentage,
        human_size=device.human_size,
        human_used=device.human_used,
        human_free=device.human_free,
    )


class DiskResolver:
    """Root filesystem usage plus the high-speed block devices reported by df.

    Root usage comes from the first tier that yields it: the df device
    mounted at the root, then statvfs on the root mount, then a system
    memory approximation. Any unexpected failure returns fixed defaults.
    """

    def __init__(
        self,
        settings: Settings,
        runner: CommandRunner,
        statvfs: Callable[[str], os.statvfs_result] | None = None,
        virtual_memory: Callable[[], object] | None = None,
    ):
        self.settings = settings
        self.runner = runner
        self._statvfs = statvfs or getattr(os, "statvfs", None)
        self._virtual_memory = virtual_memory or psutil.virtual_memory

    async def sample(self) -> SourceResult[DiskSample]:
        try:
            return await self._resolve()
        except Exception as exc:
            logger.error("Critical error resolving disk usage: %s", exc, exc_info=True)
            return SourceResult.degraded(default_disk_sample(), f"disk sampling failed: {exc}", tier="defaults")

    async def _resolve(self) -> SourceResult[DiskSample]:
        devices = await self.list_devices()
        root_device = next((d for d in devices if d.mount_point == self.settings.disk_root_mount), None)

        async def from_devices() -> SourceResult[RootUsage] | None:
            if root_device is None:
                if devices:
                    logger.debug("%s devices exist but none mounted at %s", self.settings.disk_device_prefix, self.settings.disk_root_mount)
                return None
            return SourceResult.success(root_from_device(root_device))

        root = await run_tiers(
            "disk",
            [
                Strategy("df", from_devices),
                Strategy("statvfs", self._root_from_statvfs),
                Strategy("memory_approximation", self._root_from_memory),
            ],
            default=lambda: SourceResult.degraded(default_disk_sample().root, "no root usage source", tier="defaults"),
        )

        sample = DiskSample(root=root.value, nvme_devices=devices, total_nvme_count=len(devices))
        return SourceResult(value=sample, status=root.status, tier=root.tier, reason=root.reason)

    async def list_devices(self) -> list[BlockDevice]:
        """Tier 1: block devices matching the configured prefix, from df."""
        try:
            result = await self.runner.execute(self.settings.disk_command)
        except CommandRunnerError as exc:
            logger.warning("Failed to run %r: %s", self.settings.disk_command, exc)
            return []

        # df exits non-zero when any mount is unreadable but still prints the rest
        if result.exit_code != 0 and result.stderr:
            logger.warning("df warning (exit %d): %s", result.exit_code, result.stderr)

        parsed = parse_df_output(result.stdout, self.settings.disk_device_prefix)
        if not parsed.records:
            logger.debug("No %s devices found via df", self.settings.disk_device_prefix)
        return parsed.records

    async def _root_from_statvfs(self) -> SourceResult[RootUsage] | None:
        """Tier 2: block size x block count of the root mount."""
        if self._statvfs is None:
            return None
        try:
            stats = await asyncio.to_thread(self._statvfs, self.settings.disk_root_mount)
        except (OSError, NotImplementedError) as exc:
            logger.warning("statvfs(%s) failed: %s", self.settings.disk_root_mount, exc)
            return None

        total_bytes = stats.f_frsize * stats.f_blocks
        free_bytes = stats.f_frsize * stats.f_bfree
        return SourceResult.success(root_from_bytes(total_bytes, free_bytes))

    async def _root_from_memory(self) -> SourceResult[RootUsage] | None:
        """Tier 3: total/free system memory standing in for the root filesystem."""
        memory = await asyncio.to_thread(self._virtual_memory)
        logger.warning("Failed to get root stats; using system memory approximation")
        return SourceResult.degraded(root_from_bytes(memory.total, memory.free), MEMORY_APPROXIMATION)
