from __future__ import annotations

import asyncio
import logging
from typing import Callable

import psutil

from hostwatch.schemas.snapshot import MemorySample, SystemSample
from hostwatch.services.sources import SourceResult
from hostwatch.utils.units import bytes_to_mb, usage_percent


logger = logging.getLogger(__name__)


class MemorySampler:
    def __init__(self, virtual_memory: Callable[[], object] | None = None):
        self._virtual_memory = virtual_memory or psutil.virtual_memory

    async def sample(self) -> SourceResult[MemorySample]:
        memory = await asyncio.to_thread(self._virtual_memory)
        used = memory.total - memory.free
        return SourceResult.success(
            MemorySample(
                total=bytes_to_mb(memory.total),
                used=bytes_to_mb(used),
                free=bytes_to_mb(memory.free),
                available=bytes_to_mb(memory.available),
                percentage=usage_percent(used, memory.total),
            ),
            tier="psutil",
        )


class SystemSampler:
    """Host-level load average and free/total memory in bytes."""

    def __init__(
        self,
        virtual_memory: Callable[[], object] | None = None,
        load_average: Callable[[], tuple[float, float, float]] | None = None,
    ):
        self._virtual_memory = virtual_memory or psutil.virtual_memory
        self._load_average = load_average or psutil.getloadavg

    async def sample(self) -> SourceResult[SystemSample]:
        memory = await asyncio.to_thread(self._virtual_memory)
        try:
            load = await asyncio.to_thread(self._load_average)
        except (OSError, AttributeError) as exc:
            logger.debug("Load average unavailable: %s", exc)
            return SourceResult.degraded(
                SystemSample(load_average=(0.0, 0.0, 0.0), free_memory=memory.free, total_memory=memory.total),
                reason="load average unavailable",
                tier="psutil",
            )
        return SourceResult.success(
            SystemSample(
                load_average=tuple(float(v) for v in load),
                free_memory=memory.free,
                total_memory=memory.total,
            ),
            tier="psutil",
        )
