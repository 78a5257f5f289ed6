from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

import psutil

from hostwatch.config import Settings
from hostwatch.schemas.snapshot import CoreUtilization, CpuSample
from hostwatch.services.proc_stat_parser import CpuCounters, parse_proc_stat
from hostwatch.services.sources import SourceResult, Strategy, run_tiers
from hostwatch.utils.units import clamp_percent


logger = logging.getLogger(__name__)


def delta_usage(total_delta: float, idle_delta: float) -> float:
    """Busy share of a counter interval as a percentage in [0, 100]."""
    if total_delta <= 0:
        return 0.0
    return clamp_percent((total_delta - idle_delta) / total_delta * 100)


@dataclass(frozen=True)
class CoreTimes:
    total: float
    idle: float


def core_times_from_psutil(times) -> CoreTimes:
    """Collapse a psutil scputimes into total/idle (user + nice + system + idle + irq)."""
    user = getattr(times, "user", 0.0)
    nice = getattr(times, "nice", 0.0)
    system = getattr(times, "system", 0.0)
    idle = getattr(times, "idle", 0.0)
    irq = getattr(times, "irq", 0.0)
    return CoreTimes(total=user + nice + system + idle + irq, idle=idle)


@dataclass
class CpuBaseline:
    """Last-seen per-core counters for the fallback delta path, keyed by core index."""

    previous: dict[int, CoreTimes] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def advance(self, current: Sequence[CoreTimes]) -> tuple[list[float], float]:
        """Compute per-core and aggregate usage against the baseline, then replace it.

        A core without a previous reading is measured against itself and reads 0.
        """
        per_core: list[float] = []
        total_delta = 0.0
        idle_delta = 0.0
        for idx, times in enumerate(current):
            prev = self.previous.get(idx, times)
            core_total = times.total - prev.total
            core_idle = times.idle - prev.idle
            per_core.append(delta_usage(core_total, core_idle))
            total_delta += core_total
            idle_delta += core_idle
            self.previous[idx] = times
        return per_core, delta_usage(total_delta, idle_delta)


def degraded_cpu_sample() -> CpuSample:
    return CpuSample(usage=0.0, cores=0, core_utilizations=[])


def build_cpu_sample(usage: float, per_core: Sequence[float]) -> CpuSample:
    return CpuSample(
        usage=round(usage, 1),
        cores=len(per_core),
        core_utilizations=[CoreUtilization(usage=round(u, 1)) for u in per_core],
    )


def usage_between(first: Sequence[CpuCounters], second: Sequence[CpuCounters]) -> CpuSample:
    """Delta usage between two /proc/stat reads, per core sorted by core id."""
    before = {c.core_id: c for c in first}
    aggregate_usage = 0.0
    cores: list[tuple[int, float]] = []

    for counters in second:
        prev = before.get(counters.core_id)
        if prev is None:
            logger.debug("cpu%s missing from first /proc/stat read, skipping", counters.core_id)
            continue
        usage = delta_usage(counters.total - prev.total, counters.idle - prev.idle)
        if counters.is_aggregate:
            aggregate_usage = usage
        else:
            cores.append((counters.core_id, usage))

    cores.sort(key=lambda item: item[0])
    return build_cpu_sample(aggregate_usage, [usage for _, usage in cores])


class CpuSampler:
    """Aggregate and per-core CPU utilization from successive counter snapshots."""

    def __init__(
        self,
        settings: Settings,
        baseline: CpuBaseline | None = None,
        per_core_times: Callable[[], list] | None = None,
    ):
        self.settings = settings
        self.baseline = baseline or CpuBaseline()
        self._per_core_times = per_core_times or (lambda: psutil.cpu_times(percpu=True))

    async def sample(self) -> SourceResult[CpuSample]:
        return await run_tiers(
            "cpu",
            [
                Strategy("proc_stat", self._sample_proc_stat),
                Strategy("cpu_times_delta", self._sample_cpu_times),
            ],
            default=lambda: SourceResult.degraded(degraded_cpu_sample(), "no CPU counters available", tier="defaults"),
        )

    async def _read_proc_stat(self) -> list[CpuCounters] | None:
        path = Path(self.settings.proc_stat_path)
        try:
            raw = await asyncio.to_thread(path.read_text)
        except OSError as exc:
            logger.debug("Cannot read %s: %s", path, exc)
            return None
        result = parse_proc_stat(raw)
        if not result.ok:
            logger.debug("Unusable %s: %s", path, result.error)
            return None
        return result.records

    async def _sample_proc_stat(self) -> SourceResult[CpuSample] | None:
        first = await self._read_proc_stat()
        if first is None:
            return None
        await asyncio.sleep(self.settings.cpu_sample_delay_seconds)
        second = await self._read_proc_stat()
        if second is None:
            return None
        return SourceResult.success(usage_between(first, second))

    async def _sample_cpu_times(self) -> SourceResult[CpuSample] | None:
        # Read, delta and baseline overwrite run as one step so an older
        # reading never replaces a newer baseline.
        async with self.baseline.lock:
            try:
                raw_times = await asyncio.to_thread(self._per_core_times)
            except (OSError, NotImplementedError, psutil.Error) as exc:
                logger.debug("Per-core CPU times unavailable: %s", exc)
                return None
            current = [core_times_from_psutil(t) for t in raw_times or []]
            if not current:
                return None

            first_call = not self.baseline.previous
            per_core, aggregate = self.baseline.advance(current)

        sample = build_cpu_sample(aggregate, per_core)
        if first_call:
            return SourceResult.degraded(sample, "no previous CPU baseline, usage reads 0")
        return SourceResult.success(sample)
