from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from hostwatch.config import Settings
from hostwatch.schemas.snapshot import Snapshot, SourceInfo
from hostwatch.services.command_runner import CommandRunner
from hostwatch.services.cpu import CpuSampler
from hostwatch.services.disk import DiskResolver
from hostwatch.services.docker import DockerLister
from hostwatch.services.gpu import GpuSampler
from hostwatch.services.memory import MemorySampler, SystemSampler
from hostwatch.services.network import NetworkSampler


logger = logging.getLogger(__name__)


class SnapshotError(RuntimeError):
    """A sampler raised instead of degrading; no snapshot is produced for the poll."""

    def __init__(self, source: str, error: BaseException):
        super().__init__(f"{source} sampler failed: {error}")
        self.source = source
        self.error = error


class Aggregator:
    """Runs every sampler concurrently and composes one timestamped Snapshot."""

    def __init__(
        self,
        settings: Settings,
        runner: CommandRunner | None = None,
        *,
        cpu: CpuSampler | None = None,
        memory: MemorySampler | None = None,
        gpu: GpuSampler | None = None,
        disk: DiskResolver | None = None,
        network: NetworkSampler | None = None,
        docker: DockerLister | None = None,
        system: SystemSampler | None = None,
    ):
        self.settings = settings
        runner = runner or CommandRunner(settings)
        self.samplers = {
            "cpu": cpu or CpuSampler(settings),
            "memory": memory or MemorySampler(),
            "gpus": gpu or GpuSampler(settings, runner),
            "disk": disk or DiskResolver(settings, runner),
            "network": network or NetworkSampler(settings, runner),
            "docker": docker or DockerLister(settings, runner),
            "system": system or SystemSampler(),
        }

    async def collect(self) -> Snapshot:
        names = list(self.samplers)
        outcomes = await asyncio.gather(
            *(self.samplers[name].sample() for name in names),
            return_exceptions=True,
        )

        results = {}
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.error("Error fetching monitoring data from %s: %s", name, outcome, exc_info=outcome)
                raise SnapshotError(name, outcome) from outcome
            results[name] = outcome

        snapshot = Snapshot(
            timestamp=datetime.now(timezone.utc).isoformat(),
            cpu=results["cpu"].value,
            memory=results["memory"].value,
            gpus=results["gpus"].value,
            disk=results["disk"].value,
            network=results["network"].value,
            docker=results["docker"].value,
            system=results["system"].value,
            sources={name: SourceInfo(**result.describe()) for name, result in results.items()},
        )
        logger.debug("Collected snapshot with %d GPU(s), %d container(s)", len(snapshot.gpus), len(snapshot.docker.containers))
        return snapshot
