from __future__ import annotations

import logging

from hostwatch.config import Settings
from hostwatch.schemas.snapshot import GpuSample
from hostwatch.services.command_runner import CommandRunner, CommandRunnerError
from hostwatch.services.nvidia_smi_parser import parse_nvidia_smi_csv
from hostwatch.services.sources import SourceResult


logger = logging.getLogger(__name__)


class GpuSampler:
    """Power, utilization and memory counters per GPU from nvidia-smi.

    A missing or failing tool is reported as ``empty`` with a reason, while
    a working tool that lists no GPUs is a ``success`` with an empty list.
    """

    def __init__(self, settings: Settings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    async def sample(self) -> SourceResult[list[GpuSample]]:
        try:
            result = await self.runner.execute(self.settings.gpu_command, check=True)
        except CommandRunnerError as exc:
            logger.info("nvidia-smi unavailable: %s", exc)
            return SourceResult.empty([], reason=f"nvidia-smi unavailable: {str(exc).splitlines()[0]}", tier="nvidia_smi")

        parsed = parse_nvidia_smi_csv(result.stdout)
        return SourceResult.success(parsed.records, tier="nvidia_smi")
