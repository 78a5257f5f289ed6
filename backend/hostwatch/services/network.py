from __future__ import annotations

import logging

from hostwatch.config import Settings
from hostwatch.schemas.snapshot import NetworkSample
from hostwatch.services.command_runner import CommandRunner, CommandRunnerError
from hostwatch.services.sar_parser import parse_sar_network, select_average_rows
from hostwatch.services.sources import SourceResult


logger = logging.getLogger(__name__)


class NetworkSampler:
    """Per-interface receive/transmit rates from a one-shot sar report."""

    def __init__(self, settings: Settings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    async def sample(self) -> SourceResult[NetworkSample]:
        try:
            result = await self.runner.execute(self.settings.network_command, check=True)
        except CommandRunnerError as exc:
            logger.warning("Network stats unavailable: %s", exc)
            return SourceResult.empty(NetworkSample(), reason=str(exc).splitlines()[0], tier="sar")

        parsed = parse_sar_network(select_average_rows(result.stdout))
        if not parsed.ok:
            logger.debug("No network data yet: %s", parsed.error)
            return SourceResult.empty(NetworkSample(), reason=parsed.error, tier="sar")

        if not parsed.records:
            return SourceResult.empty(NetworkSample(), reason="no interface rows", tier="sar")

        return SourceResult.success(NetworkSample(interfaces=parsed.records), tier="sar")
