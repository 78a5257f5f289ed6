from __future__ import annotations

import logging

from hostwatch.config import Settings
from hostwatch.schemas.snapshot import DockerSample
from hostwatch.services.command_runner import CommandRunner, CommandRunnerError
from hostwatch.services.docker_parser import parse_docker_ps
from hostwatch.services.sources import SourceResult


logger = logging.getLogger(__name__)


class DockerLister:
    """Containers visible to `docker ps`; an unavailable daemon yields an empty list."""

    def __init__(self, settings: Settings, runner: CommandRunner):
        self.settings = settings
        self.runner = runner

    async def sample(self) -> SourceResult[DockerSample]:
        try:
            result = await self.runner.execute(self.settings.docker_command)
        except CommandRunnerError as exc:
            logger.warning("Error fetching Docker containers: %s", exc)
            return SourceResult.empty(DockerSample(), reason=str(exc), tier="docker_ps")

        if result.exit_code != 0:
            logger.warning("Error running docker ps (exit %d): %s", result.exit_code, result.stderr)
            return SourceResult.empty(DockerSample(), reason=result.stderr or f"exit code {result.exit_code}", tier="docker_ps")

        parsed = parse_docker_ps(result.stdout)
        return SourceResult.success(DockerSample(containers=parsed.records), tier="docker_ps")
