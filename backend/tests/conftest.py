"""Shared helpers for the sampler tests."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from hostwatch.config import Settings
from hostwatch.services.command_runner import CommandResult


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text()


def make_runner(stdout: str = "", stderr: str = "", exit_code: int = 0, side_effect=None) -> MagicMock:
    """A CommandRunner stand-in whose execute() returns one canned result or raises."""
    runner = MagicMock()
    if side_effect is not None:
        runner.execute = AsyncMock(side_effect=side_effect)
    else:
        runner.execute = AsyncMock(return_value=CommandResult(stdout=stdout, stderr=stderr, exit_code=exit_code))
    return runner


@pytest.fixture
def settings() -> Settings:
    return Settings(cpu_sample_delay_seconds=0, command_timeout_seconds=5)
