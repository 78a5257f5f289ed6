"""Tests for nvidia-smi parsing and the GPU sampler."""

import pytest

from conftest import make_runner, read_fixture
from hostwatch.services.command_runner import CommandNotFoundError, CommandTimeoutError
from hostwatch.services.gpu import GpuSampler
from hostwatch.services.nvidia_smi_parser import parse_nvidia_smi_csv
from hostwatch.services.sources import SourceStatus


class TestParseNvidiaSmi:
    """Test CSV row parsing."""

    def test_golden_rows(self):
        """Captured CSV rows parse into GPU samples."""
        first, second = parse_nvidia_smi_csv(read_fixture("nvidia_smi.csv")).records
        assert first.power_draw == 68.52
        assert first.power_limit == 350.0
        assert first.utilization == 23.0
        assert first.memory_used == 4096.0
        assert first.memory_total == 24576.0
        assert second.power_draw == 0.0
        assert second.memory_total == 16384.0

    def test_short_row_skipped(self):
        """Rows with fewer than five fields are skipped."""
        result = parse_nvidia_smi_csv("1, 2, 3\n")
        assert result.records == []
        assert len(result.warnings) == 1

    def test_empty_output(self):
        """No output means no GPUs."""
        assert parse_nvidia_smi_csv("").records == []


class TestGpuSampler:
    """Test how GPU absence is reported."""

    @pytest.mark.asyncio
    async def test_gpus_listed(self, settings):
        """Each GPU reported by the tool is returned."""
        sampler = GpuSampler(settings, make_runner(read_fixture("nvidia_smi.csv")))

        result = await sampler.sample()

        assert result.status == SourceStatus.SUCCESS
        assert len(result.value) == 2

    @pytest.mark.asyncio
    async def test_tool_missing_is_empty_with_reason(self, settings):
        """A missing nvidia-smi is tagged empty with a reason."""
        sampler = GpuSampler(settings, make_runner(side_effect=CommandNotFoundError("Command not found: nvidia-smi")))

        result = await sampler.sample()

        assert result.value == []
        assert result.status == SourceStatus.EMPTY
        assert result.reason.startswith("nvidia-smi unavailable")

    @pytest.mark.asyncio
    async def test_timeout_is_empty(self, settings):
        """A hung nvidia-smi is treated as unavailable."""
        sampler = GpuSampler(settings, make_runner(side_effect=CommandTimeoutError("Command timed out after 5s")))

        result = await sampler.sample()

        assert result.value == []
        assert result.status == SourceStatus.EMPTY

    @pytest.mark.asyncio
    async def test_zero_gpus_is_success(self, settings):
        """A working tool listing no GPUs is distinguishable from a missing tool."""
        sampler = GpuSampler(settings, make_runner(""))

        result = await sampler.sample()

        assert result.value == []
        assert result.status == SourceStatus.SUCCESS
