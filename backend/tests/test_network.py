"""Tests for sar report parsing and the network sampler."""

import pytest

from conftest import make_runner, read_fixture
from hostwatch.services.command_runner import CommandError, CommandNotFoundError, CommandResult
from hostwatch.services.network import NetworkSampler
from hostwatch.services.sar_parser import parse_sar_network, select_average_rows
from hostwatch.services.sources import SourceStatus


class TestSelectAverageRows:
    """Test filtering of the summary rows."""

    def test_keeps_header_and_interfaces_without_loopback(self):
        """Average rows are kept and loopback is dropped."""
        rows = select_average_rows(read_fixture("sar_net_dev.txt")).splitlines()
        assert len(rows) == 4
        assert all(row.startswith("Average:") for row in rows)
        assert not any(row.split()[1] == "lo" for row in rows)

    def test_interfaces_containing_lo_are_kept(self):
        """Only the interface named exactly lo is dropped."""
        rows = select_average_rows(read_fixture("sar_net_dev.txt"))
        assert "wlo1" in rows


class TestParseSarNetwork:
    """Test header-driven parsing of sar interface rows."""

    def test_golden_average_rows(self):
        """Captured sar output gives the expected rates."""
        result = parse_sar_network(select_average_rows(read_fixture("sar_net_dev.txt")))
        assert result.ok
        assert [i.iface for i in result.records] == ["enp5s0", "docker0", "wlo1"]
        enp = result.records[0]
        assert enp.rx_kBs == 201.35
        assert enp.tx_kBs == 12.84

    def test_timestamped_rows_parse_the_same(self):
        """Rows prefixed by a timestamp parse like Average rows."""
        raw = (
            "09:41:12 AM     IFACE   rxpck/s   txpck/s    rxkB/s    txkB/s\n"
            "09:41:13 AM    enp5s0    152.00     98.00    201.35     12.84\n"
        )
        result = parse_sar_network(raw)
        assert result.records[0].iface == "enp5s0"
        assert result.records[0].rx_kBs == 201.35

    def test_reordered_columns(self):
        """Columns are located from the header, not by position."""
        raw = (
            "Average: txkB/s IFACE rxkB/s\n"
            "Average: 3.50 eth0 10.25\n"
        )
        result = parse_sar_network(raw)
        assert result.records[0].iface == "eth0"
        assert result.records[0].rx_kBs == 10.25
        assert result.records[0].tx_kBs == 3.50

    def test_transmit_column_optional(self):
        """A report without a transmit column reads tx as 0."""
        raw = "Average: IFACE rxkB/s\nAverage: eth0 7.00\n"
        result = parse_sar_network(raw)
        assert result.records[0].tx_kBs == 0.0

    def test_header_matching_is_case_insensitive(self):
        """Header names match regardless of case."""
        raw = "Average: iface RXKB/S TXKB/S\nAverage: eth0 1.00 2.00\n"
        result = parse_sar_network(raw)
        assert result.records[0].rx_kBs == 1.0
        assert result.records[0].tx_kBs == 2.0

    def test_no_qualifying_header_returns_empty(self):
        """Output without an interface header is a parse failure."""
        raw = "Average: IFACE rxpck/s txpck/s\nAverage: eth0 1.00 2.00\n"
        result = parse_sar_network(raw)
        assert result.records == []
        assert not result.ok

    def test_empty_output_returns_empty(self):
        """Empty output yields no interfaces."""
        result = parse_sar_network("")
        assert result.records == []

    def test_header_without_data_rows(self):
        """A header with no rows yields no interfaces."""
        result = parse_sar_network("Average: IFACE rxkB/s txkB/s\n")
        assert result.ok
        assert result.records == []

    def test_non_numeric_rate_reads_zero(self):
        """Unparsable rates read as 0."""
        result = parse_sar_network("Average: IFACE rxkB/s txkB/s\nAverage: eth0 n/a 1.5\n")
        assert result.records[0].rx_kBs == 0.0
        assert result.records[0].tx_kBs == 1.5

    def test_short_row_skipped(self):
        """Rows too short to hold the rate columns are skipped."""
        result = parse_sar_network("Average: IFACE rxpck/s rxkB/s\nAverage: eth0\n")
        assert result.records == []
        assert len(result.warnings) == 1


class TestNetworkSampler:
    """Test NetworkSampler outcomes."""

    @pytest.mark.asyncio
    async def test_success(self, settings):
        """Interfaces from sar are returned as success."""
        runner = make_runner(read_fixture("sar_net_dev.txt"))
        sampler = NetworkSampler(settings, runner)

        result = await sampler.sample()

        assert result.status == SourceStatus.SUCCESS
        assert len(result.value.interfaces) == 3
        runner.execute.assert_awaited_once_with(settings.network_command, check=True)

    @pytest.mark.asyncio
    async def test_missing_sar_is_empty_not_error(self, settings):
        """A missing sar binary gives an empty list, not an error."""
        sampler = NetworkSampler(settings, make_runner(side_effect=CommandNotFoundError("Command not found: sar")))

        result = await sampler.sample()

        assert result.status == SourceStatus.EMPTY
        assert result.value.interfaces == []
        assert "sar" in result.reason

    @pytest.mark.asyncio
    async def test_failed_sar_is_empty(self, settings):
        """A non-zero sar exit gives an empty list."""
        error = CommandError("Command failed (1): sar\nCannot open /var/log/sysstat", CommandResult("", "Cannot open", 1))
        sampler = NetworkSampler(settings, make_runner(side_effect=error))

        result = await sampler.sample()

        assert result.value.interfaces == []
        assert result.reason == "Command failed (1): sar"

    @pytest.mark.asyncio
    async def test_unrecognized_report_is_empty(self, settings):
        """Output without a usable header gives an empty list."""
        sampler = NetworkSampler(settings, make_runner("Linux 6.5.0 (box)\n\nsomething else\n"))

        result = await sampler.sample()

        assert result.status == SourceStatus.EMPTY
        assert result.value.interfaces == []
