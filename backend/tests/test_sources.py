"""Tests for tiered source resolution."""

import pytest

from hostwatch.services.sources import SourceResult, SourceStatus, Strategy, run_tiers


def strategy(name, result=None, error=None, calls=None):
    async def run():
        if calls is not None:
            calls.append(name)
        if error is not None:
            raise error
        return result

    return Strategy(name, run)


class TestSourceResult:
    """Test SourceResult constructors."""

    def test_success(self):
        """success() carries no reason."""
        result = SourceResult.success(42, tier="primary")
        assert result.status == SourceStatus.SUCCESS
        assert result.is_success is True
        assert result.reason is None

    def test_degraded_carries_reason(self):
        """degraded() keeps the reason given."""
        result = SourceResult.degraded(0, "approximation")
        assert result.status == SourceStatus.DEGRADED
        assert result.reason == "approximation"
        assert result.is_success is False

    def test_empty(self):
        """empty() is tagged empty."""
        result = SourceResult.empty([], reason="tool missing")
        assert result.status == SourceStatus.EMPTY
        assert result.value == []

    def test_describe(self):
        """describe() exposes status, tier and reason."""
        result = SourceResult.degraded(1, "why", tier="t2")
        assert result.describe() == {"status": "degraded", "tier": "t2", "reason": "why"}


class TestRunTiers:
    """Test ordered fallback through strategies."""

    @pytest.mark.asyncio
    async def test_first_applicable_tier_wins(self):
        """Later tiers are not run once one applies."""
        calls = []
        result = await run_tiers(
            "test",
            [
                strategy("one", SourceResult.success("a"), calls=calls),
                strategy("two", SourceResult.success("b"), calls=calls),
            ],
            default=lambda: SourceResult.degraded("default", "none"),
        )
        assert result.value == "a"
        assert result.tier == "one"
        assert calls == ["one"]

    @pytest.mark.asyncio
    async def test_not_applicable_moves_to_next_tier(self):
        """A tier returning None hands over to the next one."""
        result = await run_tiers(
            "test",
            [strategy("one", None), strategy("two", SourceResult.success("b"))],
            default=lambda: SourceResult.degraded("default", "none"),
        )
        assert result.value == "b"
        assert result.tier == "two"

    @pytest.mark.asyncio
    async def test_raising_tier_is_not_retried(self):
        """A raising tier runs once and the next tier takes over."""
        calls = []
        result = await run_tiers(
            "test",
            [
                strategy("one", error=OSError("boom"), calls=calls),
                strategy("two", SourceResult.success("b"), calls=calls),
            ],
            default=lambda: SourceResult.degraded("default", "none"),
        )
        assert result.value == "b"
        assert calls == ["one", "two"]

    @pytest.mark.asyncio
    async def test_default_when_all_tiers_exhausted(self):
        """The default is used when no tier applies."""
        result = await run_tiers(
            "test",
            [strategy("one", None), strategy("two", error=RuntimeError("x"))],
            default=lambda: SourceResult.degraded("default", "none", tier="defaults"),
        )
        assert result.value == "default"
        assert result.tier == "defaults"
        assert result.status == SourceStatus.DEGRADED

    @pytest.mark.asyncio
    async def test_explicit_tier_name_is_kept(self):
        """A tier name set by the strategy is not overwritten."""
        result = await run_tiers(
            "test",
            [strategy("one", SourceResult.success("a", tier="custom"))],
            default=lambda: SourceResult.empty(None),
        )
        assert result.tier == "custom"
