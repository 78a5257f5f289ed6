"""Tagged results for tiered metric sources.

Each metric source is an ordered list of strategies. A strategy returns a
SourceResult, or None when it does not apply on this host, and the first
non-None result wins. Callers read ``status``/``tier`` to see which strategy
produced the value instead of having a failure silently masked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Sequence, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceStatus:
    SUCCESS = "success"
    DEGRADED = "degraded"
    EMPTY = "empty"


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    value: T
    status: str = SourceStatus.SUCCESS
    tier: str = ""
    reason: str | None = None

    @classmethod
    def success(cls, value: T, tier: str = "") -> SourceResult[T]:
        return cls(value=value, status=SourceStatus.SUCCESS, tier=tier)

    @classmethod
    def degraded(cls, value: T, reason: str, tier: str = "") -> SourceResult[T]:
        return cls(value=value, status=SourceStatus.DEGRADED, tier=tier, reason=reason)

    @classmethod
    def empty(cls, value: T, reason: str | None = None, tier: str = "") -> SourceResult[T]:
        return cls(value=value, status=SourceStatus.EMPTY, tier=tier, reason=reason)

    @property
    def is_success(self) -> bool:
        return self.status == SourceStatus.SUCCESS

    def describe(self) -> dict[str, str | None]:
        return {"status": self.status, "tier": self.tier, "reason": self.reason}


@dataclass(frozen=True)
class Strategy(Generic[T]):
    name: str
    run: Callable[[], Awaitable[SourceResult[T] | None]]


async def run_tiers(
    source: str,
    strategies: Sequence[Strategy[T]],
    default: Callable[[], SourceResult[T]],
) -> SourceResult[T]:
    """Try each strategy in order; fall back to ``default()`` when none applies.

    A strategy that raises moves on to the next tier. Nothing is retried.
    """
    for strategy in strategies:
        try:
            result = await strategy.run()
        except Exception as exc:
            logger.warning("%s: tier '%s' failed: %s", source, strategy.name, exc)
            continue

        if result is None:
            logger.debug("%s: tier '%s' not applicable", source, strategy.name)
            continue

        if not result.tier:
            result = SourceResult(value=result.value, status=result.status, tier=strategy.name, reason=result.reason)
        if not result.is_success:
            logger.info("%s: tier '%s' returned %s (%s)", source, result.tier, result.status, result.reason)
        return result

    fallback = default()
    logger.warning("%s: all tiers exhausted, using defaults", source)
    return fallback
