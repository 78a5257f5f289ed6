from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass
class ParseResult(Generic[T]):
    """Records parsed from one command's output.

    ``error`` is set when the output as a whole could not be understood
    (e.g. no header row); ``warnings`` collects records that were skipped.
    """

    records: list[T] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: str) -> ParseResult[T]:
        return cls(records=[], warnings=[], error=error)
