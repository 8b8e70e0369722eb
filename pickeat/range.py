"""Inclusive, one-based ranges of results used for pagination."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "RangeError",
    "OutOfBoundsError",
    "TooWideError",
    "FromGreaterThanToError",
    "NotStrictlyPositiveError",
    "Range",
]


class RangeError(ValueError):
    """Base class of the errors about a range."""


class OutOfBoundsError(RangeError):
    def __init__(self, range_: Range, total_count: int) -> None:
        super().__init__(f"range ({range_}) starts after the max count ({total_count})")
        self.range = range_
        self.total_count = total_count


class TooWideError(RangeError):
    def __init__(self, range_: Range, max_range_size: int) -> None:
        super().__init__(f"range ({range_}) is wider than allowed ({max_range_size})")
        self.range = range_
        self.max_range_size = max_range_size


class FromGreaterThanToError(RangeError):
    def __init__(self, start: int, end: int) -> None:
        super().__init__(
            f"from ({start}) should be less than or equal to to ({end}) in range"
        )
        self.start = start
        self.end = end


class NotStrictlyPositiveError(RangeError):
    def __init__(self, start: int, end: int) -> None:
        super().__init__(
            f"both from ({start}) and to ({end}) should be strictly positive in range"
        )
        self.start = start
        self.end = end


@dataclass(frozen=True)
class Range:
    """Items ``start`` to ``end``, both included, counted from 1."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start <= 0 or self.end <= 0:
            raise NotStrictlyPositiveError(self.start, self.end)
        if self.start > self.end:
            raise FromGreaterThanToError(self.start, self.end)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"

    def validate(
        self, max_range_size: int | None = None, total_count: int | None = None
    ) -> None:
        """Raise if the range is wider than allowed or starts past the total."""
        size = self.end - self.start + 1
        if max_range_size is not None and size > max_range_size:
            raise TooWideError(self, max_range_size)
        if total_count is not None and self.start > total_count:
            raise OutOfBoundsError(self, total_count)