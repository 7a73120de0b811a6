"""Byte size and duration values used by the bulk settings.

Both types parse the human readable forms found in configuration files
("10mb", "5s") and render back to the shortest equivalent string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ByteSizeUnit(Enum):
    """Binary byte size units."""

    BYTES = ("b", 1)
    KB = ("kb", 1024)
    MB = ("mb", 1024**2)
    GB = ("gb", 1024**3)
    TB = ("tb", 1024**4)
    PB = ("pb", 1024**5)

    @property
    def suffix(self) -> str:
        return self.value[0]

    @property
    def factor(self) -> int:
        return self.value[1]

    def to_bytes(self, size: int) -> int:
        return size * self.factor


# Longest suffixes first so "mb" is not read as "b".
_BYTE_SUFFIXES: tuple[tuple[str, ByteSizeUnit], ...] = (
    ("kb", ByteSizeUnit.KB),
    ("mb", ByteSizeUnit.MB),
    ("gb", ByteSizeUnit.GB),
    ("tb", ByteSizeUnit.TB),
    ("pb", ByteSizeUnit.PB),
    ("k", ByteSizeUnit.KB),
    ("m", ByteSizeUnit.MB),
    ("g", ByteSizeUnit.GB),
    ("t", ByteSizeUnit.TB),
    ("p", ByteSizeUnit.PB),
    ("b", ByteSizeUnit.BYTES),
)

_MILLIS_PER_SECOND = 1000
_MILLIS_PER_MINUTE = 60 * _MILLIS_PER_SECOND
_MILLIS_PER_HOUR = 60 * _MILLIS_PER_MINUTE
_MILLIS_PER_DAY = 24 * _MILLIS_PER_HOUR

_TIME_SUFFIXES: tuple[tuple[str, int], ...] = (
    ("ms", 1),
    ("s", _MILLIS_PER_SECOND),
    ("m", _MILLIS_PER_MINUTE),
    ("h", _MILLIS_PER_HOUR),
    ("d", _MILLIS_PER_DAY),
)


def _format_one_decimal(value: float, suffix: str) -> str:
    """Render value with at most one (truncated) decimal, dropping ``.0``."""
    whole, _, fraction = repr(float(value)).partition(".")
    if not fraction or fraction[0] == "0":
        return f"{whole}{suffix}"
    return f"{whole}.{fraction[0]}{suffix}"


@dataclass(frozen=True)
class ByteSizeValue:
    """A size in bytes, expressed as a count of some unit."""

    size: int
    unit: ByteSizeUnit = ByteSizeUnit.BYTES

    def __post_init__(self) -> None:
        if self.size < -1 or (self.size == -1 and self.unit is not ByteSizeUnit.BYTES):
            raise ValueError(
                f"Values less than -1 bytes are not supported: {self.size}{self.unit.suffix}"
            )

    @property
    def bytes(self) -> int:
        return self.unit.to_bytes(self.size)

    @property
    def enabled(self) -> bool:
        """A threshold of zero or less means "no limit"."""
        return self.bytes > 0

    @classmethod
    def parse(cls, value: str | int | ByteSizeValue | None) -> ByteSizeValue | None:
        """Parse "10mb", "512k", "1.5gb", "0" or a plain byte count.

        Raises:
            ValueError: If the value has no recognised unit.
        """
        if value is None or isinstance(value, ByteSizeValue):
            return value
        if isinstance(value, int):
            return cls(value)

        normalized = value.strip().lower()
        if normalized in ("0", "-1"):
            return cls(int(normalized))

        for suffix, unit in _BYTE_SUFFIXES:
            if normalized.endswith(suffix):
                number = normalized[: -len(suffix)].strip()
                try:
                    return cls(int(number), unit)
                except ValueError:
                    pass
                try:
                    return cls(int(float(number) * unit.factor))
                except ValueError:
                    raise ValueError(
                        f"failed to parse value [{value}] as a size in bytes"
                    ) from None
        raise ValueError(
            f"failed to parse value [{value}] as a size in bytes: "
            "unit is missing or unrecognized"
        )

    def __str__(self) -> str:
        total = self.bytes
        if total <= 0:
            return str(total)
        unit = ByteSizeUnit.BYTES
        for candidate in ByteSizeUnit:
            if total >= candidate.factor:
                unit = candidate
        return _format_one_decimal(total / unit.factor, unit.suffix)


@dataclass(frozen=True)
class TimeValue:
    """A duration with millisecond precision."""

    millis: int

    @property
    def seconds(self) -> float:
        return self.millis / _MILLIS_PER_SECOND

    @property
    def enabled(self) -> bool:
        return self.millis > 0

    @classmethod
    def of_seconds(cls, seconds: float) -> TimeValue:
        return cls(int(seconds * _MILLIS_PER_SECOND))

    @classmethod
    def parse(cls, value: str | int | TimeValue | None) -> TimeValue | None:
        """Parse "500ms", "5s", "1m", "2h", "30d", "0" or a plain millisecond count.

        Raises:
            ValueError: If the value has no recognised unit.
        """
        if value is None or isinstance(value, TimeValue):
            return value
        if isinstance(value, int):
            return cls(value)

        normalized = value.strip().lower()
        if normalized in ("0", "-1"):
            return cls(int(normalized))

        for suffix, factor in _TIME_SUFFIXES:
            if normalized.endswith(suffix):
                number = normalized[: -len(suffix)].strip()
                try:
                    return cls(int(number) * factor)
                except ValueError:
                    raise ValueError(f"Failed to parse timevalue [{value}].") from None
        raise ValueError(
            f"Failed to parse timevalue [{value}]: unit is missing or unrecognized"
        )

    def __str__(self) -> str:
        if self.millis < 0:
            return str(self.millis)
        if self.millis == 0:
            return "0s"
        for suffix, factor in reversed(_TIME_SUFFIXES):
            if self.millis >= factor:
                return _format_one_decimal(self.millis / factor, suffix)
        return f"{self.millis}ms"
