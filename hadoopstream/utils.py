"""Line reading and error aggregation helpers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class MultiError(Exception):
    """Several errors gathered into a single exception."""

    def __init__(self, *args: BaseException | None) -> None:
        super().__init__()
        self.errors: list[BaseException] = []
        self.add(*args)

    def add(self, *args: BaseException | None) -> None:
        """Add errors, skipping ``None`` and flattening nested MultiErrors."""
        for error in args:
            if error is None:
                continue
            if isinstance(error, MultiError):
                self.errors.extend(error.errors)
            else:
                self.errors.append(error)

    def collapse(self) -> BaseException | None:
        """Return ``None``, the only error, or this MultiError itself."""
        if not self.errors:
            return None
        if len(self.errors) == 1:
            return self.errors[0]
        return self

    def __str__(self) -> str:
        details = "".join(f"\n - {error}" for error in self.errors)
        return f"Multiple errors occurred:{details}"


def read_lines(stream: Iterable[bytes]) -> Iterator[bytes]:
    """Yield the lines of a binary stream without their line endings.

    A trailing ``\\n`` is removed, and a ``\\r`` right before it as well.
    A final line without a newline is yielded when it is not empty.
    """
    for line in stream:
        if line.endswith(b"\n"):
            line = line[:-1]
            if line.endswith(b"\r"):
                line = line[:-1]
        yield line


def merge_errors(*args: BaseException | None) -> BaseException | None:
    """Combine errors into nothing, a single error, or a MultiError."""
    return MultiError(*args).collapse()