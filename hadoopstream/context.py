"""Shared record reading, writing and reporting for mappers and reducers."""

from __future__ import annotations

import sys
from typing import IO, Any, BinaryIO, Iterable

from .serializers import NoKey, Serializer, StringSerializer
from .utils import read_lines

_STRING = StringSerializer()

KeySerializer = Serializer | NoKey | type[NoKey] | None


def _is_no_key(marker: Any) -> bool:
    return marker is NoKey or isinstance(marker, NoKey)


class Counter:
    """A named job counter reported through the streaming protocol."""

    def __init__(self, group: str, name: str, stream: IO[str] | None = None) -> None:
        self.group = group
        self.name = name
        self.stream = stream

    def increment(self, amount: int) -> None:
        """Report that the counter grew by ``amount``."""
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(f"reporter:counter:{self.group},{self.name},{amount}\n")


class ContextError(Exception):
    """The context is not set up to read or write records."""


class Context:
    """Reads ``key<TAB>value`` records from a stream and writes records back.

    A key serializer of ``NoKey`` means the records carry no key at all;
    ``None`` means the serializer is missing, which :meth:`check` reports.
    """

    def __init__(
        self,
        reader: Iterable[bytes],
        writer: BinaryIO,
        key_in: KeySerializer = NoKey,
        value_in: Serializer | None = _STRING,
        key_out: KeySerializer = NoKey,
        value_out: Serializer | None = _STRING,
        report_stream: IO[str] | None = None,
    ) -> None:
        self.writer = writer
        self.key_in = key_in
        self.value_in = value_in
        self.key_out = key_out
        self.value_out = value_out
        self.report_stream = report_stream
        self._lines = read_lines(reader)
        self._no_key_in = _is_no_key(key_in)
        self._no_key_out = _is_no_key(key_out)
        self._key: Any = NoKey() if self._no_key_in else None

    def current_key(self) -> Any:
        """Return the key of the current record."""
        return self._key

    def read_key_value(self) -> tuple[Any, Any] | None:
        """Read the next non-empty record, or return ``None`` at end of input.

        A line without a tab holds only a value; its key is ``None``.
        """
        for line in self._lines:
            if line:
                break
        else:
            return None
        if self._no_key_in:
            return NoKey(), self.value_in.deserialize(line)
        key_bytes, separator, value_bytes = line.partition(b"\t")
        if not separator:
            return None, self.value_in.deserialize(line)
        key = self.key_in.deserialize(key_bytes)
        return key, self.value_in.deserialize(value_bytes)

    def counter(self, group: str, name: str) -> Counter:
        """Return the counter ``name`` in ``group``."""
        return Counter(group, name, self.report_stream)

    def set_status(self, message: str) -> None:
        """Report a status message for the task."""
        stream = self.report_stream if self.report_stream is not None else sys.stderr
        stream.write(f"reporter:status:{message}\n")

    def check(self) -> None:
        """Raise ContextError if a needed serializer is missing."""
        if self.key_in is None and not self._no_key_in:
            raise ContextError("key in serializer is nil")
        if self.value_in is None:
            raise ContextError("value in serializer is nil")
        if self.key_out is None and not self._no_key_out:
            raise ContextError("key out serializer is nil")
        if self.value_out is None:
            raise ContextError("value out serializer is nil")

    def write(self, key: Any, value: Any) -> None:
        """Write one record; an empty or absent key is left out with its tab."""
        key_data = b""
        if not self._no_key_out and key is not None:
            key_data = self.key_out.serialize(key)
        value_data = self.value_out.serialize(value)
        if key_data:
            self.writer.write(key_data + b"\t")
        self.writer.write(value_data + b"\n")

    def close(self) -> None:
        """Flush everything written so far."""
        self.writer.flush()

    def __enter__(self) -> Context:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()