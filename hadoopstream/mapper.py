"""The map side of a streaming job."""

from __future__ import annotations

from typing import IO, Any, BinaryIO, Iterable

from .context import Context, KeySerializer, _STRING
from .serializers import NoKey, Serializer
from .utils import merge_errors


class MapperContext(Context):
    """A context that hands out one record at a time."""

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
        super().__init__(reader, writer, key_in, value_in, key_out, value_out,
                         report_stream)
        self._value: Any = None

    def next_key_value(self) -> bool:
        """Advance to the next record; return False at end of input."""
        record = self.read_key_value()
        if record is None:
            return False
        self._key, self._value = record
        return True

    def current_value(self) -> Any:
        """Return the value of the current record."""
        return self._value


class Mapper:
    """Base mapper with default hooks; subclasses override what they need."""

    def setup(self, ctx: MapperContext) -> None:
        """Called once before the first record; checks the context's serializers."""
        ctx.check()

    def map(self, key: Any, value: Any, ctx: MapperContext) -> None:
        """Called for every record."""

    def cleanup(self, ctx: MapperContext) -> None:
        """Called once after the last record, even when mapping failed.

        The default confirms the context is still fully configured.
        """
        ctx.check()

    def fallback_read_error(self, error: Exception,
                            ctx: MapperContext) -> Exception | None:
        """Decide on a record that could not be read.

        Return ``None`` to skip the record, or an exception to stop the job.
        """
        return error


def run_mapper(mapper: Mapper, ctx: MapperContext) -> None:
    """Feed every record of ``ctx`` to ``mapper``.

    Errors from reading, mapping and cleanup are raised together after
    cleanup has run.
    """
    ctx.check()
    mapper.setup(ctx)
    error: BaseException | None = None
    while True:
        try:
            has_record = ctx.next_key_value()
        except Exception as read_error:
            try:
                error = mapper.fallback_read_error(read_error, ctx)
            except Exception as hook_error:
                error = hook_error
            if error is None:
                continue
            break
        if not has_record:
            break
        try:
            mapper.map(ctx.current_key(), ctx.current_value(), ctx)
        except Exception as map_error:
            error = map_error
            break
    cleanup_error: BaseException | None = None
    try:
        mapper.cleanup(ctx)
    except Exception as exc:
        cleanup_error = exc
    merged = merge_errors(error, cleanup_error)
    if merged is not None:
        raise merged