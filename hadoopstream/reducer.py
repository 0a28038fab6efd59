"""The reduce side of a streaming job."""

from __future__ import annotations

from typing import IO, Any, BinaryIO, Iterable, Iterator

from .context import Context, KeySerializer, _STRING
from .serializers import NoKey, Serializer
from .utils import merge_errors

_MISSING: Any = object()


class ReducerValues:
    """Iterates over the values of consecutive records that share one key.

    Iteration stops at the first record with a different key, which is
    handed back to the context as the start of the next group.  It also
    stops, quietly, at end of input or at a record that cannot be read.
    """

    def __init__(self, ctx: ReducerContext, key: Any, pending: Any = _MISSING) -> None:
        self._ctx = ctx
        self._key = key
        self._pending = pending
        self._done = False

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        if self._pending is _MISSING and not self._advance():
            raise StopIteration
        value = self._pending
        self._pending = _MISSING
        return value

    def _advance(self) -> bool:
        if self._done:
            return False
        ctx = self._ctx
        try:
            record = ctx.read_key_value()
        except Exception:
            record = None
        if record is None:
            ctx._halted = True
            self._done = True
            return False
        key, value = record
        if key != self._key:
            ctx._key = key
            ctx._pending = value
            self._done = True
            return False
        self._pending = value
        return True


class ReducerContext(Context):
    """A context that hands out records grouped by key."""

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
        self._pending: Any = _MISSING
        self._halted = False

    def reset(self) -> None:
        """Forget the pending record and any stop caused by iteration."""
        self._halted = False
        self._pending = _MISSING

    def next_key_value(self) -> bool:
        """Advance to the next key group; return False when there is none."""
        if self._halted:
            return False
        if self._pending is not _MISSING:
            return True
        record = self.read_key_value()
        if record is None:
            return False
        self._key, self._pending = record
        return True

    def values(self) -> ReducerValues:
        """Return an iterator over the values of the current key group."""
        values = ReducerValues(self, self._key, self._pending)
        self._pending = _MISSING
        return values


class Reducer:
    """Base reducer with default hooks; subclasses override what they need."""

    def setup(self, ctx: ReducerContext) -> None:
        """Called once before the first key group; checks the context's serializers."""
        ctx.check()

    def reduce(self, key: Any, values: ReducerValues, ctx: ReducerContext) -> None:
        """Called for every key group."""

    def cleanup(self, ctx: ReducerContext) -> None:
        """Called once after the last group, even when reducing failed.

        The default confirms the context is still fully configured.
        """
        ctx.check()

    def fallback_read_error(self, error: Exception,
                            ctx: ReducerContext) -> Exception | None:
        """Decide on a record that could not be read.

        Return ``None`` to skip the record, or an exception to stop the job.
        """
        return error


def run_reducer(reducer: Reducer, ctx: ReducerContext) -> None:
    """Feed every key group of ``ctx`` to ``reducer``.

    Errors from reading, reducing and cleanup are raised together after
    cleanup has run.
    """
    ctx.check()
    reducer.setup(ctx)
    error: BaseException | None = None
    while True:
        try:
            has_group = ctx.next_key_value()
        except Exception as read_error:
            try:
                error = reducer.fallback_read_error(read_error, ctx)
            except Exception as hook_error:
                error = hook_error
            if error is None:
                ctx.reset()
                continue
            break
        if not has_group:
            break
        try:
            reducer.reduce(ctx.current_key(), ctx.values(), ctx)
        except Exception as reduce_error:
            error = reduce_error
            break
    cleanup_error: BaseException | None = None
    try:
        reducer.cleanup(ctx)
    except Exception as exc:
        cleanup_error = exc
    merged = merge_errors(error, cleanup_error)
    if merged is not None:
        raise merged