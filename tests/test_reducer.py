import io

import pytest

from hadoopstream.context import ContextError
from hadoopstream.reducer import Reducer, ReducerContext, run_reducer
from hadoopstream.serializers import (
    IntSerializer,
    NoKey,
    SerializationError,
    StringSerializer,
)
from hadoopstream.utils import MultiError


def make_ctx(data, keyed=True, value=None):
    key = StringSerializer() if keyed else NoKey
    value = IntSerializer() if value is None else value
    out = io.BytesIO()
    ctx = ReducerContext(io.BytesIO(data), out, key, value, key, value, io.StringIO())
    return ctx, out


class Collect(Reducer):
    def __init__(self, skip=False):
        self.skip = skip
        self.groups = []
        self.events = []

    def setup(self, ctx):
        self.events.append("setup")

    def reduce(self, key, values, ctx):
        self.groups.append((key, list(values)))

    def cleanup(self, ctx):
        self.events.append("cleanup")

    def fallback_read_error(self, error, ctx):
        return None if self.skip else error


def test_groups_consecutive_keys():
    ctx, _ = make_ctx(b"a\t1\na\t2\nb\t3\n")
    reducer = Collect()
    run_reducer(reducer, ctx)
    assert reducer.groups == [("a", [1, 2]), ("b", [3])]
    assert reducer.events == ["setup", "cleanup"]


def test_without_keys_everything_is_one_group():
    ctx, _ = make_ctx(b"1\n\n2\r\n3", keyed=False)
    reducer = Collect()
    run_reducer(reducer, ctx)
    assert reducer.groups == [(NoKey(), [1, 2, 3])]


def test_read_error_at_group_start_is_raised_after_cleanup():
    ctx, _ = make_ctx(b"bad\na\t1\n")
    reducer = Collect()
    with pytest.raises(SerializationError):
        run_reducer(reducer, ctx)
    assert reducer.events == ["setup", "cleanup"]
    assert reducer.groups == []


def test_read_error_skipped_by_fallback():
    ctx, _ = make_ctx(b"bad\na\t1\na\t2\n")
    reducer = Collect(skip=True)
    run_reducer(reducer, ctx)
    assert reducer.groups == [("a", [1, 2])]


def test_error_inside_group_ends_the_job_quietly():
    ctx, _ = make_ctx(b"a\t1\na\tbad\nb\t3\n")
    reducer = Collect()
    run_reducer(reducer, ctx)
    assert reducer.groups == [("a", [1])]


def test_reduce_and_cleanup_errors_are_merged():
    class Failing(Reducer):
        def reduce(self, key, values, ctx):
            raise RuntimeError("reduce failed")

        def cleanup(self, ctx):
            raise KeyError("cleanup failed")

    ctx, _ = make_ctx(b"a\t1\n")
    with pytest.raises(MultiError) as info:
        run_reducer(Failing(), ctx)
    assert [type(e) for e in info.value.errors] == [RuntimeError, KeyError]


def test_check_fails_before_setup():
    out = io.BytesIO()
    ctx = ReducerContext(io.BytesIO(b"1\n"), out, NoKey, None, NoKey, IntSerializer())
    reducer = Collect()
    with pytest.raises(ContextError):
        run_reducer(reducer, ctx)
    assert reducer.events == []


def test_values_iterator_stays_exhausted():
    ctx, _ = make_ctx(b"a\t1\nb\t2\n")
    assert ctx.next_key_value() is True
    values = ctx.values()
    assert list(values) == [1]
    with pytest.raises(StopIteration):
        next(values)
    assert ctx.next_key_value() is True
    assert ctx.current_key() == "b"
    assert list(ctx.values()) == [2]
    assert ctx.next_key_value() is False


def test_reset_resumes_after_iteration_error():
    ctx, _ = make_ctx(b"a\t1\na\tbad\nb\t3\n")
    assert ctx.next_key_value() is True
    assert list(ctx.values()) == [1]
    assert ctx.next_key_value() is False
    ctx.reset()
    assert ctx.next_key_value() is True
    assert ctx.current_key() == "b"
    assert list(ctx.values()) == [3]


def test_written_records_round_trip():
    class Echo(Reducer):
        def reduce(self, key, values, ctx):
            for value in values:
                ctx.write(key, value)

    data = b"a\t1\na\t2\nb\t3\n"
    ctx, out = make_ctx(data)
    with ctx:
        run_reducer(Echo(), ctx)
    assert out.getvalue() == data