"""Command that echoes records through a mapper or reducer of a chosen type."""

from __future__ import annotations

import argparse
import sys
from typing import IO, Any, BinaryIO, Iterable

from .app import Application, Mode
from .mapper import Mapper, MapperContext, run_mapper
from .reducer import Reducer, ReducerContext, ReducerValues, run_reducer
from .serializers import NoKey, StringSerializer, serializer_for

TYPE_HELP = "bool,string,int,uint,float64,complex64,map,array"


class EchoMapper(Mapper):
    """Writes every record back unchanged."""

    def __init__(self, skip_errors: bool = False) -> None:
        self.skip_errors = skip_errors

    def map(self, key: Any, value: Any, ctx: MapperContext) -> None:
        ctx.write(key, value)

    def fallback_read_error(self, error: Exception,
                            ctx: MapperContext) -> Exception | None:
        return None if self.skip_errors else error


class EchoReducer(Reducer):
    """Writes every value of every key group back with its key."""

    def __init__(self, skip_errors: bool = False) -> None:
        self.skip_errors = skip_errors

    def reduce(self, key: Any, values: ReducerValues, ctx: ReducerContext) -> None:
        for value in values:
            ctx.write(key, value)

    def fallback_read_error(self, error: Exception,
                            ctx: ReducerContext) -> Exception | None:
        return None if self.skip_errors else error


def build_application(
    type_name: str,
    with_key: bool = False,
    skip_errors: bool = False,
    stdin: Iterable[bytes] | None = None,
    stdout: BinaryIO | None = None,
    stderr: IO[str] | None = None,
) -> Application:
    """Build an application echoing values of ``type_name``.

    Records are keyed by strings when ``with_key`` is set.  Streams left
    out default to the process's standard streams when a runner starts.
    """

    def make_context(context_class):
        value = serializer_for(type_name)
        key = StringSerializer() if with_key else NoKey
        return context_class(
            stdin if stdin is not None else sys.stdin.buffer,
            stdout if stdout is not None else sys.stdout.buffer,
            key,
            value,
            key,
            value,
            stderr if stderr is not None else sys.stderr,
        )

    def run_map() -> None:
        with make_context(MapperContext) as ctx:
            run_mapper(EchoMapper(skip_errors), ctx)

    def run_reduce() -> None:
        with make_context(ReducerContext) as ctx:
            run_reducer(EchoReducer(skip_errors), ctx)

    return Application().with_mapper(run_map).with_reducer(run_reduce)


def main(argv: list[str] | None = None) -> int:
    """Run the echo job from the command line; return the exit status."""
    parser = argparse.ArgumentParser(
        prog="hadoopstream",
        description="Echo streaming records through a typed mapper or reducer.",
    )
    parser.add_argument("-key", "--key", dest="key", action="store_true",
                        help="records carry a string key before a tab")
    parser.add_argument("-type", "--type", dest="type_name", default="string",
                        help=TYPE_HELP)
    parser.add_argument("-skip-err", "--skip-err", dest="skip_err",
                        action="store_true", help="skip records that cannot be read")
    parser.add_argument("-reducer", "--reducer", dest="reducer",
                        action="store_true", help="run as reducer instead of mapper")
    args = parser.parse_args(argv)

    mode = Mode.REDUCER if args.reducer else Mode.MAPPER
    app = build_application(args.type_name, args.key, args.skip_err)
    try:
        app.run(mode)
    except Exception as error:
        print(error, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())