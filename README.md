# hadoopstream

A small framework for writing Hadoop Streaming mappers and reducers in Python.
Records arrive on standard input as lines. A line is either a bare value, or a
key and a value separated by a tab. Each key and value is decoded with a
serializer and then handed to your code. Whatever you write back goes to
standard output in the same format.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install .[test]
```

## Writing a mapper

Subclass `hadoopstream.mapper.Mapper`, override `map`, and run it with
`run_mapper` over a `MapperContext`:

```python
import sys

from hadoopstream.mapper import Mapper, MapperContext, run_mapper
from hadoopstream.serializers import IntSerializer, NoKey, StringSerializer


class WordLength(Mapper):
    def map(self, key, value, ctx):
        for word in value.split():
            ctx.write(word, len(word))


with MapperContext(
    sys.stdin.buffer,
    sys.stdout.buffer,
    NoKey,               # input records carry no key
    StringSerializer(),  # input values
    StringSerializer(),  # output keys
    IntSerializer(64),   # output values
    sys.stderr,          # where reporter lines go
) as ctx:
    run_mapper(WordLength(), ctx)
```

Leaving the context's `with` block flushes the writer.

A mapper can also override these hooks:

- `setup(ctx)` runs once before the first record. By default it calls
  `ctx.check()`.
- `cleanup(ctx)` runs once after the last record, even when `map` raised. By
  default it calls `ctx.check()`.
- `fallback_read_error(error, ctx)` is called when a record cannot be decoded.
  Return `None` to skip that record and go on. Return an exception, or raise
  one, to stop the job. The default returns the error it was given.

`run_mapper` raises after `cleanup` has run. If both the loop and `cleanup`
failed, it raises a `hadoopstream.utils.MultiError` that holds both errors.

## Writing a reducer

A reducer is given the values of each run of consecutive records that share a
key. Input must already be sorted or grouped by key. Hadoop's shuffle does this
for you.

```python
from hadoopstream.reducer import Reducer


class Sum(Reducer):
    def reduce(self, key, values, ctx):
        ctx.write(key, sum(values))
```

Run it with `run_reducer` over a `ReducerContext`. Its constructor takes the
same arguments as `MapperContext`. `values` is a `ReducerValues` iterator. It
stops at the first record with a different key, and that record starts the
next group. It also stops at end of input, or quietly at a record that cannot
be read. The job then ends unless `fallback_read_error` lets it go on.

The hooks `setup`, `cleanup` and `fallback_read_error` work as they do for
mappers.

## Contexts

`Context`, the common base of both context classes, provides:

- `read_key_value()` returns the next non-empty record as a `(key, value)`
  pair, or `None` at end of input. When records are keyed, a line without a tab
  is read as a value whose key is `None`. Windows line endings are accepted.
- `write(key, value)` writes one record. If the key is `None`, or if it
  serializes to nothing, the line holds only the value. In that case no tab is
  written either.
- `check()` raises `ContextError` when a required serializer is `None`.
- `current_key()` returns the key of the current record.
- `close()` flushes the writer.

Pass `NoKey` as the key serializer when records carry no key at all.

## Serializers

`hadoopstream.serializers.serializer_for(type_name)` returns the serializer for
a type name:

| Type name | Serializer |
|---|---|
| `bool` | `BoolSerializer` |
| `string` | `StringSerializer` |
| `int`, `int8`, `int16`, `int32`, `int64` | `IntSerializer` (`int` is 64-bit) |
| `uint`, `uint8`, `uint16`, `uint32`, `uint64` | `UintSerializer` (`uint` is 64-bit) |
| `float32`, `float64` | `FloatSerializer` |
| `complex64`, `complex128` | `ComplexSerializer` |
| `map`, `array`, `json` | `JsonSerializer` |

An unknown type name raises `ValueError`.

The serializers write values as follows:

- Integers are written in base 10, and each serializer enforces the range of
  its bit width.
- Floats are written in plain decimal notation in their shortest form. `NaN`,
  `+Inf` and `-Inf` are used for the special values.
- Complex numbers are written as `(real+imagi)`.
- Booleans are written as `true` or `false`. When reading, `1`, `t`, `T`,
  `TRUE`, `true` and `True` are accepted for true, and the matching spellings
  for false.
- JSON is compact and has sorted keys. `map` only accepts objects when
  reading, and `array` only accepts lists.

A value that cannot be converted raises `SerializationError`, which is a
subclass of `ValueError`.

## Counters and status

`ctx.counter(group, name).increment(n)` and `ctx.set_status(message)` write
Hadoop's `reporter:counter:` and `reporter:status:` lines. They go to the
context's report stream, or to standard error when none was given.

## Command-line tools

`hadoopstream-simple` echoes typed records back out unchanged. It is useful for
checking how input decodes and how errors are handled:

```
hadoopstream-simple -type int < numbers.txt
hadoopstream-simple -type int -skip-err < numbers.txt
hadoopstream-simple -type map -key < keyed.txt
hadoopstream-simple -type string -key -reducer < sorted.txt
```

Options (each one also has a `--` spelling):

- `-type` takes one of the type names above. The default is `string`.
- `-key` reads and writes tab-separated lines with a string key.
- `-skip-err` skips records that fail to decode instead of stopping.
- `-reducer` runs in reducer mode instead of mapper mode.

On an error it prints the message to standard error and exits with status 1.
`hadoopstream.cli.build_application` builds the same job for use from code.

`hadoopstream-readlines` prints each newline-terminated line of standard input
as a list of byte values, with the line ending removed, for example `[104 105]`.
A final line with no newline is not printed.

```
hadoopstream-readlines < input.txt
```

## What it does not do

The package covers only the code that runs inside a streaming task. It does not:

- submit jobs to a cluster;
- sort or shuffle records between the map and reduce sides;
- launch the Hadoop Streaming tool.