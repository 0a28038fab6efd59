"""Dispatch a streaming job to its mapper or reducer."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable

Runner = Callable[[], Any]


class Mode(str, Enum):
    """Which side of the job to run."""

    MAPPER = "mapper"
    REDUCER = "reducer"


class ApplicationError(Exception):
    """The requested mode cannot be run."""


class Application:
    """Holds the mapper and reducer runners and starts one of them."""

    def __init__(self) -> None:
        self.mapper: Runner | None = None
        self.reducer: Runner | None = None

    def with_mapper(self, mapper: Runner) -> Application:
        """Set the mapper runner and return this application."""
        self.mapper = mapper
        return self

    def with_reducer(self, reducer: Runner) -> Application:
        """Set the reducer runner and return this application."""
        self.reducer = reducer
        return self

    def run(self, mode: Mode | str) -> Any:
        """Run the runner for ``mode`` and return what it returns."""
        try:
            selected = Mode(mode)
        except ValueError:
            raise ApplicationError(f"unknown mode: {mode}") from None
        runner = self.mapper if selected is Mode.MAPPER else self.reducer
        if runner is None:
            raise ApplicationError(f"{selected.value} is not set")
        return runner()