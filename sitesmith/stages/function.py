"""Hooks built from in-process callables."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sitesmith.errors import StageError
from sitesmith.stages.base import FOR_FILE, ON_FINISH, ON_START, WRITER


class FunctionStage:
    """A hook assembled from plain Python callables.

    Useful when embedding the builder in another program::

        FunctionStage("upper", writer=lambda raw: json.dumps({...}))
    """

    def __init__(
        self,
        label: str,
        *,
        writer: Callable[[str], Any] | None = None,
        on_start: Callable[[], Any] | None = None,
        on_finish: Callable[[], Any] | None = None,
        for_file: str | None = None,
    ) -> None:
        self.label = label
        self._entry_points: dict[str, Callable[..., Any]] = {}
        for name, fn in ((WRITER, writer), (ON_START, on_start), (ON_FINISH, on_finish)):
            if fn is not None:
                self._entry_points[name] = fn
        self._globals: dict[str, Any] = {FOR_FILE: for_file}
        self.closed = False

    def has_entry_point(self, name: str) -> bool:
        return name in self._entry_points

    def get_global(self, name: str) -> Any:
        return self._globals.get(name)

    def invoke(self, entry_point: str, *args: Any) -> Any:
        fn = self._entry_points.get(entry_point)
        if fn is None:
            raise StageError(self.label, entry_point, "entry point is not defined")
        try:
            return fn(*args)
        except Exception as e:
            raise StageError(self.label, entry_point, f"{type(e).__name__}: {e}") from e

    def close(self) -> None:
        self.closed = True
