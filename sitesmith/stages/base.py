"""Stage execution context interface."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

# Entry point names a hook may define.
ON_START = "on_start"
ON_FINISH = "on_finish"
WRITER = "writer"
# Global holding the single logical document name a hook applies to.
FOR_FILE = "FOR_FILE"


@runtime_checkable
class StageContext(Protocol):
    """A live, stateful hook instance kept for the whole build."""

    label: str

    def has_entry_point(self, name: str) -> bool: ...

    def get_global(self, name: str) -> Any: ...

    def invoke(self, entry_point: str, *args: Any) -> Any: ...

    def close(self) -> None: ...
