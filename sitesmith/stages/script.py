"""Hooks written as standalone Python scripts."""

from __future__ import annotations

import importlib.util
import itertools
import logging
from pathlib import Path
from types import ModuleType
from typing import Any

from sitesmith.errors import StageError

logger = logging.getLogger(__name__)

_counter = itertools.count()


class ScriptStage:
    """A hook file executed once into its own private module namespace.

    The module is not registered in ``sys.modules``, so two hooks never share
    state even when their file names collide. Module-level variables persist
    across documents for the whole build.
    """

    def __init__(self, path: Path, working_dir: str = "") -> None:
        self.path = Path(path)
        self.label = self.path.name
        self._module: ModuleType | None = self._load(working_dir)

    def _load(self, working_dir: str) -> ModuleType:
        module_name = f"sitesmith_hook_{next(_counter)}_{self.path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, self.path)
        if spec is None or spec.loader is None:
            raise StageError(self.label, "load", "not a loadable Python file")

        module = importlib.util.module_from_spec(spec)
        module.workingdir = working_dir  # type: ignore[attr-defined]
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise StageError(self.label, "load", f"{type(e).__name__}: {e}") from e

        logger.debug("loaded hook %s", self.path)
        return module

    @property
    def module(self) -> ModuleType:
        if self._module is None:
            raise StageError(self.label, "access", "hook is closed")
        return self._module

    def has_entry_point(self, name: str) -> bool:
        return callable(getattr(self.module, name, None))

    def get_global(self, name: str) -> Any:
        return getattr(self.module, name, None)

    def invoke(self, entry_point: str, *args: Any) -> Any:
        fn = getattr(self.module, entry_point, None)
        if not callable(fn):
            raise StageError(self.label, entry_point, "entry point is not defined")
        try:
            return fn(*args)
        except Exception as e:
            raise StageError(self.label, entry_point, f"{type(e).__name__}: {e}") from e

    def close(self) -> None:
        self._module = None
